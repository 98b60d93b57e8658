"""Context and Protocol records held by the registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from context_protocol.handlers import ProtocolHandlers


def protocol_key(name: str, version: str) -> str:
    """Composite key addressing a protocol, e.g. ``summarize@1.0``."""
    return f"{name}@{version}"


@dataclass
class Context:
    """A data payload identified by a unique id and a type tag.

    ``data`` is opaque to the registry. Instances are stored by reference,
    so mutations made after registration are visible to later dispatches.
    """

    id: str
    type: str
    data: Any = None
    metadata: dict[str, Any] | None = None


@dataclass
class Protocol:
    """A named, versioned bundle of validate/process/transform behaviour."""

    name: str
    version: str
    handlers: ProtocolHandlers

    @property
    def key(self) -> str:
        return protocol_key(self.name, self.version)


__all__ = ["Context", "Protocol", "protocol_key"]
