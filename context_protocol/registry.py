"""Registry and dispatcher for contexts and protocols.

Two independent stores live here:
- contexts, keyed by context id
- protocols, keyed by ``name@version``

Re-registering an existing key replaces the stored entry; there is no
duplicate error. ``process_context`` runs a fixed pipeline per call:
lookup context -> lookup protocol -> validate -> process -> optional
transform -> return.

The registry is meant for single-threaded use. Callers sharing one
instance across threads must synchronize externally.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from context_protocol.config import get_settings
from context_protocol.events import get_event_sink
from context_protocol.exceptions import (
    ContextNotFoundError,
    ContextProtocolError,
    InvalidArgumentError,
    ProtocolNotFoundError,
    ValidationFailedError,
)
from context_protocol.handlers import ProtocolHandlers
from context_protocol.logging_config import reset_dispatch_context, set_dispatch_context
from context_protocol.models import Context, Protocol, protocol_key

logger = logging.getLogger("registry")


def _has_transform(handlers: Any) -> bool:
    # Duck-typed bundles without has_transform are treated as transform-less
    return bool(getattr(handlers, "has_transform", False))


class ContextProtocolRegistry:
    """Central registry for contexts and the protocols that process them."""

    def __init__(self) -> None:
        self._contexts: dict[str, Context] = {}
        self._protocols: dict[str, Protocol] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_context(self, context: Context) -> None:
        """Store a context under its id.

        Args:
            context: The context to register

        Raises:
            InvalidArgumentError: If id or type is empty or absent
        """
        context_id = getattr(context, "id", None)
        context_type = getattr(context, "type", None)
        if not context_id or not context_type:
            raise InvalidArgumentError(
                "Context must have an id and type",
                field="type" if context_id else "id",
            )

        overwritten = context_id in self._contexts
        self._contexts[context_id] = context

        logger.debug(
            "Context registered",
            extra={
                "service": "registry",
                "context_id": context_id,
                "context_type": context_type,
                "overwritten": overwritten,
            },
        )
        get_event_sink().try_emit(
            type="context.registered",
            data={"context_id": context_id, "context_type": context_type, "overwritten": overwritten},
        )

    def register_protocol(self, protocol: Protocol) -> None:
        """Store a protocol under ``name@version``.

        Args:
            protocol: The protocol to register

        Raises:
            InvalidArgumentError: If name or version is empty or absent
        """
        name = getattr(protocol, "name", None)
        version = getattr(protocol, "version", None)
        if not name or not version:
            raise InvalidArgumentError(
                "Protocol must have a name and version",
                field="version" if name else "name",
            )

        key = protocol_key(name, version)
        has_transform = _has_transform(getattr(protocol, "handlers", None))
        overwritten = key in self._protocols
        self._protocols[key] = protocol

        logger.debug(
            "Protocol registered",
            extra={
                "service": "registry",
                "protocol_key": key,
                "has_transform": has_transform,
                "overwritten": overwritten,
            },
        )
        get_event_sink().try_emit(
            type="protocol.registered",
            data={"protocol_key": key, "overwritten": overwritten},
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def process_context(
        self,
        context_id: str,
        protocol_name: str,
        protocol_version: str,
    ) -> Any:
        """Run a registered protocol against a registered context.

        Args:
            context_id: Id of a registered context
            protocol_name: Protocol name
            protocol_version: Protocol version, matched exactly

        Returns:
            The processing result, passed through transform_output when the
            protocol's handlers supply one

        Raises:
            ContextNotFoundError: If no context has this id
            ProtocolNotFoundError: If no protocol has this name and version
            ValidationFailedError: If validate_context returns False

        Anything raised by the protocol's handlers propagates unchanged.
        """
        key = protocol_key(protocol_name, protocol_version)
        dispatch_id = uuid4().hex
        tokens = set_dispatch_context(dispatch_id, context_id, key)
        started = time.perf_counter()
        try:
            result = await self._dispatch(context_id, protocol_name, protocol_version)
        except Exception as exc:
            duration_ms = int((time.perf_counter() - started) * 1000)
            error_code = exc.code if isinstance(exc, ContextProtocolError) else type(exc).__name__
            logger.warning(
                "Context processing failed",
                extra={
                    "service": "registry",
                    "duration_ms": duration_ms,
                    "error_code": error_code,
                    "error_message": str(exc),
                },
            )
            get_event_sink().try_emit(
                type="context.process_failed",
                data={
                    "dispatch_id": dispatch_id,
                    "context_id": context_id,
                    "protocol_key": key,
                    "error_code": error_code,
                    "duration_ms": duration_ms,
                },
            )
            raise
        finally:
            reset_dispatch_context(tokens)

        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Context processed",
            extra={
                "service": "registry",
                "dispatch_id": dispatch_id,
                "context_id": context_id,
                "protocol_key": key,
                "duration_ms": duration_ms,
                "status": "ok",
            },
        )
        get_event_sink().try_emit(
            type="context.processed",
            data={
                "dispatch_id": dispatch_id,
                "context_id": context_id,
                "protocol_key": key,
                "duration_ms": duration_ms,
            },
        )
        return result

    async def _dispatch(self, context_id: str, protocol_name: str, protocol_version: str) -> Any:
        context = self._contexts.get(context_id)
        if context is None:
            raise ContextNotFoundError(context_id)

        protocol = self._protocols.get(protocol_key(protocol_name, protocol_version))
        if protocol is None:
            raise ProtocolNotFoundError(protocol_name, protocol_version)

        handlers = protocol.handlers

        extra: dict[str, Any] = {"service": "registry", "context_type": context.type}
        if get_settings().log_context_payloads:
            extra["data"] = context.data
            extra["metadata"] = context.metadata
        logger.debug("Dispatching context", extra=extra)

        if not handlers.validate_context(context):
            raise ValidationFailedError(context.id, protocol.key)

        result = await handlers.process_context(context)
        if _has_transform(handlers):
            return handlers.transform_output(result)
        return result

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_contexts(self) -> list[Context]:
        """Snapshot of all registered contexts, in registration order."""
        return list(self._contexts.values())

    def get_protocols(self) -> list[Protocol]:
        """Snapshot of all registered protocols, in registration order."""
        return list(self._protocols.values())

    def get_context(self, context_id: str) -> Context | None:
        """Get a context by id, or None if not registered."""
        return self._contexts.get(context_id)

    def get_protocol(self, name: str, version: str) -> Protocol | None:
        """Get a protocol by exact name and version, or None if not registered."""
        return self._protocols.get(protocol_key(name, version))

    def has_context(self, context_id: str) -> bool:
        return context_id in self._contexts

    def has_protocol(self, name: str, version: str) -> bool:
        return protocol_key(name, version) in self._protocols

    def list_protocol_keys(self) -> list[str]:
        """List all registered ``name@version`` keys."""
        return list(self._protocols.keys())

    def list_with_details(self) -> list[dict[str, str | bool]]:
        """List all protocols with their details.

        Returns:
            List of dicts with key, name, version, and has_transform
        """
        return [
            {
                "key": key,
                "name": protocol.name,
                "version": protocol.version,
                "has_transform": _has_transform(protocol.handlers),
            }
            for key, protocol in self._protocols.items()
        ]

    def clear(self) -> None:
        """Clear all contexts and protocols.

        WARNING: This is primarily for testing.
        """
        self._contexts.clear()
        self._protocols.clear()


# Global registry instance
context_protocol_registry = ContextProtocolRegistry()


def register_protocol_handlers(
    name: str,
    version: str,
    *,
    registry: ContextProtocolRegistry | None = None,
) -> Callable[[type[ProtocolHandlers]], type[ProtocolHandlers]]:
    """Decorator to register a ProtocolHandlers subclass as a protocol.

    The class is instantiated with no arguments.

    Usage:
        @register_protocol_handlers("summarize", "1.0")
        class SummarizeHandlers(ProtocolHandlers):
            ...
    """

    def decorator(handlers_class: type[ProtocolHandlers]) -> type[ProtocolHandlers]:
        target = registry if registry is not None else context_protocol_registry
        target.register_protocol(
            Protocol(name=name, version=version, handlers=handlers_class())
        )
        return handlers_class

    return decorator


__all__ = [
    "ContextProtocolRegistry",
    "context_protocol_registry",
    "register_protocol_handlers",
]
