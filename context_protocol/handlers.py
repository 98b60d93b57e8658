"""Handler bundles attached to protocols.

A bundle answers three questions about a context:
- validate_context: may this protocol run on it? (sync, required)
- process_context: what does it produce? (async, required)
- transform_output: how is that result reshaped? (sync, optional)

Subclass ProtocolHandlers for stateful handlers, or wrap plain callables
with FunctionHandlers.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from context_protocol.models import Context


class ProtocolHandlers(ABC):
    """Capability set the registry invokes when dispatching a context.

    The registry treats implementations as opaque and never catches
    what they raise.
    """

    @abstractmethod
    def validate_context(self, context: Context) -> bool:
        """Return True when the context may be processed."""
        ...

    @abstractmethod
    async def process_context(self, context: Context) -> Any:
        """Produce the protocol's result for a validated context."""
        ...

    def transform_output(self, output: Any) -> Any:
        """Reshape the processing result. Identity unless overridden."""
        return output

    @property
    def has_transform(self) -> bool:
        """Whether this bundle supplies its own transform_output."""
        return type(self).transform_output is not ProtocolHandlers.transform_output


@dataclass
class FunctionHandlers(ProtocolHandlers):
    """Handler bundle built from plain callables.

    ``process`` may be a coroutine function, or a plain function returning
    either an awaitable or a ready value.

    Usage:
        handlers = FunctionHandlers(
            validate=lambda ctx: isinstance(ctx.data, str),
            process=upper_async,
            transform=lambda out: out + "!",
        )
    """

    validate: Callable[[Context], bool]
    process: Callable[[Context], Awaitable[Any] | Any]
    transform: Callable[[Any], Any] | None = None

    def validate_context(self, context: Context) -> bool:
        return self.validate(context)

    async def process_context(self, context: Context) -> Any:
        result = self.process(context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def transform_output(self, output: Any) -> Any:
        if self.transform is None:
            return output
        return self.transform(output)

    @property
    def has_transform(self) -> bool:
        return self.transform is not None


__all__ = ["ProtocolHandlers", "FunctionHandlers"]
