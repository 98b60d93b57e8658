"""In-process registry that dispatches named contexts to versioned protocols."""

from context_protocol.exceptions import (
    ContextNotFoundError,
    ContextProtocolError,
    InvalidArgumentError,
    NotFoundError,
    ProtocolNotFoundError,
    ValidationFailedError,
)
from context_protocol.handlers import FunctionHandlers, ProtocolHandlers
from context_protocol.logging_config import configure_logging
from context_protocol.models import Context, Protocol, protocol_key
from context_protocol.registry import (
    ContextProtocolRegistry,
    context_protocol_registry,
    register_protocol_handlers,
)

__all__ = [
    # Records
    "Context",
    "Protocol",
    "protocol_key",
    # Handlers
    "ProtocolHandlers",
    "FunctionHandlers",
    # Registry
    "ContextProtocolRegistry",
    "context_protocol_registry",
    "register_protocol_handlers",
    # Logging
    "configure_logging",
    # Errors
    "ContextProtocolError",
    "InvalidArgumentError",
    "NotFoundError",
    "ContextNotFoundError",
    "ProtocolNotFoundError",
    "ValidationFailedError",
]
