"""Structured JSON logging configuration."""

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any

from context_protocol.config import Settings, get_settings

# Context variables for dispatch tracing
dispatch_id_var: ContextVar[str | None] = ContextVar("dispatch_id", default=None)
context_id_var: ContextVar[str | None] = ContextVar("context_id", default=None)
protocol_key_var: ContextVar[str | None] = ContextVar("protocol_key", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add service from extra or derive from logger name
        log_data["service"] = getattr(record, "service", record.name.split(".")[0])

        # Add context from context variables
        if dispatch_id := dispatch_id_var.get():
            log_data["dispatch_id"] = dispatch_id
        if context_id := context_id_var.get():
            log_data["context_id"] = context_id
        if protocol_key := protocol_key_var.get():
            log_data["protocol_key"] = protocol_key

        # Add extra fields from record
        extra_fields = [
            "dispatch_id",
            "context_id",
            "context_type",
            "protocol_key",
            "protocol_name",
            "protocol_version",
            "overwritten",
            "has_transform",
            "duration_ms",
            "error_code",
            "error_message",
            "error",
            "event_type",
            "operation",
            "status",
            "data",
            "metadata",
            "environment",
            "log_level",
            "debug_namespaces",
            "log_context_payloads",
            "event_sink",
        ]
        for field in extra_fields:
            if hasattr(record, field) and getattr(record, field) is not None:
                log_data[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class NamespaceFilter(logging.Filter):
    """Filter that enables debug logging for specific namespaces.

    Records from enabled namespaces always pass; everything else must reach
    the configured level.
    """

    def __init__(self, debug_namespaces: list[str], level: int = logging.INFO):
        super().__init__()
        self.debug_namespaces = set(debug_namespaces)
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        namespace = record.name.split(".")[0]
        if namespace in self.debug_namespaces:
            return True
        return record.levelno >= self.level


def setup_logging(log_level: str = "INFO", debug_namespaces: list[str] | None = None) -> None:
    """Configure structured logging for the registry.

    Args:
        log_level: Default log level (DEBUG, INFO, WARNING, ERROR)
        debug_namespaces: List of namespaces to enable DEBUG logging for
    """

    debug_namespaces = debug_namespaces or []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())
    handler.addFilter(NamespaceFilter(debug_namespaces, logging.getLevelName(log_level)))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)  # Let filter handle level

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger = logging.getLogger("logging")
    logger.info(
        "Logging configured",
        extra={
            "service": "logging",
            "log_level": log_level,
            "debug_namespaces": debug_namespaces,
        },
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure logging from settings and log the effective configuration."""

    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.debug_namespaces)
    settings.log_config_summary()


def set_dispatch_context(
    dispatch_id: str,
    context_id: str,
    protocol_key: str,
) -> tuple[Token[str | None], ...]:
    """Set context variables for dispatch tracing.

    Returns the tokens to hand back to reset_dispatch_context.
    """

    return (
        dispatch_id_var.set(dispatch_id),
        context_id_var.set(context_id),
        protocol_key_var.set(protocol_key),
    )


def reset_dispatch_context(tokens: tuple[Token[str | None], ...]) -> None:
    """Restore dispatch context variables to their values before set_dispatch_context."""

    dispatch_token, context_token, protocol_token = tokens
    dispatch_id_var.reset(dispatch_token)
    context_id_var.reset(context_token)
    protocol_key_var.reset(protocol_token)


__all__ = [
    "StructuredFormatter",
    "NamespaceFilter",
    "setup_logging",
    "configure_logging",
    "set_dispatch_context",
    "reset_dispatch_context",
    "dispatch_id_var",
    "context_id_var",
    "protocol_key_var",
]
