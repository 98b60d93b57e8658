"""Custom exceptions for the context protocol registry.

This module defines registry-specific exceptions with structured
error codes and metadata for consistent error handling by callers.

Exception Hierarchy:
- ContextProtocolError (base)
  ├── InvalidArgumentError
  ├── NotFoundError
  │   ├── ContextNotFoundError
  │   └── ProtocolNotFoundError
  └── ValidationFailedError

Usage:
    try:
        result = await registry.process_context("c1", "summarize", "1.0")
    except ProtocolNotFoundError:
        # Handle missing protocol
        pass
    except ValidationFailedError as e:
        log.warning(f"Rejected {e.context_id} for {e.protocol_key}")
        raise

Errors raised by caller-supplied handlers are never wrapped in these
types; they reach the caller unchanged.

Attributes:
    code: Machine-readable error code (e.g., "CONTEXT_NOT_FOUND")
    message: Human-readable error message
    details: Additional context for debugging
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


class ContextProtocolError(Exception):
    """Base exception for registry errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Additional context for debugging
        timestamp: When the error occurred
    """

    code: str = "CONTEXT_PROTOCOL_ERROR"
    message: str = "An unexpected registry error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize error with optional message and details."""
        self.message = message or self.message
        self.details = details or {}
        self.timestamp = datetime.now(UTC)
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp.isoformat(),
            }
        }

    def __str__(self) -> str:
        """String representation with code."""
        return f"[{self.code}] {self.message}"


class InvalidArgumentError(ContextProtocolError):
    """Raised when a context or protocol is missing a required identity field.

    Attributes:
        field: The missing field (e.g., "id", "type", "name", "version")
    """

    code = "INVALID_ARGUMENT"
    message = "Invalid argument"

    def __init__(
        self,
        message: str,
        field: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid argument error."""
        self.field = field
        full_details: dict[str, Any] = {"field": field}
        if details:
            full_details.update(details)
        super().__init__(message=message, details=full_details)


class NotFoundError(ContextProtocolError):
    """Base exception for lookups that have no matching entry."""

    code = "NOT_FOUND"
    message = "Resource not found"

    def __init__(
        self,
        resource: str,
        identifier: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize not found error."""
        self.resource = resource
        self.identifier = identifier
        full_details = {"resource": resource, "identifier": identifier}
        if details:
            full_details.update(details)
        super().__init__(
            message=f"{resource} not found: {identifier}",
            details=full_details,
        )


class ContextNotFoundError(NotFoundError):
    """Raised when no context is registered under the requested id."""

    code = "CONTEXT_NOT_FOUND"
    message = "Context not found"

    def __init__(self, context_id: str) -> None:
        self.context_id = context_id
        super().__init__(resource="Context", identifier=context_id)


class ProtocolNotFoundError(NotFoundError):
    """Raised when no protocol is registered under ``name@version``.

    Versions are matched as exact strings; there is no range resolution.
    """

    code = "PROTOCOL_NOT_FOUND"
    message = "Protocol not found"

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(
            resource="Protocol",
            identifier=f"{name}@{version}",
            details={"name": name, "version": version},
        )


class ValidationFailedError(ContextProtocolError):
    """Raised when a protocol's validation handler rejects a context.

    The processing handler is never invoked once this is raised.
    """

    code = "VALIDATION_FAILED"
    message = "Context validation failed"

    def __init__(self, context_id: str, protocol_key: str) -> None:
        self.context_id = context_id
        self.protocol_key = protocol_key
        super().__init__(
            details={"context_id": context_id, "protocol_key": protocol_key},
        )


__all__ = [
    "ContextProtocolError",
    "InvalidArgumentError",
    "NotFoundError",
    "ContextNotFoundError",
    "ProtocolNotFoundError",
    "ValidationFailedError",
]
