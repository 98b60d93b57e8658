from __future__ import annotations

import asyncio
import logging
from contextvars import ContextVar
from typing import Any

from context_protocol.config import get_settings

logger = logging.getLogger("event_sink")


class EventSink:
    async def emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        raise NotImplementedError

    def try_emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        raise NotImplementedError


class NoOpEventSink(EventSink):
    async def emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        _ = type, data
        return None

    def try_emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        _ = type, data
        return None


class LoggingEventSink(EventSink):
    """Writes registry events to a logger instead of dropping them."""

    def __init__(self, *, logger_name: str = "events", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def _log(self, type: str, data: dict[str, Any] | None) -> None:
        self._logger.log(
            self._level,
            "Registry event",
            extra={"service": "events", "event_type": type, "data": data},
        )

    async def emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        self._log(type, data)

    def try_emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Registration can happen outside a loop; log synchronously
            self._log(type, data)
            return

        task = loop.create_task(self.emit(type=type, data=data))
        _pending_emit_tasks.add(task)
        task.add_done_callback(_pending_emit_tasks.discard)


_event_sink_var: ContextVar[EventSink | None] = ContextVar("event_sink", default=None)
_pending_emit_tasks: set[asyncio.Task[Any]] = set()


def set_event_sink(sink: EventSink) -> None:
    _event_sink_var.set(sink)


def clear_event_sink() -> None:
    _event_sink_var.set(None)


def get_event_sink() -> EventSink:
    sink = _event_sink_var.get()
    if sink is not None:
        return sink
    if get_settings().event_sink == "logging":
        return LoggingEventSink()
    return NoOpEventSink()


async def wait_for_event_sink_tasks() -> None:
    """Await any pending event sink emit tasks (used in tests)."""

    if not _pending_emit_tasks:
        return

    pending = list(_pending_emit_tasks)
    try:
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        for task in pending:
            _pending_emit_tasks.discard(task)
