"""Shared fixtures for registry tests."""

from typing import Any

import pytest

from context_protocol.config import get_settings
from context_protocol.events import EventSink, clear_event_sink, set_event_sink


class RecordingEventSink(EventSink):
    """Collects emitted events synchronously for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any] | None]] = []

    async def emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        self.events.append((type, data))

    def try_emit(self, *, type: str, data: dict[str, Any] | None) -> None:
        self.events.append((type, data))

    def types(self) -> list[str]:
        return [event_type for event_type, _ in self.events]


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Keep settings and event sinks from leaking between tests."""
    for var in ("EVENT_SINK", "LOG_CONTEXT_PAYLOADS", "LOG_LEVEL", "LOG_DEBUG_NAMESPACES", "ENVIRONMENT"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    clear_event_sink()
    yield
    get_settings.cache_clear()
    clear_event_sink()


@pytest.fixture
def event_sink() -> RecordingEventSink:
    sink = RecordingEventSink()
    set_event_sink(sink)
    return sink
