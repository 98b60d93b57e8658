from context_protocol.events.sink import (
    EventSink,
    LoggingEventSink,
    NoOpEventSink,
    clear_event_sink,
    get_event_sink,
    set_event_sink,
    wait_for_event_sink_tasks,
)

__all__ = [
    "EventSink",
    "NoOpEventSink",
    "LoggingEventSink",
    "get_event_sink",
    "set_event_sink",
    "clear_event_sink",
    "wait_for_event_sink_tasks",
]
