"""Tests for logging configuration."""

import json
import logging

import pytest

from context_protocol.config import Settings
from context_protocol.logging_config import (
    NamespaceFilter,
    StructuredFormatter,
    configure_logging,
    context_id_var,
    dispatch_id_var,
    protocol_key_var,
    reset_dispatch_context,
    set_dispatch_context,
    setup_logging,
)


def _record(name: str = "test", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=1,
        msg="Test message",
        args=(),
        exc_info=None,
    )


def _emitted(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestStructuredFormatter:
    """Test StructuredFormatter class."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["level"] == "info"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "test"
        assert parsed["service"] == "test"
        assert "ts" in parsed

    def test_includes_dispatch_context(self):
        tokens = set_dispatch_context("d1", "c1", "p@1.0")
        try:
            parsed = json.loads(StructuredFormatter().format(_record()))
        finally:
            reset_dispatch_context(tokens)

        assert parsed["dispatch_id"] == "d1"
        assert parsed["context_id"] == "c1"
        assert parsed["protocol_key"] == "p@1.0"

    def test_includes_extra_fields(self):
        record = _record()
        record.duration_ms = 12
        record.error_code = "CONTEXT_NOT_FOUND"
        record.unrelated = "dropped"

        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["duration_ms"] == 12
        assert parsed["error_code"] == "CONTEXT_NOT_FOUND"
        assert "unrelated" not in parsed


class TestDispatchContext:
    """Test set_dispatch_context / reset_dispatch_context."""

    def test_reset_restores_previous_values(self):
        outer = set_dispatch_context("outer", "c-outer", "p@1")
        inner = set_dispatch_context("inner", "c-inner", "p@2")

        assert dispatch_id_var.get() == "inner"

        reset_dispatch_context(inner)
        assert dispatch_id_var.get() == "outer"
        assert context_id_var.get() == "c-outer"
        assert protocol_key_var.get() == "p@1"

        reset_dispatch_context(outer)
        assert dispatch_id_var.get() is None
        assert context_id_var.get() is None
        assert protocol_key_var.get() is None


class TestNamespaceFilter:
    """Test NamespaceFilter class."""

    def test_applies_level_outside_enabled_namespaces(self):
        log_filter = NamespaceFilter([], logging.WARNING)

        assert log_filter.filter(_record("registry", logging.INFO)) is False
        assert log_filter.filter(_record("registry", logging.WARNING)) is True

    def test_enabled_namespaces_pass_any_level(self):
        log_filter = NamespaceFilter(["registry"], logging.WARNING)

        assert log_filter.filter(_record("registry", logging.DEBUG)) is True
        assert log_filter.filter(_record("registry.sub", logging.INFO)) is True
        assert log_filter.filter(_record("events", logging.DEBUG)) is False
        assert log_filter.filter(_record("events", logging.INFO)) is False


class TestSetupLogging:
    """Test which records setup_logging lets through."""

    def test_warning_level_with_debug_namespace(self, capsys, restore_root_logging):
        setup_logging("WARNING", ["registry"])
        capsys.readouterr()

        logging.getLogger("events").info("events info")
        logging.getLogger("events").warning("events warning")
        logging.getLogger("registry").debug("registry debug")

        messages = [entry["message"] for entry in _emitted(capsys)]
        assert messages == ["events warning", "registry debug"]

    def test_debug_level_enables_every_namespace(self, capsys, restore_root_logging):
        setup_logging("DEBUG")
        capsys.readouterr()

        logging.getLogger("registry").debug("registry debug")
        logging.getLogger("events").debug("events debug")

        messages = [entry["message"] for entry in _emitted(capsys)]
        assert messages == ["registry debug", "events debug"]

    def test_info_level_drops_debug(self, capsys, restore_root_logging):
        setup_logging("INFO")
        capsys.readouterr()

        logging.getLogger("registry").debug("registry debug")
        logging.getLogger("registry").info("registry info")

        messages = [entry["message"] for entry in _emitted(capsys)]
        assert messages == ["registry info"]


class TestConfigureLogging:
    """Test configure_logging."""

    def test_uses_settings_and_logs_summary(self, capsys, restore_root_logging):
        settings = Settings(log_level="INFO", log_debug_namespaces="registry", event_sink="logging")

        configure_logging(settings)
        logging.getLogger("registry").debug("registry debug")

        entries = _emitted(capsys)
        summary = next(e for e in entries if e["message"] == "Registry configuration loaded")
        assert summary["event_sink"] == "logging"
        assert summary["debug_namespaces"] == ["registry"]
        assert summary["environment"] == "development"
        assert entries[-1]["message"] == "registry debug"

    def test_defaults_to_cached_settings(self, capsys, restore_root_logging, monkeypatch):
        from context_protocol.config import get_settings

        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        get_settings.cache_clear()

        configure_logging()
        logging.getLogger("registry").info("registry info")

        messages = [entry["message"] for entry in _emitted(capsys)]
        assert "registry info" not in messages
        assert "Registry configuration loaded" not in messages
