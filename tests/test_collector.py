"""Unit tests for the per-run error collector (precast.collector)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from precast.collector import CollectedError, ErrorCollector

pytestmark = pytest.mark.unit


class TestRecording:
    def test_error_from_exception(self, collector):
        collector.add_error("Database configuration setup", RuntimeError("prisma exploded"))
        [entry] = collector.errors
        assert isinstance(entry, CollectedError)
        assert entry.task == "Database configuration setup"
        assert entry.error == "prisma exploded"
        assert entry.kind == "error"

    def test_empty_exception_message_uses_type(self, collector):
        collector.add_error("step", ValueError())
        assert collector.errors[0].error == "ValueError"

    def test_warning(self, collector):
        collector.add_warning("Validation", "Docker without a database")
        assert collector.has_warnings
        assert not collector.has_errors
        assert collector.warning_count == 1

    def test_counts(self, collector):
        collector.add_error("a", "one")
        collector.add_error("a", "two")
        collector.add_warning("b", "three")
        assert collector.error_count == 2
        assert collector.warning_count == 1

    def test_errors_returns_copy(self, collector):
        collector.add_error("a", "one")
        collector.errors.clear()
        assert collector.error_count == 1

    def test_clear(self, collector):
        collector.add_error("a", "one")
        collector.clear()
        assert collector.errors == []


class TestDebugEcho:
    def test_no_echo_without_debug(self, collector):
        with patch("precast.collector.err_console") as console:
            collector.add_error("a", "quiet")
        console.print.assert_not_called()

    def test_echo_and_log_file(self, tmp_path: Path):
        log_path = tmp_path / ".precast-debug" / "errors.log"
        collector = ErrorCollector(debug=True, log_path=log_path)
        try:
            raise RuntimeError("with traceback")
        except RuntimeError as exc:
            with patch("precast.collector.err_console") as console:
                collector.add_error("Plugins setup", exc)
        assert console.print.call_count == 2
        text = log_path.read_text(encoding="utf-8")
        assert "TASK: Plugins setup" in text
        assert "Traceback" in text
        assert "RuntimeError: with traceback" in text

    def test_log_appends(self, tmp_path: Path):
        log_path = tmp_path / "errors.log"
        collector = ErrorCollector(debug=True, log_path=log_path)
        with patch("precast.collector.err_console"):
            collector.add_error("a", "first")
            collector.add_warning("b", "second")
        assert log_path.read_text(encoding="utf-8").count("TASK:") == 2
