"""Tests for JSONFormatter."""

import json
import logging
import sys

from abr_orchestrator.logging.handlers import JSONFormatter


def _record(msg: str = "hello %s", args: tuple = ("world",), **extra):
    record = logging.LogRecord(
        "abr_orchestrator.test", logging.WARNING, __file__, 10, msg, args, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter.format."""

    def test_basic_fields(self) -> None:
        """Output carries timestamp, level, logger and message."""
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "abr_orchestrator.test"
        assert entry["message"] == "hello world"
        assert entry["timestamp"].endswith("+00:00")
        assert "extra" not in entry
        assert "exception" not in entry

    def test_context_fields_promoted(self) -> None:
        """run_id and profile become top-level keys."""
        record = _record(run_id="run0001", profile="720p", profile_tag="[x] ")
        entry = json.loads(JSONFormatter().format(record))
        assert entry["run_id"] == "run0001"
        assert entry["profile"] == "720p"
        assert "extra" not in entry

    def test_extra_fields(self) -> None:
        """Caller-supplied fields land under extra; private ones are dropped."""
        record = _record(exit_code=1, _internal="x")
        entry = json.loads(JSONFormatter().format(record))
        assert entry["extra"] == {"exit_code": 1}

    def test_non_serializable_extra_uses_str(self) -> None:
        """Values json cannot encode are rendered with str()."""
        record = _record(path=object())
        entry = json.loads(JSONFormatter().format(record))
        assert entry["extra"]["path"].startswith("<object object")

    def test_exception(self) -> None:
        """exc_info is formatted into the exception key."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "abr", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )
        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]
