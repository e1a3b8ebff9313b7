"""Tests for configure_logging."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from abr_orchestrator.config.models import LoggingConfig
from abr_orchestrator.logging import configure_logging, profile_context
from abr_orchestrator.logging.handlers import JSONFormatter


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _flush() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_stderr_only_by_default(self) -> None:
        """Without a file a single stderr handler is installed."""
        configure_logging(LoggingConfig(level="warning"))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_handler_text_format(self, tmp_path: Path) -> None:
        """File output uses the text format with the profile tag."""
        log_file = tmp_path / "logs" / "abr.log"
        configure_logging(LoggingConfig(level="info", file=log_file))

        with profile_context("run0001", "720p"):
            logging.getLogger("abr_orchestrator.x").info("encoding")
        _flush()

        content = log_file.read_text()
        assert "[run0001:720p] abr_orchestrator.x - INFO - encoding" in content

    def test_json_format(self, tmp_path: Path) -> None:
        """JSON format writes one object per line."""
        log_file = tmp_path / "abr.log"
        configure_logging(LoggingConfig(file=log_file, format="json"))

        with profile_context("run0001", "480p"):
            logging.getLogger("abr_orchestrator.x").warning("slow")
        _flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "slow"
        assert entry["run_id"] == "run0001"
        assert entry["profile"] == "480p"
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_include_stderr_adds_second_handler(self, tmp_path: Path) -> None:
        """include_stderr keeps a stderr handler alongside the file."""
        configure_logging(
            LoggingConfig(file=tmp_path / "abr.log", include_stderr=True)
        )
        assert len(logging.getLogger().handlers) == 2

    def test_level_filters_records(self, tmp_path: Path) -> None:
        """Records below the configured level are not written."""
        log_file = tmp_path / "abr.log"
        configure_logging(LoggingConfig(level="error", file=log_file))
        logging.getLogger("abr_orchestrator.x").warning("ignored")
        _flush()
        assert "ignored" not in log_file.read_text()

    def test_unopenable_file_falls_back_to_stderr(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An unopenable log file falls back to stderr with a warning."""
        with patch(
            "abr_orchestrator.logging.config.RotatingFileHandler",
            side_effect=PermissionError("denied"),
        ):
            configure_logging(LoggingConfig(file=tmp_path / "abr.log"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert "Could not open log file" in capsys.readouterr().err
