"""CLI test fixtures."""

import logging
from pathlib import Path

import pytest

LADDER_480P = """\
audio:
  bitrate_kbps: 64
profiles:
  480p:
    width: 480
    height: 854
    bitrate_kbps: 480
    quality_crf: 32
"""


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI group reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def ladder_file(tmp_path: Path) -> Path:
    path = tmp_path / "ladder.yaml"
    path.write_text(LADDER_480P)
    return path


@pytest.fixture
def base_args(tmp_path: Path) -> list[str]:
    """Global options isolating a test from the user's config and stderr."""
    return [
        "--config",
        str(tmp_path / "missing-config.toml"),
        "--log-file",
        str(tmp_path / "abr.log"),
    ]
