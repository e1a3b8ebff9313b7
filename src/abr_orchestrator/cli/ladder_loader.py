"""Shared ladder loading with consistent error handling for CLI commands."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from abr_orchestrator.cli.exit_codes import ExitCode
from abr_orchestrator.cli.output import error_exit
from abr_orchestrator.exceptions import ConfigError
from abr_orchestrator.profiles.defaults import DEFAULT_LADDER
from abr_orchestrator.profiles.loader import Ladder, load_ladder
from abr_orchestrator.profiles.models import AudioProfile


def load_ladder_or_exit(
    ladder_path: Path | None,
    default_audio_kbps: int,
    json_output: bool = False,
) -> Ladder:
    """Load a ladder file, or the built-in ladder when no path is given.

    ``default_audio_kbps`` applies to the built-in ladder and to ladder files
    that do not set an audio bitrate. Exits the process if the file is
    missing or invalid.
    """
    if ladder_path is None:
        return replace(
            DEFAULT_LADDER, audio=AudioProfile(bitrate_kbps=default_audio_kbps)
        )

    try:
        return load_ladder(ladder_path.expanduser(), default_audio_kbps)
    except FileNotFoundError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
