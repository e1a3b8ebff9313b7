"""CLI command that runs one transcode."""

from __future__ import annotations

import json
import logging
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from abr_orchestrator.cli.exit_codes import ExitCode
from abr_orchestrator.cli.ladder_loader import load_ladder_or_exit
from abr_orchestrator.cli.output import error_exit
from abr_orchestrator.config.models import AbrConfig
from abr_orchestrator.exceptions import ConfigError, IDGenerationError
from abr_orchestrator.orchestrator.results import ProfileStatus, RunResult
from abr_orchestrator.orchestrator.runner import TranscodeRun
from abr_orchestrator.profiles.models import AudioProfile

logger = logging.getLogger(__name__)

_STATUS_LABELS = {
    ProfileStatus.SUCCEEDED: "OK",
    ProfileStatus.FAILED: "FAILED",
    ProfileStatus.SKIPPED: "SKIPPED",
}


@contextmanager
def _cancel_on_sigint(run: TranscodeRun, json_output: bool) -> Iterator[None]:
    """Route Ctrl-C to the run's cancellation token while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: Any) -> None:
        logger.warning("Interrupted, cancelling run %s", run.run_id)
        if not json_output:
            click.echo("\nInterrupted - stopping encoders...", err=True)
        run.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _collect_overrides(
    output_base: Path | None,
    ffmpeg_path: str | None,
    ffprobe_path: str | None,
    segment_length: float | None,
    workers: int | None,
    no_keyframes: bool,
    profile_timeout: float | None,
) -> dict[str, Any]:
    """Map CLI options onto TranscodeRun keyword overrides."""
    overrides: dict[str, Any] = {
        "base_dir": output_base,
        "encoder_path": ffmpeg_path,
        "prober_path": ffprobe_path,
        "segment_length_seconds": segment_length,
        "workers": workers,
        "profile_timeout_seconds": profile_timeout,
    }
    if no_keyframes:
        overrides["keyframe_aligned"] = False
    return {key: value for key, value in overrides.items() if value is not None}


def _format_result_human(result: RunResult) -> str:
    lines = []
    for outcome in result.outcomes:
        label = _STATUS_LABELS[outcome.status]
        line = f"[{label}] {outcome.profile_name}"
        if outcome.status == ProfileStatus.SUCCEEDED:
            line += f" ({outcome.elapsed_seconds:.1f}s)"
        elif outcome.reason:
            line += f": {outcome.reason}"
        lines.append(line)

    lines.append("")
    lines.append(f"Output: {result.work_dir}")
    if result.playlist_path is not None:
        lines.append(f"Playlist: {result.playlist_path}")
    lines.append(f"Segmentation: {result.segmentation_mode.value}")
    lines.append(
        f"Encoded {len(result.outcomes)} profile(s): "
        f"{len(result.succeeded)} ok, {len(result.failed)} failed, "
        f"{len(result.skipped)} skipped in {result.elapsed_seconds:.1f}s"
    )
    if result.cancelled:
        lines.append("(Run was cancelled)")
    return "\n".join(lines)


def _exit_code_for(result: RunResult) -> ExitCode:
    if result.cancelled:
        return ExitCode.INTERRUPTED
    if result.all_succeeded:
        return ExitCode.SUCCESS
    return ExitCode.OPERATION_FAILED


@click.command("transcode")
@click.argument("media_url")
@click.option(
    "--ladder",
    "ladder_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="YAML ladder file (default: built-in ladder).",
)
@click.option(
    "--output-base",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory; output goes to <base>/output/<run-id>.",
)
@click.option("--ffmpeg", "ffmpeg_path", default=None, help="Encoder executable.")
@click.option("--ffprobe", "ffprobe_path", default=None, help="Prober executable.")
@click.option(
    "--segment-length",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="HLS segment length in seconds (default: 1).",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Profiles encoded concurrently (default: 1).",
)
@click.option(
    "--audio-bitrate",
    type=click.IntRange(min=0),
    default=None,
    help="Audio bitrate in kbps (overrides the ladder).",
)
@click.option(
    "--no-keyframes",
    is_flag=True,
    default=False,
    help="Skip the keyframe probe.",
)
@click.option(
    "--profile-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Stop an encoder that runs longer than this many seconds.",
)
@click.option(
    "--json",
    "-j",
    "json_output",
    is_flag=True,
    default=False,
    help="Output in JSON format",
)
@click.pass_context
def transcode_command(
    ctx: click.Context,
    media_url: str,
    ladder_path: Path | None,
    output_base: Path | None,
    ffmpeg_path: str | None,
    ffprobe_path: str | None,
    segment_length: float | None,
    workers: int | None,
    audio_bitrate: int | None,
    no_keyframes: bool,
    profile_timeout: float | None,
    json_output: bool,
) -> None:
    """Transcode MEDIA_URL into an HLS ladder.

    Examples:

        abr-orchestrator transcode https://example.com/source.mp4

        abr-orchestrator transcode --ladder ladder.yaml -w 4 source.mp4
    """
    config: AbrConfig = ctx.obj["config"]
    ladder = load_ladder_or_exit(
        ladder_path, config.encoding.audio_bitrate_kbps, json_output
    )

    overrides = _collect_overrides(
        output_base,
        ffmpeg_path,
        ffprobe_path,
        segment_length,
        workers,
        no_keyframes,
        profile_timeout,
    )
    if audio_bitrate is not None:
        overrides["audio"] = AudioProfile(bitrate_kbps=audio_bitrate)

    try:
        run = TranscodeRun.from_config(media_url, ladder, config, **overrides)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
    except IDGenerationError as e:
        error_exit(str(e), ExitCode.GENERAL_ERROR, json_output)

    if not json_output:
        click.echo(f"Run {run.run_id}: {len(ladder.profiles)} profile(s)")

    with _cancel_on_sigint(run, json_output):
        result = run.run()

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(_format_result_human(result))

    sys.exit(_exit_code_for(result))
