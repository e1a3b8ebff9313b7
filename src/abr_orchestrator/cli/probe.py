"""CLI command that probes a source and prints the result."""

import json
import logging

import click

from abr_orchestrator.cli.exit_codes import ExitCode
from abr_orchestrator.cli.output import error_exit
from abr_orchestrator.exceptions import ProbeError
from abr_orchestrator.introspector.ffprobe import FFprobeProber

logger = logging.getLogger(__name__)


@click.command("probe")
@click.argument("media_url")
@click.option("--ffprobe", "ffprobe_path", default=None, help="Prober executable.")
@click.option(
    "--no-keyframes",
    is_flag=True,
    default=False,
    help="Skip the keyframe probe.",
)
@click.pass_context
def probe_command(
    ctx: click.Context,
    media_url: str,
    ffprobe_path: str | None,
    no_keyframes: bool,
) -> None:
    """Probe MEDIA_URL and print duration, streams and keyframes as JSON."""
    config = ctx.obj["config"]
    if ffprobe_path is None and config.tools.ffprobe is not None:
        ffprobe_path = str(config.tools.ffprobe)
    if no_keyframes:
        keyframe_aligned = False
    else:
        keyframe_aligned = config.encoding.keyframe_aligned

    prober = FFprobeProber(ffprobe_path or "ffprobe")
    try:
        result = prober.probe_metadata(media_url, keyframe_aligned=keyframe_aligned)
    except ProbeError as e:
        error_exit(str(e), ExitCode.PROBE_FAILED, json_output=True)

    click.echo(json.dumps(result.to_dict(), indent=2))
