"""CLI command that prints a master playlist without encoding."""

from pathlib import Path

import click

from abr_orchestrator.cli.ladder_loader import load_ladder_or_exit
from abr_orchestrator.hls.playlist import build_master_playlist


@click.command("playlist")
@click.option(
    "--ladder",
    "ladder_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="YAML ladder file (default: built-in ladder).",
)
@click.pass_context
def playlist_command(ctx: click.Context, ladder_path: Path | None) -> None:
    """Print the master playlist a ladder would produce."""
    config = ctx.obj["config"]
    ladder = load_ladder_or_exit(ladder_path, config.encoding.audio_bitrate_kbps)
    click.echo(build_master_playlist(ladder.profiles))
