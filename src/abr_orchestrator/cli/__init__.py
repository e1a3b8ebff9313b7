"""CLI module for abr-orchestrator."""

import logging
from pathlib import Path

import click

from abr_orchestrator.cli.exit_codes import ExitCode
from abr_orchestrator.cli.output import error_exit
from abr_orchestrator.config import configure_logging_from_cli, get_config
from abr_orchestrator.exceptions import ConfigError

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="abr-orchestrator")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.abr/config.toml or ABR_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """abr-orchestrator - Transcode a source into an adaptive HLS ladder."""
    ctx.ensure_object(dict)

    try:
        config = get_config(config_path=config_path)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    logging_config = configure_logging_from_cli(
        config,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    logger.debug(
        "Configuration loaded: log_level=%s, log_file=%s, workers=%d",
        logging_config.level,
        logging_config.file or "stderr",
        config.processing.workers,
    )
    ctx.obj["config"] = config


# Defer import to avoid circular dependency
def _register_commands():
    from abr_orchestrator.cli.playlist import playlist_command
    from abr_orchestrator.cli.probe import probe_command
    from abr_orchestrator.cli.transcode import transcode_command

    main.add_command(transcode_command)
    main.add_command(playlist_command)
    main.add_command(probe_command)


_register_commands()
