"""Logging configuration factory.

Builds LoggingConfig instances with CLI overrides applied to a base
configuration.
"""

from __future__ import annotations

from pathlib import Path

from abr_orchestrator.config.models import AbrConfig, LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Merge CLI logging overrides into a base configuration.

    Args:
        base: Base logging configuration (typically from config file).
        level: Override log level (debug, info, warning, error).
        file: Override log file path.
        format: Override log format (text, json).
        include_stderr: Override stderr inclusion.

    Returns:
        New LoggingConfig. Validation runs in LoggingConfig.__post_init__,
        so invalid values raise ValueError.
    """
    return LoggingConfig(
        level=level if level is not None else base.level,
        file=file if file is not None else base.file,
        format=format if format is not None else base.format,
        include_stderr=(
            include_stderr if include_stderr is not None else base.include_stderr
        ),
        max_bytes=base.max_bytes,
        backup_count=base.backup_count,
    )


def configure_logging_from_cli(
    config: AbrConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
) -> LoggingConfig:
    """Apply CLI logging overrides to the loaded config and install them.

    Returns:
        The effective LoggingConfig.
    """
    from abr_orchestrator.logging import configure_logging

    final_config = build_logging_config(
        config.logging, level=level, file=file, format=format
    )
    configure_logging(final_config)
    return final_config
