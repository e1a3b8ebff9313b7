"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (applied by the caller on top of get_config())
2. Environment variables (ABR_*)
3. Config file (~/.abr/config.toml)
4. Default values

Environment variables:
- ABR_CONFIG_PATH: Path to config file (overrides default location)
- ABR_FFMPEG_PATH / ABR_FFPROBE_PATH: Encoder and prober executables
- ABR_OUTPUT_BASE: Base directory for run output
- ABR_SEGMENT_LENGTH: Segment length in seconds
- ABR_KEYFRAME_ALIGNED: Collect keyframe timestamps (true/false)
- ABR_THREAD_CAP: Upper bound for encoder threads
- ABR_AUDIO_BITRATE: Default audio bitrate in kbps
- ABR_PROFILE_TIMEOUT: Per-profile encode timeout in seconds
- ABR_WORKERS: Concurrent encoder processes
- ABR_LOG_LEVEL / ABR_LOG_FILE / ABR_LOG_FORMAT: Logging overrides
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from abr_orchestrator.config.env import EnvReader
from abr_orchestrator.config.models import (
    AbrConfig,
    EncodingConfig,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
)
from abr_orchestrator.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".abr"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

_PATH_FIELDS = {"ffmpeg", "ffprobe", "file", "output_base"}


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the config file path, honouring ABR_CONFIG_PATH."""
    env_path = EnvReader(env).get_path("ABR_CONFIG_PATH")
    return env_path if env_path is not None else DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses the default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist or
        cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring config section [%s]: not a table", name)
        return {}
    return section


def _coerce(key: str, value: Any) -> Any:
    if key in _PATH_FIELDS and isinstance(value, str):
        return Path(value).expanduser()
    return value


def _apply(instance: Any, values: Mapping[str, Any], section: str) -> Any:
    """Return a copy of a config dataclass with known keys overridden."""
    known = {f.name for f in fields(instance)}
    updates = {}
    for key, value in values.items():
        if key not in known:
            logger.warning("Unknown config key [%s].%s ignored", section, key)
            continue
        if value is None:
            continue
        updates[key] = _coerce(key, value)
    if not updates:
        return instance
    try:
        return replace(instance, **updates)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Invalid [{section}] configuration: {e}", field=section
        ) from e


def _env_overrides(reader: EnvReader) -> dict[str, dict[str, Any]]:
    return {
        "tools": {
            "ffmpeg": reader.get_path("ABR_FFMPEG_PATH"),
            "ffprobe": reader.get_path("ABR_FFPROBE_PATH"),
        },
        "encoding": {
            "segment_length_seconds": reader.get_float("ABR_SEGMENT_LENGTH"),
            "keyframe_aligned": reader.get_bool("ABR_KEYFRAME_ALIGNED"),
            "thread_cap": reader.get_int("ABR_THREAD_CAP"),
            "audio_bitrate_kbps": reader.get_int("ABR_AUDIO_BITRATE"),
            "profile_timeout_seconds": reader.get_float("ABR_PROFILE_TIMEOUT"),
        },
        "processing": {
            "workers": reader.get_int("ABR_WORKERS"),
        },
        "logging": {
            "level": reader.get_str("ABR_LOG_LEVEL"),
            "file": reader.get_path("ABR_LOG_FILE"),
            "format": reader.get_str("ABR_LOG_FORMAT"),
        },
    }


def get_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AbrConfig:
    """Build the effective configuration.

    Args:
        config_path: Explicit config file. Defaults to ABR_CONFIG_PATH or
            ~/.abr/config.toml.
        env: Environment mapping (defaults to os.environ).

    Returns:
        Merged AbrConfig.

    Raises:
        ConfigError: If a configured value fails validation.
    """
    reader = EnvReader(env)
    if config_path is None:
        config_path = get_default_config_path(env)
    file_data = load_config_file(config_path)

    tools = ToolPathsConfig()
    encoding = EncodingConfig()
    processing = ProcessingConfig()
    logging_config = LoggingConfig()
    output_base = None

    layers: list[Mapping[str, Any]] = [
        {
            "tools": _section(file_data, "tools"),
            "encoding": _section(file_data, "encoding"),
            "processing": _section(file_data, "processing"),
            "logging": _section(file_data, "logging"),
            "output_base": file_data.get("output_base"),
        },
        {
            **_env_overrides(reader),
            "output_base": reader.get_path("ABR_OUTPUT_BASE"),
        },
    ]
    for layer in layers:
        tools = _apply(tools, layer["tools"], "tools")
        encoding = _apply(encoding, layer["encoding"], "encoding")
        processing = _apply(processing, layer["processing"], "processing")
        logging_config = _apply(logging_config, layer["logging"], "logging")
        if layer["output_base"] is not None:
            output_base = _coerce("output_base", layer["output_base"])

    return AbrConfig(
        tools=tools,
        encoding=encoding,
        processing=processing,
        logging=logging_config,
        output_base=output_base,
    )
