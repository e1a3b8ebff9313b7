"""Configuration management.

Precedence: CLI flags > ABR_* environment variables > config file
(~/.abr/config.toml) > defaults.
"""

from abr_orchestrator.config.env import EnvReader
from abr_orchestrator.config.loader import (
    get_config,
    get_default_config_path,
    load_config_file,
)
from abr_orchestrator.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from abr_orchestrator.config.models import (
    AbrConfig,
    EncodingConfig,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "AbrConfig",
    "EncodingConfig",
    "LoggingConfig",
    "ProcessingConfig",
    "ToolPathsConfig",
    # Loader
    "EnvReader",
    "build_logging_config",
    "configure_logging_from_cli",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
