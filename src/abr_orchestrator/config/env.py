"""Environment variable reader with dependency injection support.

EnvReader reads ``ABR_*`` variables with type conversion. Tests pass a
plain mapping instead of touching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class EnvReader:
    """Typed access to environment variables.

    Example:
        reader = EnvReader({"ABR_WORKERS": "3"})
        reader.get_int("ABR_WORKERS", 1)  # 3
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Mapping to read from instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _raw(self, var: str) -> str | None:
        value = self._env.get(var)
        if value is None or not value.strip():
            return None
        return value.strip()

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string, or default when unset or blank."""
        value = self._raw(var)
        return default if value is None else value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer. Logs a warning and returns default if invalid."""
        value = self._raw(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float. Logs a warning and returns default if invalid."""
        value = self._raw(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean.

        Accepts true/1/yes/on and false/0/no/off (case-insensitive). Anything
        else logs a warning and returns default.
        """
        value = self._raw(var)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        logger.warning("Invalid boolean value for %s: %s", var, value)
        return default

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path with ``~`` expanded. Existence is not checked."""
        value = self._raw(var)
        if value is None:
            return default
        return Path(value).expanduser()
