"""Exceptions raised by the ABR orchestrator.

Construction-time problems (ConfigError, IDGenerationError) propagate to the
caller. Everything else is captured with context by the run and reported
through per-profile outcomes.
"""

from pathlib import Path


class AbrError(Exception):
    """Base exception for all orchestrator errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(AbrError):
    """Raised when the run configuration or profile set is invalid.

    Always raised before any filesystem or subprocess work happens.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize config error.

        Args:
            message: Human-readable error description.
            field: Name of the offending field or profile, if known.
        """
        self.field = field
        super().__init__(message)


class IDGenerationError(AbrError):
    """Raised when a unique run identifier cannot be generated."""


class DirectoryError(AbrError):
    """Raised when a run or profile directory cannot be created."""

    def __init__(self, path: Path, phase: str, reason: str) -> None:
        self.path = path
        self.phase = phase
        self.reason = reason
        super().__init__(f"Cannot create {phase} directory {path}: {reason}")


class ProbeError(AbrError):
    """Raised when the media probing tool fails or emits unusable output."""

    def __init__(self, reason: str, media_url: str | None = None) -> None:
        self.reason = reason
        self.media_url = media_url
        if media_url:
            super().__init__(f"Probe failed for {media_url}: {reason}")
        else:
            super().__init__(f"Probe failed: {reason}")


class EncodeError(AbrError):
    """Raised when an encoder process fails to start or exits unsuccessfully.

    Attributes:
        profile_name: Profile whose encode failed.
        phase: One of "prepare", "start", "exit", "cancelled", "timeout".
        returncode: Encoder exit code, None if it never ran to completion.
        stderr_tail: Last lines of encoder output for diagnostics.
    """

    def __init__(
        self,
        profile_name: str,
        phase: str,
        reason: str,
        returncode: int | None = None,
        stderr_tail: list[str] | None = None,
    ) -> None:
        self.profile_name = profile_name
        self.phase = phase
        self.reason = reason
        self.returncode = returncode
        self.stderr_tail = stderr_tail or []
        super().__init__(f"Encode {phase} failed for profile {profile_name}: {reason}")
