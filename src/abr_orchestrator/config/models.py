"""Configuration data models.

This module defines dataclasses for orchestrator configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class EncodingConfig:
    """Configuration for HLS encoding."""

    segment_length_seconds: float = 1.0
    """Target duration of each HLS segment."""

    segment_prefix: str = "chunk"
    """Segment file name prefix (``chunk-00000.ts``)."""

    keyframe_aligned: bool = True
    """Collect keyframe timestamps from the source when probing."""

    thread_cap: int | None = None
    """Upper bound for encoder threads (None = host parallelism - 1, max 16)."""

    audio_bitrate_kbps: int = 128
    """Default audio bitrate when a ladder does not set one."""

    profile_timeout_seconds: float | None = None
    """Per-profile encode timeout (None = no timeout)."""

    # Reserved for a rolling-window mode; validated but not used by VOD runs.
    segment_offset_seconds: float = 1.0
    segment_buffer_min: int = 1
    segment_buffer_max: int = 2

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.segment_length_seconds <= 0:
            raise ValueError(
                f"segment_length_seconds must be positive, "
                f"got {self.segment_length_seconds}"
            )
        if not self.segment_prefix or "/" in self.segment_prefix:
            raise ValueError(f"invalid segment_prefix: {self.segment_prefix!r}")
        if self.thread_cap is not None and self.thread_cap < 1:
            raise ValueError(f"thread_cap must be at least 1, got {self.thread_cap}")
        if self.audio_bitrate_kbps < 0:
            raise ValueError(
                f"audio_bitrate_kbps must be non-negative, "
                f"got {self.audio_bitrate_kbps}"
            )
        timeout = self.profile_timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ValueError(
                f"profile_timeout_seconds must be positive, "
                f"got {self.profile_timeout_seconds}"
            )
        if self.segment_offset_seconds < 0:
            raise ValueError(
                f"segment_offset_seconds must be non-negative, "
                f"got {self.segment_offset_seconds}"
            )
        if self.segment_buffer_min < 1:
            raise ValueError(
                f"segment_buffer_min must be at least 1, got {self.segment_buffer_min}"
            )
        if self.segment_buffer_max < self.segment_buffer_min:
            raise ValueError(
                f"segment_buffer_max ({self.segment_buffer_max}) must be >= "
                f"segment_buffer_min ({self.segment_buffer_min})"
            )


@dataclass
class ProcessingConfig:
    """Configuration for profile fan-out."""

    workers: int = 1
    """Number of concurrent encoder processes (1 = sequential)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class AbrConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Base directory; runs are written to <output_base>/output/<run_id>
    output_base: Path | None = None

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool (ffmpeg or ffprobe)."""
        return getattr(self.tools, tool_name.lower(), None)
