"""Probe result data models."""

from dataclasses import dataclass
from enum import Enum


class SegmentationMode(str, Enum):
    """How segment boundaries are chosen for a run."""

    KEYFRAME = "keyframe"
    """Keyframe timestamps are known; segments can align to them."""

    TIME_BASED = "time_based"
    """No keyframe data; segments are cut at fixed time intervals."""


@dataclass(frozen=True)
class StreamsPresent:
    """Which elementary stream types the source carries."""

    has_video: bool = False
    has_audio: bool = False


@dataclass(frozen=True)
class ProbeResult:
    """Technical metadata about the source media.

    Attributes:
        duration_seconds: Source duration.
        streams: Stream layout flags.
        video_keyframe_timestamps: Ascending keyframe presentation times of
            the first video stream, or None when unknown.
        container_format: Container format name reported by the prober.
        video_codec: Codec of the first video stream.
        width: Width of the first video stream.
        height: Height of the first video stream.
        keyframe_probe_error: Reason the keyframe pass failed, if it ran and
            failed. Its presence means segmentation degraded to time-based.
    """

    duration_seconds: float
    streams: StreamsPresent
    video_keyframe_timestamps: tuple[float, ...] | None = None
    container_format: str | None = None
    video_codec: str | None = None
    width: int | None = None
    height: int | None = None
    keyframe_probe_error: str | None = None

    @property
    def segmentation_mode(self) -> SegmentationMode:
        if self.video_keyframe_timestamps:
            return SegmentationMode.KEYFRAME
        return SegmentationMode.TIME_BASED

    @property
    def needs_keyframe_probe(self) -> bool:
        """True when a video stream exists but no keyframes are known."""
        return self.streams.has_video and not self.video_keyframe_timestamps

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "duration_seconds": self.duration_seconds,
            "has_video": self.streams.has_video,
            "has_audio": self.streams.has_audio,
            "container_format": self.container_format,
            "video_codec": self.video_codec,
            "width": self.width,
            "height": self.height,
            "keyframe_count": (
                len(self.video_keyframe_timestamps)
                if self.video_keyframe_timestamps is not None
                else None
            ),
            "segmentation_mode": self.segmentation_mode.value,
            "keyframe_probe_error": self.keyframe_probe_error,
        }
