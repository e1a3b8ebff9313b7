"""Pure parsing functions for ffprobe JSON output.

These functions turn ffprobe JSON into ProbeResult objects. They do no I/O
so they can be tested against fixtures directly.
"""

import json
import logging
from typing import Any

from abr_orchestrator.exceptions import ProbeError
from abr_orchestrator.introspector.models import ProbeResult, StreamsPresent

logger = logging.getLogger(__name__)

KEYFRAME_FLAG = "K"


def parse_duration(value: Any) -> float | None:
    """Parse a duration value from ffprobe into seconds.

    Args:
        value: Duration string from ffprobe (e.g., "3600.000") or None.

    Returns:
        Duration in seconds, or None if missing, unparseable or negative.
    """
    if value is None:
        return None
    try:
        duration = float(value)
    except (ValueError, TypeError):
        return None
    if duration < 0 or duration != duration:
        return None
    return duration


def decode_json(output: str) -> dict:
    """Decode ffprobe stdout into a dict.

    Raises:
        ProbeError: If the output is not a JSON object.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Invalid ffprobe output: {e}") from e
    if not isinstance(data, dict):
        raise ProbeError("Invalid ffprobe output: expected a JSON object")
    return data


def parse_keyframe_packets(packets: Any) -> tuple[float, ...] | None:
    """Extract keyframe presentation timestamps from ffprobe packets.

    Packets without the keyframe flag or without a usable pts_time are
    ignored. Returns None when no keyframe timestamps were found.
    """
    if not isinstance(packets, list):
        return None
    timestamps: list[float] = []
    for packet in packets:
        if not isinstance(packet, dict):
            continue
        if KEYFRAME_FLAG not in str(packet.get("flags", "")):
            continue
        pts_time = parse_duration(packet.get("pts_time"))
        if pts_time is None:
            continue
        timestamps.append(pts_time)
    if not timestamps:
        return None
    return tuple(sorted(timestamps))


def _first_stream(streams: list[dict], codec_type: str) -> dict | None:
    for stream in streams:
        if stream.get("codec_type") == codec_type:
            return stream
    return None


def _positive_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def parse_probe_output(data: dict) -> ProbeResult:
    """Parse general ffprobe output (format + streams) into a ProbeResult.

    Video, audio and keyframe data are all optional. The output must contain
    a ``streams`` list and a duration, either on the container or on at
    least one stream.

    Raises:
        ProbeError: If required fields are missing or malformed.
    """
    streams = data.get("streams")
    if not isinstance(streams, list):
        raise ProbeError("ffprobe output has no streams list")
    streams = [s for s in streams if isinstance(s, dict)]

    format_info = data.get("format")
    if format_info is None:
        format_info = {}
    if not isinstance(format_info, dict):
        raise ProbeError("ffprobe output has a malformed format section")

    duration = parse_duration(format_info.get("duration"))
    if duration is None:
        stream_durations = [
            d for d in (parse_duration(s.get("duration")) for s in streams) if d
        ]
        if stream_durations:
            duration = max(stream_durations)
    if duration is None:
        raise ProbeError("ffprobe output has no usable duration")

    video = _first_stream(streams, "video")
    audio = _first_stream(streams, "audio")

    keyframes = None
    if video is not None:
        keyframes = parse_keyframe_packets(data.get("packets"))

    return ProbeResult(
        duration_seconds=duration,
        streams=StreamsPresent(
            has_video=video is not None, has_audio=audio is not None
        ),
        video_keyframe_timestamps=keyframes,
        container_format=format_info.get("format_name"),
        video_codec=video.get("codec_name") if video else None,
        width=_positive_int(video.get("width")) if video else None,
        height=_positive_int(video.get("height")) if video else None,
    )
