"""Geometry and encoder parameter resolution for video profiles.

All functions here are pure: the same profile always resolves to the same
scale expression, bitrate corridor and codec parameters. The only host
dependent value is the thread budget, which callers compute once per run.
"""

import os
from dataclasses import dataclass

from abr_orchestrator.profiles.models import VideoProfile

VP9_NAME_MARKER = "vp9"
"""Profile names starting with this marker are encoded with VP9 into fMP4."""

MIN_THREADS = 1
MAX_THREADS = 16

MIN_RATE_FACTOR = 0.8
MAX_RATE_FACTOR = 1.2
BUFFER_FACTOR = 2

AUDIO_CODEC_TAG = "mp4a.40.2"


@dataclass(frozen=True)
class CodecSpec:
    """Codec-specific encoder and packaging parameters."""

    name: str
    encoder: str
    segment_type: str
    segment_extension: str
    encoder_tag: str
    playlist_codec: str
    extra_args: tuple[str, ...] = ()


H264 = CodecSpec(
    name="h264",
    encoder="libx264",
    segment_type="mpegts",
    segment_extension="ts",
    encoder_tag="avc1.42E01E",
    playlist_codec="avc1.42E01E",
    extra_args=("-tune", "zerolatency"),
)

VP9 = CodecSpec(
    name="vp9",
    encoder="libvpx-vp9",
    segment_type="fmp4",
    segment_extension="m4s",
    encoder_tag="vp09",
    playlist_codec="vp09.00.10.08",
    extra_args=("-tile-columns", "2"),
)


@dataclass(frozen=True)
class BitrateLadder:
    """Rate control corridor around a target bitrate, all in kbps."""

    target_kbps: int
    minimum_kbps: float
    maximum_kbps: float
    buffer_kbps: int


@dataclass(frozen=True)
class ResolvedParameters:
    """Everything the job builder needs to know about one profile."""

    scale: str
    bitrate: BitrateLadder
    codec: CodecSpec
    quality_crf: int


def is_vp9_profile(name: str) -> bool:
    """Return True when the profile name selects the VP9 branch."""
    return name.startswith(VP9_NAME_MARKER)


def resolve_codec(name: str) -> CodecSpec:
    """Select codec parameters from the profile name."""
    return VP9 if is_vp9_profile(name) else H264


def resolve_scale(profile: VideoProfile) -> str:
    """Build an aspect-preserving scale filter for the profile.

    Landscape and square profiles pin the height and let the encoder pick
    the nearest even width; portrait profiles pin the width instead.
    """
    if profile.width >= profile.height:
        return f"scale=-2:{profile.height}"
    return f"scale={profile.width}:-2"


def resolve_bitrate_ladder(profile: VideoProfile) -> BitrateLadder:
    """Derive min/max/buffer rates from the profile's target bitrate."""
    target = profile.bitrate_kbps
    return BitrateLadder(
        target_kbps=target,
        minimum_kbps=target * MIN_RATE_FACTOR,
        maximum_kbps=target * MAX_RATE_FACTOR,
        buffer_kbps=target * BUFFER_FACTOR,
    )


def resolve_thread_budget(
    cpu_count: int | None = None, thread_cap: int | None = None
) -> int:
    """Compute the encoder thread count for this host.

    Leaves one execution unit free and clamps the result to [1, 16]. An
    explicit cap lowers the budget further but never below 1.

    Args:
        cpu_count: Available parallel execution units. Read from the host
            when not given.
        thread_cap: Optional configured upper bound.

    Returns:
        Thread count to pass to every encoder job.
    """
    if cpu_count is None:
        cpu_count = os.cpu_count() or 1
    threads = max(MIN_THREADS, min(cpu_count - 1, MAX_THREADS))
    if thread_cap is not None:
        threads = max(MIN_THREADS, min(threads, thread_cap))
    return threads


def resolve_parameters(name: str, profile: VideoProfile) -> ResolvedParameters:
    """Resolve scale, bitrate corridor and codec for a named profile."""
    return ResolvedParameters(
        scale=resolve_scale(profile),
        bitrate=resolve_bitrate_ladder(profile),
        codec=resolve_codec(name),
        quality_crf=profile.quality_crf,
    )
