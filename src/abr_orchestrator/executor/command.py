"""Encoder job construction.

build_job() turns one named profile plus the run settings into the full
ffmpeg argument list for that rendition. It is pure construction: nothing
is executed or created on disk here.

Segmentation follows the probe outcome. With known source keyframes the
encoder is told to place keyframes exactly on boundaries picked from them,
and the HLS muxer cuts only on keyframes. Without them keyframes are forced
every FORCED_KEYFRAME_INTERVAL_SECONDS and segments are split by time.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from abr_orchestrator.introspector.models import ProbeResult, SegmentationMode
from abr_orchestrator.orchestrator.context import RunConfig
from abr_orchestrator.profiles.geometry import ResolvedParameters, resolve_parameters
from abr_orchestrator.profiles.models import AudioProfile, VideoProfile

FORCED_KEYFRAME_INTERVAL_SECONDS = 10
OUTPUT_FRAME_RATE = 25
ENCODER_PRESET = "fast"
ENCODER_LOGLEVEL = "warning"
AUDIO_ENCODER = "aac"
SEGMENT_INDEX_PATTERN = "%05d"


@dataclass(frozen=True)
class EncodeJob:
    """One encoder invocation for one profile.

    Attributes:
        profile_name: Profile this job renders.
        arguments: Encoder arguments, without the executable.
        output_dir: Profile directory receiving segments and the playlist.
        playlist_path: Variant playlist written by the encoder.
        segment_pattern: Segment file pattern handed to the encoder.
        segmentation_mode: How the arguments choose segment boundaries.
        keyframe_boundaries: Forced keyframe times in keyframe mode.
    """

    profile_name: str
    arguments: tuple[str, ...]
    output_dir: Path
    playlist_path: Path
    segment_pattern: Path
    segmentation_mode: SegmentationMode = SegmentationMode.TIME_BASED
    keyframe_boundaries: tuple[float, ...] = ()

    def command(self, encoder_path: str) -> list[str]:
        """Full command line for the given encoder executable."""
        return [encoder_path, *self.arguments]


def resolve_segmentation_mode(
    config: RunConfig, probe: ProbeResult | None
) -> SegmentationMode:
    """Segmentation a run actually uses, given its settings and probe outcome."""
    if config.keyframe_aligned and probe is not None:
        return probe.segmentation_mode
    return SegmentationMode.TIME_BASED


def select_keyframe_boundaries(
    keyframes: Sequence[float], segment_length_seconds: float
) -> tuple[float, ...]:
    """Pick segment boundaries from ascending source keyframe times.

    The first keyframe always starts a segment. After that, the first
    keyframe at least segment_length_seconds past the previous boundary
    starts the next one, so no segment is shorter than the target.
    """
    boundaries: list[float] = []
    for timestamp in keyframes:
        if not boundaries or timestamp >= boundaries[-1] + segment_length_seconds:
            boundaries.append(timestamp)
    return tuple(boundaries)


def _input_args(media_url: str, boundaries: tuple[float, ...]) -> list[str]:
    if boundaries:
        force_key_frames = ",".join(f"{t:.3f}" for t in boundaries)
    else:
        force_key_frames = f"expr:gte(t,n_forced*{FORCED_KEYFRAME_INTERVAL_SECONDS})"
    return ["-i", media_url, "-force_key_frames", force_key_frames]


def _video_args(params: ResolvedParameters, threads: int) -> list[str]:
    ladder = params.bitrate
    return [
        "-vf",
        params.scale,
        "-preset",
        ENCODER_PRESET,
        "-r",
        str(OUTPUT_FRAME_RATE),
        "-b:v",
        f"{ladder.target_kbps}k",
        "-threads",
        str(threads),
        "-crf",
        str(params.quality_crf),
        "-minrate",
        f"{ladder.minimum_kbps:f}k",
        "-maxrate",
        f"{ladder.maximum_kbps:f}k",
        "-bufsize",
        f"{ladder.buffer_kbps}k",
    ]


def _codec_args(params: ResolvedParameters) -> list[str]:
    codec = params.codec
    return [
        "-c:v",
        codec.encoder,
        "-hls_segment_type",
        codec.segment_type,
        "-tag:v",
        codec.encoder_tag,
        *codec.extra_args,
    ]


def _audio_args(audio: AudioProfile) -> list[str]:
    return ["-c:a", AUDIO_ENCODER, "-b:a", f"{audio.bitrate_kbps}k"]


def _hls_args(
    segment_length_seconds: float,
    segment_pattern: Path,
    playlist_path: Path,
    split_by_time: bool,
) -> list[str]:
    args = [
        "-f",
        "hls",
        "-movflags",
        "+faststart",
        "-hls_time",
        f"{segment_length_seconds:.2f}",
        "-hls_list_size",
        "0",
    ]
    if split_by_time:
        args += ["-hls_flags", "split_by_time"]
    args += [
        "-hls_playlist_type",
        "vod",
        "-hls_segment_filename",
        str(segment_pattern),
        str(playlist_path),
    ]
    return args


def build_job(
    profile_name: str,
    profile: VideoProfile,
    config: RunConfig,
    audio: AudioProfile,
    probe: ProbeResult | None = None,
) -> EncodeJob:
    """Build the encoder job for one profile.

    Args:
        profile_name: Profile name; a ``vp9`` prefix selects VP9/fMP4.
        profile: Profile geometry, bitrate and quality.
        config: Run settings (source, directories, segment length, threads).
        audio: Global audio settings.
        probe: Probe outcome for the run; its keyframes select keyframe
            segmentation when the run asks for alignment.

    Returns:
        EncodeJob with the complete argument list.
    """
    params = resolve_parameters(profile_name, profile)
    output_dir = config.profile_dir(profile_name)
    segment_pattern = output_dir / (
        f"{config.segment_prefix}-{SEGMENT_INDEX_PATTERN}."
        f"{params.codec.segment_extension}"
    )
    playlist_path = output_dir / f"{profile_name}.m3u8"

    mode = resolve_segmentation_mode(config, probe)
    boundaries: tuple[float, ...] = ()
    if mode is SegmentationMode.KEYFRAME and probe is not None:
        boundaries = select_keyframe_boundaries(
            probe.video_keyframe_timestamps or (), config.segment_length_seconds
        )

    arguments = [
        "-loglevel",
        ENCODER_LOGLEVEL,
        *_input_args(config.media_url, boundaries),
        *_video_args(params, config.thread_cap),
        *_codec_args(params),
        *_audio_args(audio),
        *_hls_args(
            config.segment_length_seconds,
            segment_pattern,
            playlist_path,
            split_by_time=mode is SegmentationMode.TIME_BASED,
        ),
    ]

    return EncodeJob(
        profile_name=profile_name,
        arguments=tuple(arguments),
        output_dir=output_dir,
        playlist_path=playlist_path,
        segment_pattern=segment_pattern,
        segmentation_mode=mode,
        keyframe_boundaries=boundaries,
    )
