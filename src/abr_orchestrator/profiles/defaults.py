"""Built-in reference ladder.

Portrait renditions from 1080x1920 down to 360x640, each available as H.264
and as VP9 (``vp9_`` prefix).
"""

from abr_orchestrator.profiles.loader import Ladder
from abr_orchestrator.profiles.models import AudioProfile, ProfileSet, VideoProfile

_RUNGS: tuple[tuple[str, int, int, int], ...] = (
    ("1080p", 1080, 1920, 5000),
    ("720p", 720, 1280, 2800),
    ("540p", 540, 960, 1800),
    ("480p", 480, 854, 480),
    ("360p", 360, 640, 800),
)

DEFAULT_QUALITY_CRF = 32
DEFAULT_AUDIO_BITRATE_KBPS = 128


def build_default_ladder(include_vp9: bool = True) -> Ladder:
    """Build the reference ladder.

    Args:
        include_vp9: Also emit the ``vp9_`` variant of every rung.
    """
    entries = [
        (name, VideoProfile(width, height, bitrate, DEFAULT_QUALITY_CRF))
        for name, width, height, bitrate in _RUNGS
    ]
    if include_vp9:
        entries.extend(
            (f"vp9_{name}", VideoProfile(width, height, bitrate, DEFAULT_QUALITY_CRF))
            for name, width, height, bitrate in _RUNGS
        )
    return Ladder(
        profiles=ProfileSet(entries),
        audio=AudioProfile(bitrate_kbps=DEFAULT_AUDIO_BITRATE_KBPS),
    )


DEFAULT_LADDER = build_default_ladder()
