"""Video/audio profiles, ladder files and parameter resolution."""

from abr_orchestrator.profiles.defaults import DEFAULT_LADDER, build_default_ladder
from abr_orchestrator.profiles.geometry import (
    H264,
    VP9,
    BitrateLadder,
    CodecSpec,
    ResolvedParameters,
    is_vp9_profile,
    resolve_bitrate_ladder,
    resolve_codec,
    resolve_parameters,
    resolve_scale,
    resolve_thread_budget,
)
from abr_orchestrator.profiles.loader import (
    Ladder,
    LadderValidationError,
    load_ladder,
    load_ladder_from_dict,
)
from abr_orchestrator.profiles.models import AudioProfile, ProfileSet, VideoProfile

__all__ = [
    # Models
    "AudioProfile",
    "ProfileSet",
    "VideoProfile",
    # Geometry
    "BitrateLadder",
    "CodecSpec",
    "H264",
    "ResolvedParameters",
    "VP9",
    "is_vp9_profile",
    "resolve_bitrate_ladder",
    "resolve_codec",
    "resolve_parameters",
    "resolve_scale",
    "resolve_thread_budget",
    # Ladder files
    "DEFAULT_LADDER",
    "Ladder",
    "LadderValidationError",
    "build_default_ladder",
    "load_ladder",
    "load_ladder_from_dict",
]
