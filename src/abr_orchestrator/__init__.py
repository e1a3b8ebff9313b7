"""abr-orchestrator: drive ffmpeg to produce adaptive-bitrate HLS output."""

__version__ = "0.1.0"

from abr_orchestrator.exceptions import (  # noqa: E402
    AbrError,
    ConfigError,
    DirectoryError,
    EncodeError,
    IDGenerationError,
    ProbeError,
)
from abr_orchestrator.orchestrator.results import RunResult  # noqa: E402
from abr_orchestrator.orchestrator.runner import TranscodeRun  # noqa: E402
from abr_orchestrator.profiles.models import (  # noqa: E402
    AudioProfile,
    ProfileSet,
    VideoProfile,
)

__all__ = [
    "AbrError",
    "AudioProfile",
    "ConfigError",
    "DirectoryError",
    "EncodeError",
    "IDGenerationError",
    "ProbeError",
    "ProfileSet",
    "RunResult",
    "TranscodeRun",
    "VideoProfile",
    "__version__",
]
