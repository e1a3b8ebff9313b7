"""MediaProber interface for source metadata extraction."""

from typing import Protocol

from abr_orchestrator.exceptions import ProbeError
from abr_orchestrator.introspector.models import ProbeResult
from abr_orchestrator.orchestrator.context import CancellationToken

__all__ = ["MediaProber", "ProbeError"]


class MediaProber(Protocol):
    """Protocol for media probing implementations."""

    def probe_metadata(
        self,
        media_url: str,
        keyframe_aligned: bool = True,
        token: CancellationToken | None = None,
    ) -> ProbeResult:
        """Probe a media URL.

        Args:
            media_url: Source media location.
            keyframe_aligned: Collect keyframe timestamps when the general
                pass did not return any for a present video stream.
            token: Optional cancellation token.

        Returns:
            ProbeResult for the source.

        Raises:
            ProbeError: If the general metadata probe fails.
        """
        ...
