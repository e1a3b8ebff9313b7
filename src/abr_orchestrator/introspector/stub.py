"""Stub MediaProber for development and testing."""

from abr_orchestrator.exceptions import ProbeError
from abr_orchestrator.introspector.models import ProbeResult, StreamsPresent
from abr_orchestrator.orchestrator.context import CancellationToken


class StubProber:
    """Prober that returns a fixed result or raises a fixed error.

    Records every media URL it is asked about in ``calls``.
    """

    def __init__(
        self,
        result: ProbeResult | None = None,
        error: ProbeError | None = None,
    ) -> None:
        self._result = result or ProbeResult(
            duration_seconds=10.0,
            streams=StreamsPresent(has_video=True, has_audio=True),
        )
        self._error = error
        self.calls: list[str] = []

    def probe_metadata(
        self,
        media_url: str,
        keyframe_aligned: bool = True,
        token: CancellationToken | None = None,
    ) -> ProbeResult:
        self.calls.append(media_url)
        if self._error is not None:
            raise self._error
        return self._result
