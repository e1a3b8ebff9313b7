"""ffprobe-based implementation of the MediaProber protocol.

Probing is a two-step pipeline:

1. A general pass reads container, stream and duration information. Its
   failure is a ProbeError.
2. When keyframe alignment is requested and the general pass reported a
   video stream without keyframe timestamps, a narrower packet-level pass
   collects them. This is a fallback, not a retry: if it fails or returns
   nothing, the result is marked as degraded to time-based segmentation
   and returned without raising.
"""

import logging
from dataclasses import replace

from abr_orchestrator.exceptions import ProbeError
from abr_orchestrator.executor.process import ProcessCancelledError, run_captured
from abr_orchestrator.introspector.models import ProbeResult
from abr_orchestrator.introspector.parsers import (
    decode_json,
    parse_keyframe_packets,
    parse_probe_output,
)
from abr_orchestrator.orchestrator.context import CancellationToken

logger = logging.getLogger(__name__)

STDERR_EXCERPT_CHARS = 500
NO_KEYFRAMES_REASON = "keyframe probe returned no timestamps"


class FFprobeProber:
    """Probe source media with ffprobe."""

    def __init__(self, ffprobe_path: str = "ffprobe") -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: ffprobe executable name or path.
        """
        self._ffprobe_path = ffprobe_path or "ffprobe"

    @property
    def ffprobe_path(self) -> str:
        return self._ffprobe_path

    def general_command(self, media_url: str) -> list[str]:
        """Command for the container/stream/duration pass."""
        return [
            self._ffprobe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            media_url,
        ]

    def keyframe_command(self, media_url: str) -> list[str]:
        """Command for the packet-level keyframe pass on the first video stream."""
        return [
            self._ffprobe_path,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "packet=pts_time,flags",
            "-print_format",
            "json",
            media_url,
        ]

    def probe_metadata(
        self,
        media_url: str,
        keyframe_aligned: bool = True,
        token: CancellationToken | None = None,
    ) -> ProbeResult:
        """Probe the source and, if needed, its keyframes.

        Raises:
            ProbeError: If the general pass fails.
        """
        result = self.probe_general(media_url, token)

        if not keyframe_aligned:
            logger.debug("Keyframe alignment disabled, skipping keyframe probe")
            return result

        if not result.needs_keyframe_probe:
            return result

        logger.info("No keyframes in general probe, running keyframe probe")
        try:
            keyframes = self.probe_keyframes(media_url, token)
        except ProbeError as e:
            logger.warning(
                "Keyframe probe failed, falling back to time-based segmentation: %s",
                e.reason,
            )
            return replace(result, keyframe_probe_error=e.reason)

        if keyframes is None:
            logger.warning(
                "Keyframe probe returned no timestamps, "
                "falling back to time-based segmentation"
            )
            return replace(result, keyframe_probe_error=NO_KEYFRAMES_REASON)

        logger.info("Found %d keyframes", len(keyframes))
        return replace(result, video_keyframe_timestamps=keyframes)

    def probe_general(
        self, media_url: str, token: CancellationToken | None = None
    ) -> ProbeResult:
        """Run the general pass.

        Raises:
            ProbeError: If ffprobe cannot run or its output is unusable.
        """
        data = self._run(self.general_command(media_url), media_url, token)
        try:
            return parse_probe_output(data)
        except ProbeError as e:
            raise ProbeError(e.reason, media_url) from e

    def probe_keyframes(
        self, media_url: str, token: CancellationToken | None = None
    ) -> tuple[float, ...] | None:
        """Run the keyframe pass.

        Returns:
            Ascending keyframe timestamps, or None if none were reported.

        Raises:
            ProbeError: If ffprobe cannot run or its output is unusable.
        """
        data = self._run(self.keyframe_command(media_url), media_url, token)
        return parse_keyframe_packets(data.get("packets"))

    def _run(
        self, cmd: list[str], media_url: str, token: CancellationToken | None
    ) -> dict:
        """Run ffprobe and decode its JSON output."""
        logger.debug("ffprobe command: %s", " ".join(cmd))
        try:
            completed = run_captured(cmd, token)
        except ProcessCancelledError as e:
            raise ProbeError(f"probe {e.reason}", media_url) from e
        except OSError as e:
            raise ProbeError(
                f"cannot start {self._ffprobe_path}: {e}", media_url
            ) from e

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()[-STDERR_EXCERPT_CHARS:]
            raise ProbeError(
                f"ffprobe exited with code {completed.returncode}: {stderr}",
                media_url,
            )

        try:
            return decode_json(completed.stdout)
        except ProbeError as e:
            raise ProbeError(e.reason, media_url) from e
