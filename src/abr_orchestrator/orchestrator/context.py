"""Run-scoped state: configuration, cancellation and the probed metadata.

A RunContext is created for each invocation of TranscodeRun.run() and is
owned by it. The probe result is written once before profile jobs fan out
and is read-only afterwards, so workers never need a lock to read it.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from abr_orchestrator.exceptions import ConfigError, IDGenerationError

if TYPE_CHECKING:
    from abr_orchestrator.introspector.models import ProbeResult
    from abr_orchestrator.profiles.models import AudioProfile, ProfileSet

CANCEL_REASON_CANCELLED = "cancelled"
CANCEL_REASON_TIMEOUT = "timeout"


class CancellationToken:
    """Thread-safe cancellation signal with an optional deadline.

    A token is cancelled when cancel() is called, when its deadline passes,
    or when its parent token is cancelled. Child tokens let a single encode
    carry its own timeout while still honouring run-wide cancellation.
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: CancellationToken | None = None,
    ) -> None:
        self._event = threading.Event()
        self._reason: str | None = None
        self._lock = threading.Lock()
        self._parent = parent
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self, reason: str = CANCEL_REASON_CANCELLED) -> None:
        """Cancel the token. Only the first reason is kept."""
        with self._lock:
            if self._reason is None:
                self._reason = reason
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(CANCEL_REASON_TIMEOUT)
            return True
        if self._parent is not None and self._parent.is_cancelled:
            self.cancel(self._parent.reason or CANCEL_REASON_CANCELLED)
            return True
        return False

    @property
    def reason(self) -> str | None:
        return self._reason

    def child(self, timeout: float | None = None) -> CancellationToken:
        """Create a token cancelled with this one, optionally with a deadline."""
        return CancellationToken(timeout=timeout, parent=self)


def generate_run_id() -> str:
    """Generate a unique run identifier."""
    return uuid.uuid4().hex


def new_run_id(factory: Callable[[], str] = generate_run_id) -> str:
    """Produce a run identifier, normalising factory failures.

    Raises:
        IDGenerationError: If the factory fails or returns an unusable id.
    """
    try:
        run_id = factory()
    except Exception as e:
        raise IDGenerationError(f"Error generating run id: {e}") from e
    if not isinstance(run_id, str) or not run_id or "/" in run_id:
        raise IDGenerationError(f"Run id factory returned an invalid id: {run_id!r}")
    return run_id


@dataclass(frozen=True)
class RunConfig:
    """Immutable settings for one run.

    Attributes:
        run_id: Unique identifier; also the name of the run directory.
        media_url: Source media location handed to the prober and encoder.
        work_dir: Run directory, exclusively owned by this run.
        encoder_path: Encoder executable (name on PATH or absolute path).
        prober_path: Probing tool executable.
        segment_length_seconds: Target HLS segment duration.
        keyframe_aligned: Whether to collect keyframe timestamps.
        thread_cap: Thread count passed to every encoder job.
        segment_prefix: Segment file name prefix (``<prefix>-00000.ts``).
        workers: Maximum number of concurrent encoder processes.
        profile_timeout_seconds: Per-encode timeout, None for unbounded.
    """

    run_id: str
    media_url: str
    work_dir: Path
    encoder_path: str = "ffmpeg"
    prober_path: str = "ffprobe"
    segment_length_seconds: float = 1.0
    keyframe_aligned: bool = True
    thread_cap: int = 1
    segment_prefix: str = "chunk"
    workers: int = 1
    profile_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.media_url:
            raise ConfigError("media_url is required", field="media_url")
        if self.segment_length_seconds <= 0:
            raise ConfigError(
                f"segment_length_seconds must be positive, "
                f"got {self.segment_length_seconds}",
                field="segment_length_seconds",
            )
        if self.thread_cap < 1:
            raise ConfigError(
                f"thread_cap must be at least 1, got {self.thread_cap}",
                field="thread_cap",
            )
        if self.workers < 1:
            raise ConfigError(
                f"workers must be at least 1, got {self.workers}", field="workers"
            )
        if not self.segment_prefix or "/" in self.segment_prefix:
            raise ConfigError(
                f"Invalid segment_prefix: {self.segment_prefix!r}",
                field="segment_prefix",
            )
        timeout = self.profile_timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ConfigError(
                f"profile_timeout_seconds must be positive, "
                f"got {self.profile_timeout_seconds}",
                field="profile_timeout_seconds",
            )

    def profile_dir(self, profile_name: str) -> Path:
        """Output directory for a profile; disjoint from every other profile."""
        return self.work_dir / profile_name


@dataclass
class RunContext:
    """State owned by a single run invocation."""

    config: RunConfig
    profiles: ProfileSet
    audio: AudioProfile
    token: CancellationToken = field(default_factory=CancellationToken)
    _probe: ProbeResult | None = field(default=None, init=False, repr=False)
    _probe_recorded: bool = field(default=False, init=False, repr=False)

    def record_probe(self, probe: ProbeResult | None) -> None:
        """Store the probe outcome. May only be called once per run.

        Raises:
            RuntimeError: If a probe outcome was already recorded.
        """
        if self._probe_recorded:
            raise RuntimeError("Probe result already recorded for this run")
        self._probe = probe
        self._probe_recorded = True

    @property
    def probe(self) -> ProbeResult | None:
        return self._probe
