"""Run and per-profile outcome models.

A run never collapses into a single success flag: callers get one outcome
per profile and decide for themselves whether partial failure is failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from abr_orchestrator.exceptions import AbrError
    from abr_orchestrator.introspector.models import ProbeResult, SegmentationMode


class ProfileStatus(str, Enum):
    """Final state of one profile's encode."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    """Never started because the run was cancelled first."""


@dataclass(frozen=True)
class ProfileOutcome:
    """Result of encoding one profile."""

    profile_name: str
    status: ProfileStatus
    elapsed_seconds: float = 0.0
    output_dir: Path | None = None
    error: AbrError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ProfileStatus.SUCCEEDED

    @property
    def reason(self) -> str | None:
        return self.error.message if self.error is not None else None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "profile": self.profile_name,
            "status": self.status.value,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "error": self.reason,
        }


@dataclass(frozen=True)
class RunResult:
    """Result of one TranscodeRun.run() call.

    Attributes:
        run_id: Run identifier.
        work_dir: Run directory.
        playlist_path: Master playlist path, None if it could not be written.
        probe: Probe result, None if the general probe failed.
        segmentation_mode: Segmentation strategy the run ended up with.
        outcomes: One outcome per profile, in profile insertion order.
        elapsed_seconds: Wall time of the whole run.
        cancelled: Whether the run token was cancelled.
        errors: Run-level errors (directory, playlist, probe) that were
            logged but did not stop the run.
    """

    run_id: str
    work_dir: Path
    playlist_path: Path | None
    probe: ProbeResult | None
    segmentation_mode: SegmentationMode
    outcomes: tuple[ProfileOutcome, ...]
    elapsed_seconds: float
    cancelled: bool = False
    errors: tuple[AbrError, ...] = ()

    @property
    def succeeded(self) -> list[ProfileOutcome]:
        return [o for o in self.outcomes if o.status is ProfileStatus.SUCCEEDED]

    @property
    def failed(self) -> list[ProfileOutcome]:
        return [o for o in self.outcomes if o.status is ProfileStatus.FAILED]

    @property
    def skipped(self) -> list[ProfileOutcome]:
        return [o for o in self.outcomes if o.status is ProfileStatus.SKIPPED]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.outcomes) and len(self.succeeded) == len(self.outcomes)

    @property
    def any_succeeded(self) -> bool:
        return bool(self.succeeded)

    def outcome(self, profile_name: str) -> ProfileOutcome:
        """Look up the outcome for a profile.

        Raises:
            KeyError: If the profile was not part of the run.
        """
        for outcome in self.outcomes:
            if outcome.profile_name == profile_name:
                return outcome
        raise KeyError(profile_name)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "run_id": self.run_id,
            "work_dir": str(self.work_dir),
            "playlist_path": str(self.playlist_path) if self.playlist_path else None,
            "segmentation_mode": self.segmentation_mode.value,
            "probe": self.probe.to_dict() if self.probe else None,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "cancelled": self.cancelled,
            "errors": [e.message for e in self.errors],
            "profiles": [o.to_dict() for o in self.outcomes],
        }
