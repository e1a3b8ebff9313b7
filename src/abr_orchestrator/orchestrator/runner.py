"""Run orchestration: one source, many HLS renditions.

TranscodeRun owns one run directory and one run identifier. run() goes
through the steps in order, logging and recording failures without letting
any one of them stop the rest:

1. Create the run directory.
2. Write the master playlist, so even a partial run is navigable.
3. Probe the source (degrades to time-based segmentation on failure).
4. Encode every profile, sequentially or on a bounded worker pool.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from abr_orchestrator.exceptions import (
    AbrError,
    ConfigError,
    DirectoryError,
    EncodeError,
    ProbeError,
)
from abr_orchestrator.executor.command import build_job, resolve_segmentation_mode
from abr_orchestrator.executor.process import run_streaming
from abr_orchestrator.hls.playlist import write_master_playlist
from abr_orchestrator.introspector.ffprobe import FFprobeProber
from abr_orchestrator.logging.context import profile_context
from abr_orchestrator.orchestrator.context import (
    CANCEL_REASON_TIMEOUT,
    CancellationToken,
    RunConfig,
    RunContext,
    generate_run_id,
    new_run_id,
)
from abr_orchestrator.orchestrator.results import (
    ProfileOutcome,
    ProfileStatus,
    RunResult,
)
from abr_orchestrator.profiles.geometry import resolve_thread_budget
from abr_orchestrator.profiles.models import AudioProfile, ProfileSet, VideoProfile

if TYPE_CHECKING:
    from abr_orchestrator.config.models import AbrConfig
    from abr_orchestrator.introspector.interface import MediaProber
    from abr_orchestrator.profiles.loader import Ladder

logger = logging.getLogger(__name__)

OUTPUT_DIR_NAME = "output"
FALLBACK_BASE_DIR = Path("/etc/transcode")


def ensure_directory(path: Path, phase: str) -> Path:
    """Create a directory (and parents) if it does not exist.

    Raises:
        DirectoryError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(path, phase, str(e)) from e
    return path


def _default_base_dir() -> Path:
    try:
        return Path.cwd()
    except OSError as e:
        logger.error("Error getting current working directory: %s", e)
        return FALLBACK_BASE_DIR


class TranscodeRun:
    """Orchestrates probing, playlist generation and encoding for one source.

    Not reentrant: a second concurrent call to run() raises RuntimeError.
    Calling run() again after it returns re-probes and re-encodes into the
    same run directory.
    """

    def __init__(
        self,
        media_url: str,
        profiles: ProfileSet | Mapping[str, VideoProfile],
        *,
        audio: AudioProfile | None = None,
        encoder_path: str | None = None,
        prober_path: str | None = None,
        base_dir: Path | None = None,
        segment_length_seconds: float = 1.0,
        keyframe_aligned: bool = True,
        thread_cap: int | None = None,
        segment_prefix: str = "chunk",
        workers: int = 1,
        profile_timeout_seconds: float | None = None,
        token: CancellationToken | None = None,
        prober: MediaProber | None = None,
        id_factory: Callable[[], str] = generate_run_id,
        cpu_count: int | None = None,
    ) -> None:
        """Validate inputs and prepare the run configuration.

        No files are created and no processes are started here.

        Raises:
            ConfigError: If the profile set is empty or any setting is invalid.
            IDGenerationError: If a run identifier cannot be generated.
        """
        if not isinstance(profiles, ProfileSet):
            profiles = ProfileSet.from_mapping(profiles)
        if not profiles:
            raise ConfigError("specify at least one video profile", field="profiles")

        run_id = new_run_id(id_factory)
        base = base_dir if base_dir is not None else _default_base_dir()

        self.profiles = profiles
        self.audio = audio or AudioProfile()
        self.config = RunConfig(
            run_id=run_id,
            media_url=media_url,
            work_dir=base / OUTPUT_DIR_NAME / run_id,
            encoder_path=encoder_path or "ffmpeg",
            prober_path=prober_path or "ffprobe",
            segment_length_seconds=segment_length_seconds,
            keyframe_aligned=keyframe_aligned,
            thread_cap=resolve_thread_budget(cpu_count, thread_cap),
            segment_prefix=segment_prefix,
            workers=workers,
            profile_timeout_seconds=profile_timeout_seconds,
        )
        self.token = token or CancellationToken()
        self._prober = prober or FFprobeProber(self.config.prober_path)
        self._run_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        media_url: str,
        ladder: Ladder,
        config: AbrConfig,
        **overrides,
    ) -> TranscodeRun:
        """Create a run from a ladder and the loaded application config.

        Keyword overrides take precedence over config values.
        """
        kwargs = {
            "audio": ladder.audio,
            "encoder_path": str(config.tools.ffmpeg) if config.tools.ffmpeg else None,
            "prober_path": str(config.tools.ffprobe) if config.tools.ffprobe else None,
            "base_dir": config.output_base,
            "segment_length_seconds": config.encoding.segment_length_seconds,
            "keyframe_aligned": config.encoding.keyframe_aligned,
            "thread_cap": config.encoding.thread_cap,
            "segment_prefix": config.encoding.segment_prefix,
            "workers": config.processing.workers,
            "profile_timeout_seconds": config.encoding.profile_timeout_seconds,
        }
        kwargs.update(overrides)
        return cls(media_url, ladder.profiles, **kwargs)

    @property
    def run_id(self) -> str:
        return self.config.run_id

    @property
    def work_dir(self) -> Path:
        return self.config.work_dir

    def cancel(self) -> None:
        """Cancel the run; in-flight encoders are terminated."""
        self.token.cancel()

    def run(self) -> RunResult:
        """Execute the run.

        Returns:
            RunResult with one outcome per profile.

        Raises:
            RuntimeError: If this instance is already running.
        """
        if not self._run_lock.acquire(blocking=False):
            raise RuntimeError(f"Run {self.run_id} is already in progress")
        try:
            with profile_context(self.run_id):
                return self._run()
        finally:
            self._run_lock.release()

    def _run(self) -> RunResult:
        start = time.monotonic()
        context = RunContext(
            config=self.config,
            profiles=self.profiles,
            audio=self.audio,
            token=self.token,
        )
        errors: list[AbrError] = []
        logger.info(
            "Starting run %s: %s -> %s (%d profiles)",
            self.run_id,
            self.config.media_url,
            self.config.work_dir,
            len(self.profiles),
        )

        try:
            ensure_directory(self.config.work_dir, "run")
        except DirectoryError as e:
            logger.error("Error creating transcode directory: %s", e)
            errors.append(e)

        playlist_path = None
        try:
            playlist_path = write_master_playlist(self.config.work_dir, self.profiles)
        except DirectoryError as e:
            logger.error("Error writing playlist: %s", e)
            errors.append(e)

        self._fetch_metadata(context, errors)
        outcomes = self._encode_all(context)

        probe = context.probe
        segmentation_mode = resolve_segmentation_mode(self.config, probe)
        result = RunResult(
            run_id=self.run_id,
            work_dir=self.config.work_dir,
            playlist_path=playlist_path,
            probe=probe,
            segmentation_mode=segmentation_mode,
            outcomes=tuple(outcomes),
            elapsed_seconds=time.monotonic() - start,
            cancelled=self.token.is_cancelled,
            errors=tuple(errors),
        )
        logger.info(
            "Run %s finished in %.2fs: %d succeeded, %d failed, %d skipped",
            self.run_id,
            result.elapsed_seconds,
            len(result.succeeded),
            len(result.failed),
            len(result.skipped),
        )
        return result

    def _fetch_metadata(self, context: RunContext, errors: list[AbrError]) -> None:
        """Probe the source once and record the result before fan-out."""
        start = time.monotonic()
        logger.info("Fetching metadata")
        try:
            probe = self._prober.probe_metadata(
                self.config.media_url,
                keyframe_aligned=self.config.keyframe_aligned,
                token=self.token,
            )
        except ProbeError as e:
            logger.error(
                "Error fetching metadata, using time-based segmentation: %s", e
            )
            errors.append(e)
            context.record_probe(None)
            return

        context.record_probe(probe)
        logger.info(
            "Fetched metadata in %.2fs: duration=%.2fs video=%s audio=%s "
            "segmentation=%s",
            time.monotonic() - start,
            probe.duration_seconds,
            probe.streams.has_video,
            probe.streams.has_audio,
            probe.segmentation_mode.value,
        )

    def _encode_all(self, context: RunContext) -> list[ProfileOutcome]:
        """Encode every profile, keeping outcomes in profile order."""
        entries = list(self.profiles)
        workers = min(self.config.workers, len(entries))

        if workers <= 1:
            return [
                self._encode_or_skip(context, name, profile)
                for name, profile in entries
            ]

        logger.info("Encoding %d profiles with %d workers", len(entries), workers)
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"encode-{self.run_id[:8]}"
        ) as executor:
            futures = [
                executor.submit(self._encode_or_skip, context, name, profile)
                for name, profile in entries
            ]
            return [future.result() for future in futures]

    def _encode_or_skip(
        self, context: RunContext, name: str, profile: VideoProfile
    ) -> ProfileOutcome:
        if context.token.is_cancelled:
            logger.info("Run cancelled, skipping profile %s", name)
            return ProfileOutcome(profile_name=name, status=ProfileStatus.SKIPPED)
        with profile_context(self.run_id, name):
            return self._encode_profile(context, name, profile)

    def _encode_profile(
        self, context: RunContext, name: str, profile: VideoProfile
    ) -> ProfileOutcome:
        """Prepare, build and execute the encoder job for one profile."""
        start = time.monotonic()
        config = context.config
        output_dir = config.profile_dir(name)

        def failed(error: EncodeError) -> ProfileOutcome:
            return ProfileOutcome(
                profile_name=name,
                status=ProfileStatus.FAILED,
                elapsed_seconds=time.monotonic() - start,
                output_dir=output_dir,
                error=error,
            )

        try:
            ensure_directory(output_dir, "profile")
        except DirectoryError as e:
            logger.error("Error creating profile directory for %s: %s", name, e)
            return failed(EncodeError(name, "prepare", e.reason))

        job = build_job(name, profile, config, context.audio, context.probe)
        cmd = job.command(config.encoder_path)
        logger.info(
            "Starting encoder for profile %s (%s segmentation)",
            name,
            job.segmentation_mode.value,
        )
        logger.debug("Encoder command: %s", " ".join(cmd))

        token = context.token.child(config.profile_timeout_seconds)
        try:
            result = run_streaming(cmd, token)
        except OSError as e:
            logger.error("Error starting encoder for profile %s: %s", name, e)
            return failed(EncodeError(name, "start", str(e)))

        if result.cancelled:
            phase = (
                "timeout"
                if result.cancel_reason == CANCEL_REASON_TIMEOUT
                else "cancelled"
            )
            logger.warning(
                "Encoder for profile %s stopped after %.2fs (%s)",
                name,
                result.elapsed_seconds,
                phase,
            )
            return failed(
                EncodeError(
                    name,
                    phase,
                    f"encoder {phase}",
                    returncode=result.returncode,
                    stderr_tail=result.output_tail,
                )
            )

        if not result.success:
            logger.error(
                "Encoder exited with code %s for profile %s", result.returncode, name
            )
            return failed(
                EncodeError(
                    name,
                    "exit",
                    f"encoder exited with code {result.returncode}",
                    returncode=result.returncode,
                    stderr_tail=result.output_tail,
                )
            )

        elapsed = time.monotonic() - start
        logger.info("Finished encoding profile %s in %.2fs", name, elapsed)
        return ProfileOutcome(
            profile_name=name,
            status=ProfileStatus.SUCCEEDED,
            elapsed_seconds=elapsed,
            output_dir=output_dir,
        )
