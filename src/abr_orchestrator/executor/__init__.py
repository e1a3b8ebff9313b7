"""Encoder job construction and subprocess execution."""

from abr_orchestrator.executor.command import EncodeJob, build_job
from abr_orchestrator.executor.process import (
    ProcessCancelledError,
    ProcessResult,
    run_captured,
    run_streaming,
)

__all__ = [
    "EncodeJob",
    "ProcessCancelledError",
    "ProcessResult",
    "build_job",
    "run_captured",
    "run_streaming",
]
