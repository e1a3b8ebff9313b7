"""Run orchestration.

TranscodeRun lives in ``abr_orchestrator.orchestrator.runner``; it is not
imported here because the executor and introspector depend on this
package's context module.
"""

from abr_orchestrator.orchestrator.context import (
    CancellationToken,
    RunConfig,
    RunContext,
    generate_run_id,
)
from abr_orchestrator.orchestrator.results import (
    ProfileOutcome,
    ProfileStatus,
    RunResult,
)

__all__ = [
    "CancellationToken",
    "ProfileOutcome",
    "ProfileStatus",
    "RunConfig",
    "RunContext",
    "RunResult",
    "generate_run_id",
]
