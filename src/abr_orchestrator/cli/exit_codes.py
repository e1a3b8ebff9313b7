"""Exit codes shared by all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, ladder)
    30-39: Tool errors
    40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for abr-orchestrator commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # SIGINT cancelled the run

    # Validation errors (10-19)
    CONFIG_ERROR = 11

    # Tool errors (30-39)
    PROBE_FAILED = 32

    # Operation errors (40-49)
    OPERATION_FAILED = 40
