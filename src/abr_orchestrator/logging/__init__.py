"""Structured logging for transcode runs.

Text or JSON output with optional file rotation. Records are tagged with
the run and profile they belong to.
"""

from abr_orchestrator.logging.config import configure_logging
from abr_orchestrator.logging.context import (
    ProfileContext,
    ProfileContextFilter,
    clear_profile_context,
    get_profile_context,
    inherited_context,
    profile_context,
    set_profile_context,
)
from abr_orchestrator.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "ProfileContext",
    "ProfileContextFilter",
    "clear_profile_context",
    "configure_logging",
    "get_profile_context",
    "inherited_context",
    "profile_context",
    "set_profile_context",
]
