"""Per-thread profile context for log correlation.

When several encoders run at once their output interleaves in the log.
Records emitted inside profile_context() carry a ``[<run>:<profile>] `` tag
so every line can be attributed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

_local = threading.local()


@dataclass(frozen=True)
class ProfileContext:
    """Identifies the run and profile a thread is working on."""

    run_id: str
    profile_name: str | None = None

    @property
    def tag(self) -> str:
        short_run = self.run_id[:8]
        if self.profile_name:
            return f"[{short_run}:{self.profile_name}] "
        return f"[{short_run}] "


def set_profile_context(run_id: str, profile_name: str | None = None) -> None:
    """Set the context for the current thread."""
    _local.context = ProfileContext(run_id=run_id, profile_name=profile_name)


def get_profile_context() -> ProfileContext | None:
    """Return the current thread's context, if any."""
    return getattr(_local, "context", None)


def clear_profile_context() -> None:
    """Remove the context from the current thread."""
    _local.context = None


@contextmanager
def profile_context(
    run_id: str, profile_name: str | None = None
) -> Iterator[ProfileContext]:
    """Scope a profile context to a block, restoring the previous one after."""
    previous = get_profile_context()
    set_profile_context(run_id, profile_name)
    try:
        yield get_profile_context()  # type: ignore[misc]
    finally:
        _local.context = previous


@contextmanager
def inherited_context(context: ProfileContext | None) -> Iterator[None]:
    """Re-apply a context captured on another thread."""
    if context is None:
        yield
        return
    with profile_context(context.run_id, context.profile_name):
        yield


class ProfileContextFilter(logging.Filter):
    """Inject ``profile_tag``, ``run_id`` and ``profile`` into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_profile_context()
        if context is None:
            record.profile_tag = ""
        else:
            record.profile_tag = context.tag
            record.run_id = context.run_id
            if context.profile_name:
                record.profile = context.profile_name
        return True
