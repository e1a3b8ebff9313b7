"""Cancellable subprocess execution.

Every child process started here is bound to a CancellationToken. The
process handle is always reaped before the function returns, whether the
child exits on its own, is cancelled, or the caller's thread raises.
"""

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg/ffprobe
import threading
import time
from collections import deque
from dataclasses import dataclass, field

from abr_orchestrator.logging.context import get_profile_context, inherited_context
from abr_orchestrator.orchestrator.context import CancellationToken

logger = logging.getLogger(__name__)

encoder_logger = logging.getLogger("abr_orchestrator.encoder")
"""Sink for encoder stdout/stderr lines."""

POLL_INTERVAL = 0.2
TERMINATE_GRACE_SECONDS = 5.0
OUTPUT_TAIL_LINES = 10


class ProcessCancelledError(Exception):
    """Raised when a captured process is stopped by its token."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Process {reason}")


@dataclass
class ProcessResult:
    """Outcome of a streamed process run."""

    returncode: int | None
    elapsed_seconds: float
    output_tail: list[str] = field(default_factory=list)
    cancel_reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_reason is not None

    @property
    def success(self) -> bool:
        return not self.cancelled and self.returncode == 0


def _stop_process(process: subprocess.Popen) -> None:
    """Terminate a child, escalating to kill, and reap it."""
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("Process %d ignored SIGTERM, killing", process.pid)
        process.kill()
        process.wait()


def run_streaming(
    cmd: list[str],
    token: CancellationToken,
    sink: logging.Logger = encoder_logger,
) -> ProcessResult:
    """Run a command, forwarding its combined output to a logger.

    Args:
        cmd: Command and arguments.
        token: Cancellation token; cancelling it terminates the child.
        sink: Logger receiving each output line at INFO.

    Returns:
        ProcessResult with exit code, elapsed time and the last output lines.

    Raises:
        OSError: If the process cannot be started.
    """
    start = time.monotonic()
    process = subprocess.Popen(  # nosec B603 - arguments are built internally
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
    )

    tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
    context = get_profile_context()

    def forward_output() -> None:
        with inherited_context(context):
            try:
                assert process.stdout is not None
                for raw_line in process.stdout:
                    line = raw_line.rstrip()
                    if not line:
                        continue
                    tail.append(line)
                    sink.info("%s", line)
            except (ValueError, OSError):
                # Pipe closed while the process was being stopped
                pass

    reader_thread = threading.Thread(target=forward_output, daemon=True)
    reader_thread.start()

    cancel_reason = None
    try:
        while True:
            if token.is_cancelled:
                cancel_reason = token.reason
                logger.info("Stopping process %d (%s)", process.pid, cancel_reason)
                _stop_process(process)
                break
            try:
                process.wait(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                continue
    finally:
        _stop_process(process)
        reader_thread.join(timeout=TERMINATE_GRACE_SECONDS)
        if reader_thread.is_alive():
            logger.warning("Output reader thread did not terminate cleanly")
        if process.stdout is not None:
            process.stdout.close()

    return ProcessResult(
        returncode=process.returncode,
        elapsed_seconds=time.monotonic() - start,
        output_tail=list(tail),
        cancel_reason=cancel_reason,
    )


def run_captured(
    cmd: list[str],
    token: CancellationToken | None = None,
) -> subprocess.CompletedProcess:
    """Run a command to completion and capture stdout and stderr.

    Args:
        cmd: Command and arguments.
        token: Optional cancellation token.

    Returns:
        CompletedProcess with text stdout/stderr.

    Raises:
        OSError: If the process cannot be started.
        ProcessCancelledError: If the token is cancelled before exit.
    """
    process = subprocess.Popen(  # nosec B603 - arguments are built internally
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )
    try:
        while True:
            if token is not None and token.is_cancelled:
                _stop_process(process)
                process.communicate()
                raise ProcessCancelledError(token.reason or "cancelled")
            try:
                stdout, stderr = process.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                continue
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()

    return subprocess.CompletedProcess(
        args=cmd, returncode=process.returncode, stdout=stdout, stderr=stderr
    )
