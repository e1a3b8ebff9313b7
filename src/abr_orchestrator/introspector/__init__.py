"""Introspector module for source media probing.

- MediaProber: Protocol defining the probing interface
- FFprobeProber: Production implementation using ffprobe
- StubProber: Stub implementation for testing
- ProbeResult: Parsed source metadata
"""

from abr_orchestrator.introspector.ffprobe import FFprobeProber
from abr_orchestrator.introspector.interface import MediaProber, ProbeError
from abr_orchestrator.introspector.models import (
    ProbeResult,
    SegmentationMode,
    StreamsPresent,
)
from abr_orchestrator.introspector.stub import StubProber

__all__ = [
    "FFprobeProber",
    "MediaProber",
    "ProbeError",
    "ProbeResult",
    "SegmentationMode",
    "StreamsPresent",
    "StubProber",
]
