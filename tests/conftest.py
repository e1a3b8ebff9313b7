"""Shared test fixtures for abr-orchestrator."""

import json
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from abr_orchestrator.profiles.models import ProfileSet, VideoProfile

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_ffprobe_fixture(name: str) -> dict:
    """Load an ffprobe JSON fixture by name.

    Args:
        name: Name of the fixture file (without .json extension).

    Returns:
        Parsed JSON data from the fixture.
    """
    fixture_path = FIXTURES_DIR / "ffprobe" / f"{name}.json"
    return json.loads(fixture_path.read_text())


def write_stub_executable(directory: Path, name: str, body: str) -> Path:
    """Write an executable Python script that stands in for an external tool."""
    path = directory / name
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# Writes one segment plus a variant playlist where the job told it to.
FAKE_ENCODER = """
import sys
from pathlib import Path

args = sys.argv[1:]
pattern = args[args.index("-hls_segment_filename") + 1]
playlist = Path(args[-1])
segment = Path(pattern % 0)
segment.write_bytes(b"segment-data")
playlist.write_text(
    "#EXTM3U\\n#EXT-X-PLAYLIST-TYPE:VOD\\n#EXTINF:1.000000,\\n"
    + segment.name
    + "\\n#EXT-X-ENDLIST\\n"
)
print("encoded " + segment.name)
"""

# Same as FAKE_ENCODER, also saving its arguments next to the playlist.
RECORDING_ENCODER = FAKE_ENCODER + """
import json

(playlist.parent / "encoder-args.json").write_text(json.dumps(args))
"""

FAILING_ENCODER = """
import sys

print("Unrecognized option 'bogus'", file=sys.stderr)
print("Error splitting the argument list", file=sys.stderr)
sys.exit(1)
"""

SLOW_ENCODER = """
import time

print("starting", flush=True)
time.sleep(30)
"""

FAKE_PROBER = """
import json
import sys

args = sys.argv[1:]
if "-show_entries" in args:
    print(json.dumps({"packets": [
        {"pts_time": "0.000000", "flags": "K__"},
        {"pts_time": "0.040000", "flags": "___"},
        {"pts_time": "2.000000", "flags": "K__"},
    ]}))
else:
    print(json.dumps({
        "streams": [
            {"codec_type": "video", "codec_name": "h264",
             "width": 480, "height": 854},
            {"codec_type": "audio", "codec_name": "aac"},
        ],
        "format": {"format_name": "mov,mp4,m4a,3gp,3g2,mj2", "duration": "4.0"},
    }))
"""

FAILING_PROBER = """
import sys

print("source.mp4: No such file or directory", file=sys.stderr)
sys.exit(1)
"""


@pytest.fixture
def ffprobe_fixtures_dir() -> Path:
    """Return the path to the ffprobe fixtures directory."""
    return FIXTURES_DIR / "ffprobe"


@pytest.fixture
def ffprobe_fixture():
    """Return the ffprobe fixture loader."""
    return load_ffprobe_fixture


@pytest.fixture
def fake_encoder(tmp_path: Path) -> Path:
    """Encoder stub that succeeds and writes HLS output."""
    return write_stub_executable(tmp_path, "fake-ffmpeg", FAKE_ENCODER)


@pytest.fixture
def recording_encoder(tmp_path: Path) -> Path:
    """Encoder stub that succeeds and saves its arguments as encoder-args.json."""
    return write_stub_executable(tmp_path, "recording-ffmpeg", RECORDING_ENCODER)


@pytest.fixture
def failing_encoder(tmp_path: Path) -> Path:
    """Encoder stub that exits with code 1."""
    return write_stub_executable(tmp_path, "failing-ffmpeg", FAILING_ENCODER)


@pytest.fixture
def slow_encoder(tmp_path: Path) -> Path:
    """Encoder stub that runs until it is stopped."""
    return write_stub_executable(tmp_path, "slow-ffmpeg", SLOW_ENCODER)


@pytest.fixture
def fake_prober(tmp_path: Path) -> Path:
    """Prober stub returning a portrait video with audio and keyframes."""
    return write_stub_executable(tmp_path, "fake-ffprobe", FAKE_PROBER)


@pytest.fixture
def failing_prober(tmp_path: Path) -> Path:
    """Prober stub that exits with code 1."""
    return write_stub_executable(tmp_path, "failing-ffprobe", FAILING_PROBER)


@pytest.fixture
def profile_480p() -> VideoProfile:
    """Portrait 480p profile."""
    return VideoProfile(width=480, height=854, bitrate_kbps=480, quality_crf=32)


@pytest.fixture
def single_profile_set(profile_480p: VideoProfile) -> ProfileSet:
    """Profile set with one H.264 profile named 480p."""
    return ProfileSet([("480p", profile_480p)])


@pytest.fixture
def mixed_profile_set() -> ProfileSet:
    """Unsorted profile set with an H.264 and a VP9 profile."""
    return ProfileSet(
        [
            ("720p", VideoProfile(720, 1280, 1800, 32)),
            ("vp9_360p", VideoProfile(360, 640, 800, 32)),
            ("1080p", VideoProfile(1080, 1920, 5000, 30)),
        ]
    )
