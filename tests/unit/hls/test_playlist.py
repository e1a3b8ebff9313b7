"""Tests for master playlist generation."""

from pathlib import Path

import pytest

from abr_orchestrator.exceptions import DirectoryError
from abr_orchestrator.hls.playlist import (
    MASTER_PLAYLIST_NAME,
    build_master_playlist,
    build_variants,
    variant_playlist_uri,
    write_master_playlist,
)
from abr_orchestrator.profiles.models import ProfileSet, VideoProfile


class TestBuildMasterPlaylist:
    """Tests for build_master_playlist."""

    def test_single_profile(self, single_profile_set: ProfileSet) -> None:
        """One profile yields the header plus one entry, without trailing newline."""
        assert build_master_playlist(single_profile_set) == (
            "#EXTM3U\n"
            '#EXT-X-STREAM-INF:BANDWIDTH=480,CODECS="avc1.42E01E,mp4a.40.2",'
            "RESOLUTION=480x854,NAME=480p\n"
            "480p/480p.m3u8"
        )

    def test_orders_by_ascending_bitrate(self) -> None:
        """Entries appear in ascending bitrate order regardless of insertion."""
        profiles = ProfileSet(
            [
                ("540p", VideoProfile(540, 960, 1800, 32)),
                ("1080p", VideoProfile(1080, 1920, 5000, 32)),
                ("360p", VideoProfile(360, 640, 800, 32)),
            ]
        )
        bandwidths = [v.bandwidth for v in build_variants(profiles)]
        assert bandwidths == [800, 1800, 5000]

        lines = build_master_playlist(profiles).split("\n")
        assert lines[0] == "#EXTM3U"
        assert lines[2] == "360p/360p.m3u8"
        assert lines[4] == "540p/540p.m3u8"
        assert lines[6] == "1080p/1080p.m3u8"

    def test_vp9_codec_attribute(self) -> None:
        """VP9 profiles advertise the VP9 codec string."""
        profiles = ProfileSet([("vp9_360p", VideoProfile(360, 640, 800, 32))])
        text = build_master_playlist(profiles)
        assert 'CODECS="vp09.00.10.08,mp4a.40.2"' in text
        assert "NAME=vp9_360p" in text

    def test_equal_bitrates_are_ordered_by_name(self) -> None:
        """Ties are broken by profile name so output is deterministic."""
        profiles = ProfileSet(
            [
                ("vp9_480p", VideoProfile(480, 854, 480, 32)),
                ("480p", VideoProfile(480, 854, 480, 32)),
            ]
        )
        names = [v.name for v in build_variants(profiles)]
        assert names == ["480p", "vp9_480p"]

    def test_entry_count_matches_profiles(self, mixed_profile_set: ProfileSet) -> None:
        """Exactly one stream entry per profile."""
        text = build_master_playlist(mixed_profile_set)
        assert text.count("#EXT-X-STREAM-INF:") == len(mixed_profile_set)
        assert not text.endswith("\n")

    def test_repeated_builds_are_identical(self, mixed_profile_set: ProfileSet) -> None:
        """Building twice from the same set gives byte-identical text."""
        assert build_master_playlist(mixed_profile_set) == build_master_playlist(
            mixed_profile_set
        )

    def test_insertion_order_does_not_change_output(self) -> None:
        """The same profiles in any insertion order render the same playlist."""
        entries = [
            ("1080p", VideoProfile(1080, 1920, 5000, 32)),
            ("vp9_480p", VideoProfile(480, 854, 480, 32)),
            ("360p", VideoProfile(360, 640, 800, 32)),
            ("480p", VideoProfile(480, 854, 480, 32)),
        ]
        forward = build_master_playlist(ProfileSet(entries))
        backward = build_master_playlist(ProfileSet(reversed(entries)))
        assert forward == backward
        assert forward.index("NAME=480p\n") < forward.index("NAME=vp9_480p\n")

    def test_empty_set_is_header_only(self) -> None:
        """An empty set renders only the header."""
        assert build_master_playlist(ProfileSet()) == "#EXTM3U"


class TestVariantPlaylistUri:
    """Tests for variant_playlist_uri."""

    def test_relative_to_run_directory(self) -> None:
        """Variant playlists live in a directory named after the profile."""
        assert variant_playlist_uri("vp9_720p") == "vp9_720p/vp9_720p.m3u8"


class TestWriteMasterPlaylist:
    """Tests for write_master_playlist."""

    def test_writes_file(self, tmp_path: Path, single_profile_set: ProfileSet) -> None:
        """The playlist is written into the run directory."""
        path = write_master_playlist(tmp_path, single_profile_set)
        assert path == tmp_path / MASTER_PLAYLIST_NAME
        assert path.read_text() == build_master_playlist(single_profile_set)

    def test_missing_directory_raises(
        self, tmp_path: Path, single_profile_set: ProfileSet
    ) -> None:
        """Write failures surface as DirectoryError with the playlist phase."""
        with pytest.raises(DirectoryError) as exc_info:
            write_master_playlist(tmp_path / "missing", single_profile_set)
        assert exc_info.value.phase == "playlist"
