"""Master playlist generation.

The master playlist lists one variant stream per profile, ordered by
ascending bitrate. Media segment playlists are written by the encoder and
are not produced here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from abr_orchestrator.exceptions import DirectoryError
from abr_orchestrator.profiles.geometry import AUDIO_CODEC_TAG, resolve_codec
from abr_orchestrator.profiles.models import ProfileSet

logger = logging.getLogger(__name__)

PLAYLIST_HEADER = "#EXTM3U"
MASTER_PLAYLIST_NAME = "playlist.m3u8"


@dataclass(frozen=True)
class VariantStream:
    """One entry of the master playlist."""

    name: str
    bandwidth: int
    codecs: str
    resolution: str
    uri: str

    def to_lines(self) -> list[str]:
        return [
            f'#EXT-X-STREAM-INF:BANDWIDTH={self.bandwidth},CODECS="{self.codecs}",'
            f"RESOLUTION={self.resolution},NAME={self.name}",
            self.uri,
        ]


def variant_playlist_uri(profile_name: str) -> str:
    """Relative path of a profile's variant playlist from the run directory."""
    return f"{profile_name}/{profile_name}.m3u8"


def build_variants(profiles: ProfileSet) -> list[VariantStream]:
    """Build variant descriptors sorted ascending by bitrate.

    Ties on bitrate are broken by profile name.
    """
    variants: list[VariantStream] = []
    for name, profile in profiles.by_bitrate():
        codec = resolve_codec(name)
        variants.append(
            VariantStream(
                name=name,
                bandwidth=profile.bitrate_kbps,
                codecs=f"{codec.playlist_codec},{AUDIO_CODEC_TAG}",
                resolution=profile.resolution,
                uri=variant_playlist_uri(name),
            )
        )
    return variants


def build_master_playlist(profiles: ProfileSet) -> str:
    """Render the master playlist text for a profile set."""
    lines = [PLAYLIST_HEADER]
    for variant in build_variants(profiles):
        lines.extend(variant.to_lines())
    return "\n".join(lines)


def write_master_playlist(work_dir: Path, profiles: ProfileSet) -> Path:
    """Render and write the master playlist into the run directory.

    Returns:
        Path of the written playlist.

    Raises:
        DirectoryError: If the playlist cannot be written.
    """
    playlist_path = work_dir / MASTER_PLAYLIST_NAME
    content = build_master_playlist(profiles)
    try:
        playlist_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise DirectoryError(work_dir, "playlist", str(e)) from e
    logger.info(
        "Wrote master playlist with %d variants: %s", len(profiles), playlist_path
    )
    return playlist_path
