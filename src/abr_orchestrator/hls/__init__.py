"""HLS master playlist support."""

from abr_orchestrator.hls.playlist import (
    MASTER_PLAYLIST_NAME,
    PLAYLIST_HEADER,
    VariantStream,
    build_master_playlist,
    build_variants,
    variant_playlist_uri,
    write_master_playlist,
)

__all__ = [
    "MASTER_PLAYLIST_NAME",
    "PLAYLIST_HEADER",
    "VariantStream",
    "build_master_playlist",
    "build_variants",
    "variant_playlist_uri",
    "write_master_playlist",
]
