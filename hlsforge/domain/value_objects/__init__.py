"""Domain value objects."""

from hlsforge.domain.value_objects.fingerprint import FINGERPRINT_PATTERN, Fingerprint
from hlsforge.domain.value_objects.media_playlist import SegmentLocation, locate_segment
from hlsforge.domain.value_objects.poster import poster_filename, poster_timestamp
from hlsforge.domain.value_objects.resolution_ladder import (
    MASTER_PLAYLIST_NAME,
    STREAM_TIERS,
    ResolutionLadder,
    StreamTier,
)

__all__ = [
    "Fingerprint",
    "FINGERPRINT_PATTERN",
    "ResolutionLadder",
    "StreamTier",
    "STREAM_TIERS",
    "MASTER_PLAYLIST_NAME",
    "SegmentLocation",
    "locate_segment",
    "poster_timestamp",
    "poster_filename",
]
