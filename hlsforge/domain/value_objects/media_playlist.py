"""Media (per-resolution) playlist reading."""

from __future__ import annotations

from dataclasses import dataclass

EXTINF_PREFIX = "#EXTINF:"


@dataclass(frozen=True)
class SegmentLocation:
    """A segment covering some timestamp, and the offset inside it."""

    uri: str
    offset_seconds: float
    start_seconds: float


def locate_segment(playlist: str, target_seconds: float) -> SegmentLocation | None:
    """Find the segment of a media playlist that covers a timestamp.

    Segment durations come from ``#EXTINF`` tags; each tag applies to the
    next URI line. A segment covers ``target`` when the durations before it
    plus its own reach the target.

    Args:
        playlist: Text of an HLS media playlist.
        target_seconds: Timestamp from the start of the stream.

    Returns:
        The covering segment, or None if no segment reaches the target or
        the playlist is malformed.

    >>> text = "#EXTM3U\\n#EXTINF:10.0,\\na.ts\\n#EXTINF:10.0,\\nb.ts\\n"
    >>> locate_segment(text, 15.0)
    SegmentLocation(uri='b.ts', offset_seconds=5.0, start_seconds=10.0)
    """
    elapsed = 0.0
    pending: float | None = None

    for raw in playlist.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith(EXTINF_PREFIX):
            value = line[len(EXTINF_PREFIX) :].split(",", 1)[0].strip()
            try:
                pending = float(value)
            except ValueError:
                return None
            continue
        if line.startswith("#"):
            continue
        if pending is None:
            # URI without a duration tag
            return None
        if elapsed + pending >= target_seconds:
            return SegmentLocation(
                uri=line,
                offset_seconds=target_seconds - elapsed,
                start_seconds=elapsed,
            )
        elapsed += pending
        pending = None

    return None
