"""Poster frame timing."""

# Videos longer than this get their poster at 10% instead of the midpoint
LONG_VIDEO_SECONDS = 60.0


def poster_timestamp(duration_seconds: float) -> float:
    """Pick the poster frame time for a video.

    >>> poster_timestamp(120)
    12.0
    >>> poster_timestamp(60)
    30.0
    """
    if duration_seconds > LONG_VIDEO_SECONDS:
        return duration_seconds * 0.1
    return duration_seconds / 2


def poster_filename(timestamp: float) -> str:
    """Poster image name inside the asset directory, e.g. ``15.000000.jpg``."""
    return f"{timestamp:f}.jpg"
