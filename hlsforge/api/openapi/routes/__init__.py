"""API route handlers."""

from hlsforge.api.openapi.routes import health, maintenance, posters, videos

__all__ = [
    "health",
    "maintenance",
    "posters",
    "videos",
]
