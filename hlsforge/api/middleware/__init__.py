"""API middleware components."""

from hlsforge.api.middleware.error_handler import APIError, error_handler_middleware
from hlsforge.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
]
