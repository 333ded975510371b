"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from hlsforge.commons.telemetry.logger import get_logger
from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    DomainException,
    DuplicateAssetException,
    EncodeException,
    InvalidAssetPathException,
    PosterException,
    ProbeException,
    RepositoryException,
    StorageException,
    VideoNotFoundException,
    VideoNotReadyException,
)

logger = get_logger(__name__)

# Client-side problems: (exception, error code, HTTP status)
_CLIENT_ERRORS: list[tuple[type[DomainException], str, int]] = [
    (DuplicateAssetException, "DUPLICATE_VIDEO", status.HTTP_409_CONFLICT),
    (VideoNotFoundException, "VIDEO_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (AssetFileNotFoundException, "FILE_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (VideoNotReadyException, "VIDEO_NOT_READY", status.HTTP_409_CONFLICT),
    (InvalidAssetPathException, "INVALID_PATH", status.HTTP_400_BAD_REQUEST),
    (ProbeException, "UNREADABLE_VIDEO", status.HTTP_422_UNPROCESSABLE_ENTITY),
    (PosterException, "POSTER_FAILED", status.HTTP_422_UNPROCESSABLE_ENTITY),
]

# Server-side problems
_SERVER_ERRORS: list[tuple[type[DomainException], str]] = [
    (StorageException, "STORAGE_ERROR"),
    (EncodeException, "ENCODE_ERROR"),
    (RepositoryException, "REPOSITORY_ERROR"),
]


class APIError(Exception):
    """Base API error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code for clients.
            message: Human-readable error message.
            status_code: HTTP status code.
            details: Additional error details.
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response."""
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
            }
        },
    )


def _details(exc: DomainException) -> dict[str, Any]:
    if isinstance(exc, DuplicateAssetException):
        return {"fingerprint": exc.fingerprint}
    if isinstance(exc, VideoNotFoundException):
        return {"video_id": exc.video_id}
    if isinstance(exc, VideoNotReadyException):
        return {"video_id": exc.video_id, "status": exc.status.value}
    return {}


def _handle_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle exception and return appropriate error response.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        JSON error response.
    """
    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return _build_error_response(
            request=request,
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
        )

    for exc_type, code, status_code in _CLIENT_ERRORS:
        if isinstance(exc, exc_type):
            logger.warning(f"{code}: {exc}")
            return _build_error_response(
                request=request,
                code=code,
                message=str(exc),
                status_code=status_code,
                details=_details(exc),
            )

    for exc_type, code in _SERVER_ERRORS:
        if isinstance(exc, exc_type):
            logger.error(f"{code}: {exc}")
            return _build_error_response(
                request=request,
                code=code,
                message=str(exc),
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    if isinstance(exc, DomainException):
        logger.warning(f"Domain error: {exc}")
        return _build_error_response(
            request=request,
            code="DOMAIN_ERROR",
            message=str(exc),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions."""
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
