"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hlsforge.api.dependencies import get_settings, init_services, shutdown_services
from hlsforge.api.middleware.error_handler import error_handler_middleware
from hlsforge.api.middleware.logging import LoggingMiddleware
from hlsforge.api.openapi.routes import health, maintenance, posters, videos
from hlsforge.commons.settings.models import Settings
from hlsforge.commons.telemetry import configure_logging
from hlsforge.commons.telemetry.logger import JsonFormatter, TextFormatter


def _setup_logging() -> None:
    """Configure logging for the application.

    Runs at import time so our formatters are in place before uvicorn
    starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="hlsforge",
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Point uvicorn's loggers at our formatter.

    Called during lifespan, once uvicorn has installed its handlers.
    """
    settings = get_settings()
    level = getattr(
        logging, (settings.telemetry.log_level or settings.app.log_level).upper()
    )
    formatter: logging.Formatter = (
        JsonFormatter() if settings.telemetry.log_format == "json" else TextFormatter()
    )

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Start infrastructure and transcode workers; stop them on exit.

    Tasks still queued at shutdown are dropped.
    """
    _configure_uvicorn_logging()

    await init_services(get_settings())

    yield

    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Video upload and HLS transcoding service",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    prefix = settings.server.api_prefix

    # Health routes (no prefix for standard health checks)
    app.include_router(health.router, tags=["Health"])

    app.include_router(videos.router, prefix=prefix, tags=["Videos"])
    app.include_router(posters.router, prefix=prefix, tags=["Posters"])
    app.include_router(maintenance.router, prefix=prefix, tags=["Maintenance"])


# Create default app instance
app = create_app()


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "hlsforge.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
    )
