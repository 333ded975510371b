"""Settings management module."""

from hlsforge.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from hlsforge.commons.settings.models import (
    CANONICAL_RESOLUTIONS,
    AppSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    TelemetrySettings,
    TranscodeSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Persistence
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    "StorageSettings",
    # Pipeline
    "TranscodeSettings",
    "CANONICAL_RESOLUTIONS",
    # Telemetry
    "TelemetrySettings",
]
