"""Pydantic settings models for application configuration."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Heights the master playlist knows bandwidth/resolution tags for
CANONICAL_RESOLUTIONS = ("360", "480", "720", "1080")


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "hlsforge"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8082, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/v1"
    docs_enabled: bool = True


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"
    counters: str = "counters"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "hlsforge"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class StorageSettings(BaseModel):
    """On-disk storage layout.

    Asset directories live at ``root_path / video_path / <fingerprint>``.
    """

    root_path: Path = Path("./storage")
    video_path: str = "videos"

    @property
    def videos_dir(self) -> Path:
        return self.root_path / self.video_path


class TranscodeSettings(BaseModel):
    """Transcode pipeline settings."""

    resolutions: list[str] = Field(
        default_factory=lambda: list(CANONICAL_RESOLUTIONS),
        description="Resolution ladder, processed in ascending order",
    )
    worker_count: int = Field(default=1, ge=1, le=32)
    queue_size: int = Field(default=50, ge=1)
    segment_seconds: int = Field(default=10, ge=1)
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    preset: str = "veryfast"

    @field_validator("resolutions", mode="before")
    @classmethod
    def _split_resolutions(cls, value: Any) -> Any:
        # Env vars arrive as "360,480" or, for a single tier, as an int
        if isinstance(value, int):
            return [str(value)]
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            return [str(part).strip() for part in value]
        return value

    @field_validator("resolutions")
    @classmethod
    def _validate_resolutions(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one resolution is required")
        for res in value:
            if not res.isdigit():
                raise ValueError(f"resolution must be numeric: {res!r}")
            if res not in CANONICAL_RESOLUTIONS:
                raise ValueError(
                    f"unsupported resolution {res}; "
                    f"expected one of {', '.join(CANONICAL_RESOLUTIONS)}"
                )
        if len(set(value)) != len(value):
            raise ValueError("duplicate resolutions in ladder")
        return value


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    transcode: TranscodeSettings = Field(default_factory=TranscodeSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HLSFORGE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # SettingsLoader merges json files and HLSFORGE__ env vars itself;
        # native env parsing would reject "360,720" for the list field.
        return (init_settings,)
