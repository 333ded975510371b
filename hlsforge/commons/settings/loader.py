"""Settings loader: json config files layered under HLSFORGE__ env vars."""

import json
import os
from pathlib import Path
from typing import Any

from hlsforge.commons.settings.models import Settings


class SettingsLoader:
    """Builds a Settings instance from config files and the environment.

    Precedence (highest first):
    1. ``HLSFORGE__SECTION__KEY`` environment variables
    2. ``appsettings.{environment}.json``
    3. ``appsettings.json``
    """

    ENV_PREFIX = "HLSFORGE__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            config_dir: Directory holding the appsettings files.
                Defaults to ``config`` relative to the working directory.
            environment: Environment name. Defaults to
                ``HLSFORGE__APP__ENVIRONMENT`` or ``dev``.
        """
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(
            f"{self.ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Resolve and validate settings.

        Raises:
            ValueError: If a config file is not valid JSON or a value
                fails validation.
        """
        merged: dict[str, Any] = {}
        for layer in (
            self._read_json("appsettings.json"),
            self._read_json(f"appsettings.{self.environment}.json"),
            self._env_overrides(),
        ):
            merged = _deep_merge(merged, layer)
        return Settings(**merged)

    def _env_overrides(self) -> dict[str, Any]:
        """Turn ``HLSFORGE__TRANSCODE__WORKER_COUNT=2`` into nested dicts."""
        overrides: dict[str, Any] = {}
        for key, raw in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue
            path = key[len(self.ENV_PREFIX) :].lower().split("__")
            node = overrides
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = _coerce(raw)
        return overrides

    def _read_json(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.exists():
            return {}
        try:
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e


def _coerce(value: str) -> Any:
    """Best-effort typing of an environment string.

    Comma separated lists (``360,720``) stay strings; the settings
    validators split them.
    """
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    for caster in (int, float):
        try:
            return caster(value)
        except ValueError:
            pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


class _SettingsHolder:
    instance: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Return the process-wide settings, loading them on first use.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force a fresh load.
    """
    if _SettingsHolder.instance is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _SettingsHolder.instance = loader.load()
    return _SettingsHolder.instance


def reset_settings() -> None:
    """Drop the cached settings. Used by tests."""
    _SettingsHolder.instance = None
