"""winexec settings: defaults, ~/.winexec/config.json, then WINEXEC_* env vars.

Created: 2026-10-12
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
ENV_PREFIX = "WINEXEC_"


@dataclass
class Settings:
    """Runtime settings for the shim."""

    wine_command: str = "wine"
    probe_timeout: float = 10.0  # seconds; <= 0 disables the timeout
    log_level: str = "WARNING"

    @property
    def effective_probe_timeout(self) -> float | None:
        return self.probe_timeout if self.probe_timeout > 0 else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "wine_command": self.wine_command,
            "probe_timeout": self.probe_timeout,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        settings = cls()
        for f in fields(cls):
            if f.name in data:
                _assign(settings, f.name, data[f.name], source=CONFIG_FILENAME)
        return settings


def _assign(settings: Settings, name: str, raw: Any, source: str) -> None:
    """Coerce ``raw`` to the field's type; keep the current value on bad input."""
    if name == "probe_timeout":
        try:
            settings.probe_timeout = float(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid probe_timeout %r from %s", raw, source)
        return
    value = str(raw or "").strip()
    if not value:
        logger.warning("Ignoring empty %s from %s", name, source)
        return
    if name == "log_level":
        value = value.upper()
    setattr(settings, name, value)


def get_config_dir() -> Path:
    """Return the config directory (``$WINEXEC_CONFIG_DIR`` or ``~/.winexec``)."""
    override = os.environ.get(f"{ENV_PREFIX}CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".winexec"


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILENAME


def load_settings() -> Settings:
    """Build settings from the config file and environment, never raising."""
    path = get_config_path()
    settings = Settings()
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                settings = Settings.from_dict(data)
            else:
                logger.warning("Ignoring %s: expected a JSON object", path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load winexec config %s: %s", path, e)

    for f in fields(Settings):
        env_name = f"{ENV_PREFIX}{f.name.upper()}"
        if env_name in os.environ:
            _assign(settings, f.name, os.environ[env_name], source=env_name)
    return settings


_settings: Settings | None = None


def get_settings(force_reload: bool = False) -> Settings:
    """Get the cached settings, loading them on first use."""
    global _settings  # noqa: PLW0603
    if _settings is None or force_reload:
        _settings = load_settings()
    return _settings
