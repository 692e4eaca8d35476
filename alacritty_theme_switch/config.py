"""Settings loading for alacritty-theme-switch."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml


class ConfigError(Exception):
    """Raised when the settings file cannot be parsed."""


_DEFAULT_CONFIG_ENV = "ATS_CONFIG"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

DEFAULT_REPOSITORY_URL = "https://github.com/alacritty/alacritty-theme"
DEFAULT_REF = "master"
DEFAULT_LOG_LEVEL = "WARNING"


def alacritty_config_dir() -> Path:
    """Return the directory Alacritty reads its configuration from."""

    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "alacritty"
        return Path.home() / "AppData" / "Roaming" / "alacritty"
    return Path.home() / ".config" / "alacritty"


def _default_config_path() -> Path:
    return alacritty_config_dir() / "alacritty.toml"


def _default_themes_dir() -> Path:
    return alacritty_config_dir() / "themes"


def _default_backup_path() -> Path:
    return alacritty_config_dir() / "alacritty.bak.toml"


@dataclass(frozen=True)
class AppConfig:
    """In-memory representation of alacritty-theme-switch settings."""

    path: Path
    config_path: Path = field(default_factory=_default_config_path)
    themes_dir: Path = field(default_factory=_default_themes_dir)
    backup_path: Path = field(default_factory=_default_backup_path)
    repository_url: str = DEFAULT_REPOSITORY_URL
    ref: str = DEFAULT_REF
    log_level: str = DEFAULT_LOG_LEVEL
    create_missing: bool = True

    @property
    def exists(self) -> bool:
        """Return ``True`` if the settings file exists on disk."""

        return self.path.exists()

    @property
    def log_level_number(self) -> int:
        """Return the numeric :mod:`logging` level for ``log_level``."""

        return logging.getLevelName(self.log_level)


def default_config_path() -> Path:
    """Return the default settings path, honoring ``ATS_CONFIG``."""

    env_value = os.environ.get(_DEFAULT_CONFIG_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / ".config" / "alacritty-theme-switch" / "config.yaml"


def load_config(path: Path | None = None) -> AppConfig:
    """Load settings from ``path`` or the default location."""

    config_path = (path or default_config_path()).expanduser()

    if not config_path.exists():
        return AppConfig(path=config_path)

    raw = _read_settings(config_path)
    log_level = _coerce_str(raw, "log_level", config_path)
    if log_level is not None:
        log_level = log_level.upper()
        if log_level not in _LOG_LEVELS:
            choices = ", ".join(_LOG_LEVELS)
            raise ConfigError(
                f"Config key 'log_level' must be one of {choices} "
                f"(file: {config_path})."
            )

    create_missing = raw.get("create_missing", True)
    if not isinstance(create_missing, bool):
        message = "Config key 'create_missing' must be a boolean"
        raise ConfigError(f"{message} (file: {config_path}).")

    defaults = AppConfig(path=config_path)
    return AppConfig(
        path=config_path,
        config_path=(
            _coerce_path(raw, "config_path", config_path)
            or defaults.config_path
        ),
        themes_dir=(
            _coerce_path(raw, "themes_dir", config_path)
            or defaults.themes_dir
        ),
        backup_path=(
            _coerce_path(raw, "backup_path", config_path)
            or defaults.backup_path
        ),
        repository_url=(
            _coerce_str(raw, "repository_url", config_path)
            or DEFAULT_REPOSITORY_URL
        ),
        ref=_coerce_str(raw, "ref", config_path) or DEFAULT_REF,
        log_level=log_level or DEFAULT_LOG_LEVEL,
        create_missing=create_missing,
    )


def _coerce_str(
    raw: dict,
    key: str,
    config_path: Path,
    kind: str = "string",
) -> Optional[str]:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    message = f"Config key '{key}' must be a {kind}"
    raise ConfigError(f"{message} (file: {config_path}).")


def _coerce_path(raw: dict, key: str, config_path: Path) -> Optional[Path]:
    value = _coerce_str(raw, key, config_path, kind="string path")
    return Path(value).expanduser() if value else None


def _read_settings(config_path: Path) -> dict:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        message = f"Cannot read settings {config_path}: {exc}"
        raise ConfigError(message) from exc
    try:
        raw: Any = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Failed to parse settings {config_path}: {exc}"
        ) from exc
    if isinstance(raw, dict):
        return raw
    raise ConfigError(
        f"Settings {config_path} must hold a mapping, "
        f"not {type(raw).__name__}."
    )
