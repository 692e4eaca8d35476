"""Theme manager: tracks the active theme and applies new ones."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence, Union

import tomlkit

from .config_operations import (
    check_theme_exists,
    create_backup,
    load_themes,
    parse_config,
    write_config_to_file,
)
from .errors import FileNotTOMLError, WriteError, with_cause
from .fs_utils import safe_ensure_dir
from .result import ResultAsync
from .theme import Theme
from .toml_utils import Document, clone_document, is_toml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ThemeManager:
    """Owns the parsed configuration and the themes discovered at startup.

    The theme set is fixed for the lifetime of an instance. The held
    configuration is only replaced after a new one has been written to disk.
    """

    def __init__(
        self,
        config: Document,
        themes: Iterable[Theme],
        *,
        config_path: Path,
        backup_path: Path,
    ) -> None:
        self._config = config
        self._themes = tuple(theme.with_active(None) for theme in themes)
        self._theme_paths = frozenset(theme.key for theme in self._themes)
        self.config_path = Path(config_path)
        self.backup_path = Path(backup_path)

    @property
    def themes(self) -> tuple[Theme, ...]:
        """Return the discovered themes without activity annotations."""

        return self._themes

    @property
    def theme_paths(self) -> frozenset[str]:
        """Return the path strings of every known theme."""

        return self._theme_paths

    def get_config(self) -> Document:
        """Return the configuration as last written (or parsed)."""

        return self._config

    def list_themes(self) -> list[Theme]:
        """Return every theme annotated with its current activity."""

        active = self._active_theme_paths()
        return [
            theme.with_active(theme.key in active) for theme in self._themes
        ]

    def active_themes(self) -> list[Theme]:
        """Return the themes currently imported by the configuration."""

        return [
            theme for theme in self.list_themes() if theme.is_currently_active
        ]

    def apply_theme(self, theme: Theme) -> ResultAsync[Theme, Any]:
        """Back up, merge ``theme`` into the imports and write the config."""

        logger.debug("Applying theme %s", theme.path)
        return (
            create_backup(self.config_path, self.backup_path)
            .map(lambda _backup: self._merged_config(theme))
            .flat_map(
                lambda config: write_config_to_file(self.config_path, config)
                .map(lambda _path: self._commit(config, theme))
            )
        )

    def apply_theme_by_filename(self, name: str) -> ResultAsync[Theme, Any]:
        """Resolve ``name`` against the known themes and apply it."""

        return check_theme_exists(name, self.list_themes()).flat_map(
            self.apply_theme
        )

    def _merged_config(self, theme: Theme) -> Document:
        config = clone_document(self._config)
        if config.get("general") is None:
            config["general"] = tomlkit.table()
        general = config["general"]

        imports = tomlkit.array()
        for entry in general.get("import") or ():
            if self._entry_key(entry) in self._theme_paths:
                continue
            imports.append(str(entry))
        imports.append(theme.key)
        if len(imports) > 1:
            imports.multiline(True)
        general["import"] = imports
        return config

    def _commit(self, config: Document, theme: Theme) -> Theme:
        self._config = config
        logger.info("Applied theme %s to %s", theme.label, self.config_path)
        return theme.with_active(True)

    def _active_theme_paths(self) -> set[str]:
        general = self._config.get("general") or {}
        imports: Sequence[Any] = general.get("import") or ()
        keys = {self._entry_key(entry) for entry in imports}
        return keys & self._theme_paths

    def _entry_key(self, entry: Any) -> str:
        try:
            path = Path(str(entry)).expanduser()
        except RuntimeError:
            # Unknown user in "~name/..."; never a known theme.
            return str(entry)
        if not path.is_absolute():
            path = self.config_path.parent / path
        return str(path)


def create_theme_manager(
    config_path: PathLike,
    themes_dir: PathLike,
    backup_path: PathLike,
    *,
    create_missing: bool = False,
) -> ResultAsync[ThemeManager, Any]:
    """Discover themes, parse the configuration and build a manager.

    With ``create_missing`` a missing themes directory and a missing
    configuration file are created (empty) before they are read. Otherwise
    missing paths are reported as errors.
    """

    config_file = Path(config_path).expanduser().absolute()
    themes_root = Path(themes_dir).expanduser().absolute()
    backup_file = Path(backup_path).expanduser().absolute()

    if not is_toml(config_file):
        return ResultAsync.err(FileNotTOMLError(config_file))

    if create_missing:
        prepared = safe_ensure_dir(themes_root).flat_map(
            lambda _root: ensure_config_file(config_file)
        )
    else:
        prepared = ResultAsync.ok(None)

    return (
        prepared
        .flat_map(lambda _ready: load_themes(themes_root))
        .flat_map(
            lambda themes: parse_config(config_file).map(
                lambda config: ThemeManager(
                    config,
                    themes,
                    config_path=config_file,
                    backup_path=backup_file,
                )
            )
        )
    )


def ensure_config_file(path: Path) -> ResultAsync[Path, WriteError]:
    """Create an empty configuration file at ``path`` when missing."""

    def _touch() -> Path:
        if not path.exists():
            logger.info("Creating empty configuration %s", path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
        return path

    return ResultAsync.from_awaitable(
        asyncio.to_thread(_touch),
        lambda exc: with_cause(WriteError(path), exc),
    )
