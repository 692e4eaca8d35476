"""Fallible operations on the Alacritty configuration and theme files."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
import stat
from typing import Iterable, Mapping, Union

from .errors import (
    BackupError,
    DirectoryIsFileError,
    DirectoryNotAccessibleError,
    DirectoryNotDirectoryError,
    FileIsDirectoryError,
    FileMissingError,
    FileNotReadableError,
    FileNotTOMLError,
    InvalidConfigError,
    NoThemesFoundError,
    ThemeNotFoundError,
    ThemeNotTOMLError,
    WriteError,
    with_cause,
)
from .fs_utils import copy_durable, safe_replace_text, safe_stat, safe_walk
from .result import Result, ResultAsync
from .theme import Theme
from .toml_utils import TOML_SUFFIX, Document, dump_document, is_toml
from .toml_utils import read_toml

logger = logging.getLogger(__name__)

ParseConfigError = Union[
    FileNotTOMLError,
    FileMissingError,
    FileIsDirectoryError,
    FileNotReadableError,
    InvalidConfigError,
]
LoadThemesError = Union[
    DirectoryNotAccessibleError,
    DirectoryIsFileError,
    DirectoryNotDirectoryError,
    NoThemesFoundError,
]
CheckThemeError = Union[
    ThemeNotFoundError,
    ThemeNotTOMLError,
    FileMissingError,
    FileIsDirectoryError,
    FileNotReadableError,
]


def parse_config(path: Path) -> ResultAsync[Document, ParseConfigError]:
    """Parse and validate the Alacritty configuration at ``path``."""

    if not is_toml(path):
        return ResultAsync.err(FileNotTOMLError(path))

    logger.debug("Parsing configuration %s", path)
    return (
        validate_file(path)
        .flat_map(lambda _stat: read_toml(path))
        .flat_map(lambda document: validate_document(path, document))
    )


def validate_document(
    path: Path,
    document: Document,
) -> Result[Document, InvalidConfigError]:
    """Check that ``general.import`` is absent or a list of strings."""

    general = document.get("general")
    if general is None:
        return Result.ok(document)
    if not isinstance(general, Mapping):
        return Result.err(
            InvalidConfigError(path, "'general' must be a table")
        )
    imports = general.get("import")
    if imports is None:
        return Result.ok(document)
    if not isinstance(imports, list):
        return Result.err(
            InvalidConfigError(path, "'general.import' must be an array")
        )
    if not all(isinstance(entry, str) for entry in imports):
        return Result.err(
            InvalidConfigError(
                path,
                "'general.import' must only contain strings",
            )
        )
    return Result.ok(document)


def create_backup(
    config_path: Path,
    backup_path: Path,
) -> ResultAsync[Path, BackupError]:
    """Copy the configuration to ``backup_path``, replacing older backups."""

    logger.debug("Backing up %s to %s", config_path, backup_path)
    return ResultAsync.from_awaitable(
        asyncio.to_thread(copy_durable, config_path, backup_path),
        lambda exc: with_cause(BackupError(config_path), exc),
    )


def write_config_to_file(
    path: Path,
    document: Document,
) -> ResultAsync[Path, WriteError]:
    """Serialize ``document`` and atomically replace the file at ``path``."""

    serialized = Result.attempt(
        lambda: dump_document(document),
        lambda exc: with_cause(WriteError(path), exc),
    )
    logger.debug("Writing configuration %s", path)
    return ResultAsync.from_result(serialized).flat_map(
        lambda content: safe_replace_text(path, content)
    )


def check_theme_exists(
    filename: str,
    themes: Iterable[Theme],
) -> ResultAsync[Theme, CheckThemeError]:
    """Return the first theme whose path ends with ``filename``.

    Matching is a case-sensitive suffix comparison against the full path.
    An empty ``filename`` never matches.
    """

    theme = None
    if filename:
        theme = next(
            (item for item in themes if item.key.endswith(filename)),
            None,
        )
    if theme is None:
        return ResultAsync.err(ThemeNotFoundError(filename))
    if not is_toml(theme.path):
        return ResultAsync.err(ThemeNotTOMLError(theme.path))
    return validate_file(theme.path).map(lambda _stat: theme)


def load_themes(directory: Path) -> ResultAsync[list[Theme], LoadThemesError]:
    """Discover every ``*.toml`` file under ``directory`` recursively."""

    root = Path(directory).expanduser().absolute()

    def _to_themes(paths: list[Path]) -> Result[list[Theme], Exception]:
        if not paths:
            return Result.err(NoThemesFoundError(root))
        logger.debug("Found %d theme(s) in %s", len(paths), root)
        return Result.ok([Theme(path) for path in paths])

    return (
        validate_dir(root)
        .flat_map(lambda _stat: safe_walk(root, TOML_SUFFIX))
        .flat_map(_to_themes)
    )


def validate_file(path: Path) -> ResultAsync[os.stat_result, Exception]:
    """Ensure ``path`` exists and is a regular file."""

    def _check(info: os.stat_result) -> Result[os.stat_result, Exception]:
        if stat.S_ISDIR(info.st_mode):
            return Result.err(FileIsDirectoryError(path))
        if not stat.S_ISREG(info.st_mode):
            return Result.err(FileNotReadableError(path))
        return Result.ok(info)

    return safe_stat(path).flat_map(_check)


def validate_dir(path: Path) -> ResultAsync[os.stat_result, Exception]:
    """Ensure ``path`` exists and is a directory."""

    def _check(info: os.stat_result) -> Result[os.stat_result, Exception]:
        if stat.S_ISREG(info.st_mode):
            return Result.err(DirectoryIsFileError(path))
        if not stat.S_ISDIR(info.st_mode):
            return Result.err(DirectoryNotDirectoryError(path))
        return Result.ok(info)

    stat_result = ResultAsync.from_awaitable(
        asyncio.to_thread(path.stat),
        lambda exc: with_cause(DirectoryNotAccessibleError(path), exc),
    )
    return stat_result.flat_map(_check)
