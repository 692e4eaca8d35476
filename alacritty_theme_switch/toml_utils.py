"""TOML helpers built on ``tomlkit`` so user formatting survives rewrites."""

from __future__ import annotations

import asyncio
import copy
from pathlib import Path
from typing import Any, MutableMapping, Union

import tomlkit
from tomlkit.toml_document import TOMLDocument

from .errors import FileNotReadableError, TomlParseError, with_cause
from .result import Result, ResultAsync

TOML_SUFFIX = ".toml"

Document = MutableMapping[str, Any]


def is_toml(path: Union[str, Path]) -> bool:
    """Return ``True`` when ``path`` carries the ``.toml`` extension."""

    name = Path(path).name
    return "." in name and name.rsplit(".", 1)[1] == "toml"


def parse_toml_content(content: str) -> Result[TOMLDocument, TomlParseError]:
    """Parse TOML text into a document."""

    return Result.attempt(
        lambda: tomlkit.parse(content),
        lambda exc: with_cause(TomlParseError(content), exc),
    )


def read_toml(path: Path) -> ResultAsync[TOMLDocument, FileNotReadableError]:
    """Read and parse the TOML file at ``path``."""

    return ResultAsync.from_awaitable(
        asyncio.to_thread(load_toml_file, path),
        lambda exc: with_cause(FileNotReadableError(path), exc),
    )


def load_toml_file(path: Path) -> TOMLDocument:
    """Parse ``path`` synchronously, raising on failure."""

    with path.open("r", encoding="utf-8") as handle:
        return tomlkit.load(handle)


def dump_document(document: Document) -> str:
    """Serialize a document (or plain mapping) to TOML text."""

    if isinstance(document, TOMLDocument):
        return document.as_string()
    return tomlkit.dumps(document)


def clone_document(document: Document) -> Document:
    """Return a structural copy that shares nothing with ``document``."""

    if isinstance(document, TOMLDocument):
        return tomlkit.parse(document.as_string())
    return copy.deepcopy(document)
