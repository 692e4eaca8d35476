"""Asynchronous filesystem helpers that report failures as results."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
import shutil
import tempfile

from .errors import (
    DirectoryNotAccessibleError,
    FileDeletionError,
    FileMissingError,
    WriteError,
    with_cause,
)
from .result import ResultAsync


def safe_stat(path: Path) -> ResultAsync[os.stat_result, FileMissingError]:
    """Stat ``path`` without following failures into exceptions."""

    return ResultAsync.from_awaitable(
        asyncio.to_thread(path.stat),
        lambda exc: with_cause(FileMissingError(path), exc),
    )


def safe_walk(
    root: Path,
    suffix: str,
) -> ResultAsync[list[Path], DirectoryNotAccessibleError]:
    """Return regular files under ``root`` ending in ``suffix``, sorted."""

    return ResultAsync.from_awaitable(
        asyncio.to_thread(walk_files, root, suffix),
        lambda exc: with_cause(DirectoryNotAccessibleError(root), exc),
    )


def walk_files(root: Path, suffix: str) -> list[Path]:
    """Recursively collect files under ``root`` whose suffix matches."""

    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise PermissionError(f"Cannot list directory: {root}")
    return sorted(
        path
        for path in root.rglob(f"*{suffix}")
        if path.is_file() and path.suffix == suffix
    )


def safe_delete_file(path: Path) -> ResultAsync[Path, FileDeletionError]:
    """Remove ``path`` and return it on success."""

    async def _delete() -> Path:
        await asyncio.to_thread(path.unlink)
        return path

    return ResultAsync.from_awaitable(
        _delete(),
        lambda exc: with_cause(FileDeletionError(path), exc),
    )


def safe_ensure_dir(
    path: Path,
) -> ResultAsync[Path, DirectoryNotAccessibleError]:
    """Create ``path`` (and parents) when missing."""

    async def _ensure() -> Path:
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        return path

    return ResultAsync.from_awaitable(
        _ensure(),
        lambda exc: with_cause(DirectoryNotAccessibleError(path), exc),
    )


def safe_write_text(path: Path, content: str) -> ResultAsync[Path, WriteError]:
    """Write ``content`` to ``path`` in place."""

    async def _write() -> Path:
        await asyncio.to_thread(path.write_text, content, encoding="utf-8")
        return path

    return ResultAsync.from_awaitable(
        _write(),
        lambda exc: with_cause(WriteError(path), exc),
    )


def safe_replace_text(
    path: Path,
    content: str,
) -> ResultAsync[Path, WriteError]:
    """Write ``content`` next to ``path`` and atomically move it in place."""

    return ResultAsync.from_awaitable(
        asyncio.to_thread(replace_text, path, content),
        lambda exc: with_cause(WriteError(path), exc),
    )


def replace_text(path: Path, content: str) -> Path:
    """Replace the file at ``path`` with ``content`` via a rename.

    Symlinks are resolved first so the link itself stays in place. The
    previous content is untouched when any step fails.
    """

    target = path.resolve() if path.is_symlink() else path
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if target.exists():
            shutil.copymode(target, temp_path)
        os.replace(temp_path, target)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return path


def copy_durable(source: Path, target: Path) -> Path:
    """Copy ``source`` over ``target`` and flush it to disk."""

    shutil.copyfile(source, target)
    with target.open("rb+") as handle:
        os.fsync(handle.fileno())
    return target
