from __future__ import annotations

import os

import pytest

from alacritty_theme_switch import fs_utils
from alacritty_theme_switch.errors import (
    DirectoryNotAccessibleError,
    FileDeletionError,
    FileMissingError,
    WriteError,
)


@pytest.mark.asyncio
async def test_safe_stat_reports_missing_file(tmp_path):
    missing = tmp_path / "missing.toml"

    result = await fs_utils.safe_stat(missing)

    assert result.is_err()
    assert isinstance(result.error, FileMissingError)
    assert result.error.path == missing
    assert isinstance(result.error.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_safe_walk_is_recursive_sorted_and_filtered(tmp_path):
    (tmp_path / "b.toml").write_text("", encoding="utf-8")
    (tmp_path / "a.toml").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")
    (tmp_path / "dir.toml").mkdir()
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "c.toml").write_text("", encoding="utf-8")

    result = await fs_utils.safe_walk(tmp_path, ".toml")

    assert result.data == [
        tmp_path / "a.toml",
        tmp_path / "b.toml",
        nested / "c.toml",
    ]


@pytest.mark.asyncio
async def test_safe_walk_rejects_missing_directory(tmp_path):
    result = await fs_utils.safe_walk(tmp_path / "missing", ".toml")

    assert isinstance(result.error, DirectoryNotAccessibleError)


@pytest.mark.asyncio
async def test_safe_walk_rejects_unreadable_directory(tmp_path, monkeypatch):
    (tmp_path / "nord.toml").write_text("", encoding="utf-8")
    monkeypatch.setattr(fs_utils.os, "access", lambda path, mode: False)

    result = await fs_utils.safe_walk(tmp_path, ".toml")

    assert isinstance(result.error, DirectoryNotAccessibleError)
    assert isinstance(result.error.__cause__, PermissionError)


@pytest.mark.asyncio
async def test_safe_delete_file(tmp_path):
    target = tmp_path / "theme.toml"
    target.write_text("", encoding="utf-8")

    deleted = await fs_utils.safe_delete_file(target)
    again = await fs_utils.safe_delete_file(target)

    assert deleted.data == target
    assert not target.exists()
    assert isinstance(again.error, FileDeletionError)


@pytest.mark.asyncio
async def test_safe_write_text_fails_without_parent(tmp_path):
    target = tmp_path / "missing" / "out.toml"

    result = await fs_utils.safe_write_text(target, "x = 1\n")

    assert isinstance(result.error, WriteError)


@pytest.mark.asyncio
async def test_safe_replace_text_keeps_mode_and_leaves_no_temp(tmp_path):
    target = tmp_path / "alacritty.toml"
    target.write_text("old = 1\n", encoding="utf-8")
    os.chmod(target, 0o600)

    result = await fs_utils.safe_replace_text(target, "new = 2\n")

    assert result.data == target
    assert target.read_text(encoding="utf-8") == "new = 2\n"
    assert oct(target.stat().st_mode & 0o777) == oct(0o600)
    assert sorted(path.name for path in tmp_path.iterdir()) == [
        "alacritty.toml"
    ]


@pytest.mark.asyncio
async def test_safe_replace_text_writes_through_symlink(tmp_path):
    real = tmp_path / "dotfiles" / "alacritty.toml"
    real.parent.mkdir()
    real.write_text("old = 1\n", encoding="utf-8")
    link = tmp_path / "alacritty.toml"
    link.symlink_to(real)

    await fs_utils.safe_replace_text(link, "new = 2\n")

    assert link.is_symlink()
    assert real.read_text(encoding="utf-8") == "new = 2\n"


@pytest.mark.asyncio
async def test_safe_replace_text_fails_without_parent(tmp_path):
    target = tmp_path / "missing" / "alacritty.toml"

    result = await fs_utils.safe_replace_text(target, "x = 1\n")

    assert isinstance(result.error, WriteError)
    assert result.error.path == target


def test_copy_durable_overwrites_target(tmp_path):
    source = tmp_path / "source.toml"
    target = tmp_path / "target.toml"
    source.write_bytes(b"a = 1\n")
    target.write_bytes(b"stale\n")

    fs_utils.copy_durable(source, target)

    assert target.read_bytes() == b"a = 1\n"
