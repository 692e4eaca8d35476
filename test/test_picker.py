from __future__ import annotations

from pathlib import Path

import pytest

from alacritty_theme_switch.theme import Theme
from alacritty_theme_switch.ui.picker import ThemePicker, theme_label


def _themes():
    return [
        Theme(Path("/themes/ayu_dark.toml"), False),
        Theme(Path("/themes/nord.toml"), True),
        Theme(Path("/themes/solarized_light.toml"), False),
    ]


def test_theme_label_marks_active_theme():
    inactive, active, _ = _themes()

    assert theme_label(active) == "● Nord"
    assert theme_label(inactive) == "  Ayu Dark"


def test_initial_index_points_at_active_theme():
    assert ThemePicker(_themes()).initial_index == 1
    assert ThemePicker([Theme(Path("/a.toml"))]).initial_index == 0


@pytest.mark.asyncio
async def test_enter_selects_highlighted_theme():
    themes = _themes()
    app = ThemePicker(themes)

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.theme_list is not None
        assert app.theme_list.index == 1
        await pilot.press("down")
        await pilot.press("enter")
        await pilot.pause()

    assert app.return_value == themes[2]


@pytest.mark.asyncio
async def test_escape_cancels_selection():
    app = ThemePicker(_themes())

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("escape")
        await pilot.pause()

    assert app.return_value is None
