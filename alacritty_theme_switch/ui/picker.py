"""Interactive theme picker for alacritty-theme-switch."""

from __future__ import annotations

from typing import Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, ListItem, ListView, Static

from ..theme import Theme

ACTIVE_MARKER = "●"


class ThemeListItem(ListItem):
    """List item carrying the theme it represents."""

    def __init__(self, theme: Theme) -> None:
        super().__init__(Static(theme_label(theme), classes="theme-label"))
        self.theme = theme


class ThemePicker(App[Optional[Theme]]):
    """Pick one theme from a list; exits with the selection or ``None``."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #title {
        padding: 1 1;
        text-style: bold;
    }

    #theme-list {
        height: 1fr;
        margin: 0 1 1 1;
        border: round $accent;
    }
    """

    BINDINGS = [
        Binding("q", "cancel", "Quit"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, themes: Sequence[Theme]) -> None:
        super().__init__()
        self.themes = tuple(themes)
        self.theme_list: ListView | None = None

    @property
    def initial_index(self) -> int:
        """Return the index of the first active theme, or ``0``."""

        for index, theme in enumerate(self.themes):
            if theme.is_currently_active:
                return index
        return 0

    def compose(self) -> ComposeResult:
        yield Static("Select a theme", id="title")
        self.theme_list = ListView(
            *(ThemeListItem(theme) for theme in self.themes),
            initial_index=self.initial_index,
            id="theme-list",
        )
        yield self.theme_list
        yield Footer()

    def on_mount(self) -> None:
        if self.theme_list is not None:
            self.theme_list.focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        item = event.item
        if isinstance(item, ThemeListItem):
            self.exit(item.theme)

    def action_cancel(self) -> None:
        """Leave the picker without choosing a theme."""

        self.exit(None)


def theme_label(theme: Theme) -> str:
    """Return the list label for ``theme``, marking the active one."""

    marker = ACTIVE_MARKER if theme.is_currently_active else " "
    return f"{marker} {theme.label}"


async def pick_theme(themes: Sequence[Theme]) -> Optional[Theme]:
    """Run the picker inside the current event loop."""

    return await ThemePicker(themes).run_async()
