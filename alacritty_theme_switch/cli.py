"""Command-line entry point for alacritty-theme-switch.

Running ``ats`` without a subcommand opens the interactive picker (or applies
``--select`` directly). ``list``, ``download-themes`` and ``clear-themes``
manage the local theme collection.
"""

from __future__ import annotations

import argparse
import asyncio
from importlib import metadata
import logging
from pathlib import Path
import textwrap
from typing import Any, Callable

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress
from rich.progress import TextColumn
from rich.prompt import Confirm

from .commands import clear_themes, download_themes
from .config import AppConfig, ConfigError, load_config
from .errors import ClearThemesError, NoThemesFoundError
from .result import Result
from .theme import Theme
from .theme_manager import ThemeManager, create_theme_manager

CONFIG_ATTR = "_config"
PROG = "ats"

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def package_version() -> str:
    """Return the installed distribution version."""

    try:
        return metadata.version("alacritty-theme-switch")
    except metadata.PackageNotFoundError:
        return "0+unknown"


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser."""

    parser = argparse.ArgumentParser(
        prog=PROG,
        description=textwrap.dedent(
            """
            Switch the Alacritty color theme. Without a subcommand an
            interactive picker is shown; `download-themes` fetches themes
            from GitHub and `clear-themes` removes them again.
            """
        ).strip(),
    )
    _add_common_options(parser, suppress=False)
    parser.add_argument(
        "-s",
        "--select",
        default=None,
        help=(
            "Apply the theme whose path ends with SELECT instead of "
            "showing the picker."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {package_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser(
        "list",
        help="List available themes and mark the active one",
    )
    _add_common_options(list_parser, suppress=True)
    list_parser.set_defaults(handler=_run_list)

    download_parser = subparsers.add_parser(
        "download-themes",
        help="Download themes from a GitHub repository",
    )
    _add_common_options(download_parser, suppress=True)
    download_parser.add_argument(
        "-u",
        "--url",
        default=None,
        help="Repository URL (overrides settings).",
    )
    download_parser.add_argument(
        "-r",
        "--ref",
        default=None,
        help="Branch, tag or commit to download from (overrides settings).",
    )
    download_parser.set_defaults(handler=_run_download)

    clear_parser = subparsers.add_parser(
        "clear-themes",
        help="Delete every theme from the themes directory",
    )
    _add_common_options(clear_parser, suppress=True)
    clear_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation.",
    )
    clear_parser.set_defaults(handler=_run_clear)

    parser.set_defaults(command="switch", handler=_run_switch)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point used by console scripts and ``python -m``."""

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.settings)
    except ConfigError as exc:
        parser.error(str(exc))

    configure_logging(config.log_level_number, args.verbose)
    setattr(args, CONFIG_ATTR, config)

    handler: Callable[[argparse.Namespace], int] = getattr(
        args,
        "handler",
        _run_switch,
    )
    return handler(args)


def configure_logging(level: int, verbose: int = 0) -> None:
    """Route log records through rich; ``verbose`` raises the level."""

    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = min(level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def format_theme(theme: Theme) -> str:
    """Return a console line for ``theme`` with an active marker."""

    marker = "[green]●[/green]" if theme.is_currently_active else " "
    return f"{marker} {escape(theme.label)} [dim]{escape(theme.key)}[/dim]"


def _add_common_options(
    parser: argparse.ArgumentParser,
    *,
    suppress: bool,
) -> None:
    # Subparsers must not overwrite values given before the subcommand.
    default: Any = argparse.SUPPRESS if suppress else None
    parser.add_argument(
        "--settings",
        type=Path,
        default=default,
        help=(
            "Path to a YAML settings file. Defaults to $ATS_CONFIG or "
            "~/.config/alacritty-theme-switch/config.yaml."
        ),
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=default,
        help="Path to the Alacritty configuration file.",
    )
    parser.add_argument(
        "-t",
        "--themes",
        type=Path,
        default=default,
        help="Directory containing theme files.",
    )
    parser.add_argument(
        "-b",
        "--backup",
        type=Path,
        default=default,
        help="Path of the configuration backup written before each switch.",
    )
    parser.add_argument(
        "-V",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS if suppress else 0,
        help="Increase log verbosity (repeat for debug output).",
    )


def _run_switch(args: argparse.Namespace) -> int:
    return asyncio.run(_switch(args))


def _run_list(args: argparse.Namespace) -> int:
    return asyncio.run(_list(args))


def _run_download(args: argparse.Namespace) -> int:
    config: AppConfig = getattr(args, CONFIG_ATTR)
    url = args.url or config.repository_url
    ref = args.ref or config.ref
    themes_dir = _themes_dir(args, config)

    console.print(
        f"Downloading themes from [bold]{escape(url)}[/bold]"
        f"@[bold]{escape(ref)}[/bold]"
    )
    console.print(f"Output directory: [bold]{escape(str(themes_dir))}[/bold]")

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Downloading", total=None)

        def _on_progress(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        result = asyncio.run(
            download_themes(
                url,
                themes_dir,
                ref=ref,
                on_progress=_on_progress,
            ).to_result()
        )

    if result.is_err():
        return _report_failure("Failed to download themes!", result.error)

    downloaded: list[Theme] = result.data
    console.print(
        f"\nSuccessfully downloaded [bold]{len(downloaded)}[/bold] theme(s)."
    )
    for theme in downloaded:
        console.print(f" - {escape(theme.label)}")
    console.print(
        "\nThese themes are made possible by the open-source community.\n"
        f"Consider supporting the authors at [bold]{escape(url)}[/bold]"
    )
    return 0


def _run_clear(args: argparse.Namespace) -> int:
    config: AppConfig = getattr(args, CONFIG_ATTR)
    themes_dir = _themes_dir(args, config)

    if not args.yes:
        question = (
            "Are you sure you want to delete all themes from "
            f"[bold]{escape(str(themes_dir))}[/bold]?"
        )
        if not Confirm.ask(question, console=console, default=False):
            console.print("Cancelled.")
            return 0

    console.print(f"Clearing all themes from {escape(str(themes_dir))}...")
    result = asyncio.run(clear_themes(themes_dir).to_result())

    if result.is_ok():
        console.print(
            f"Successfully deleted [bold]{len(result.data)}[/bold] theme(s)."
        )
        return 0
    if isinstance(result.error, NoThemesFoundError):
        console.print("No themes found to delete.")
        return 0
    return _report_failure("Failed to clear themes!", result.error)


async def _switch(args: argparse.Namespace) -> int:
    created = await _create_manager(args)
    if not isinstance(created, ThemeManager):
        return created
    manager = created

    if args.select is not None:
        applied = await manager.apply_theme_by_filename(args.select)
        return _report_applied(applied)

    # Imported lazily so the console commands work without a terminal UI.
    from .ui.picker import pick_theme

    selected = await pick_theme(manager.list_themes())
    if selected is None:
        console.print("Cancelled.")
        return 0
    applied = await manager.apply_theme(selected)
    return _report_applied(applied)


async def _list(args: argparse.Namespace) -> int:
    created = await _create_manager(args)
    if not isinstance(created, ThemeManager):
        return created
    for theme in created.list_themes():
        console.print(format_theme(theme))
    return 0


async def _create_manager(args: argparse.Namespace) -> ThemeManager | int:
    config: AppConfig = getattr(args, CONFIG_ATTR)
    result = await create_theme_manager(
        args.config or config.config_path,
        _themes_dir(args, config),
        args.backup or config.backup_path,
        create_missing=config.create_missing,
    )
    if result.is_ok():
        return result.data
    if isinstance(result.error, NoThemesFoundError):
        console.print(
            "No themes found. Use `ats download-themes` to download some."
        )
        return 0
    return _report_failure("Failed to create theme manager!", result.error)


def _report_applied(result: Result[Theme, Any]) -> int:
    if result.is_err():
        return _report_failure("Failed to apply theme!", result.error)
    console.print(f"Applied theme [bold]{escape(result.data.label)}[/bold]")
    return 0


def _report_failure(headline: str, error: Any) -> int:
    error_console.print(f"[red]{headline}[/red]")
    error_console.print(escape(str(error)))
    if isinstance(error, ClearThemesError):
        for failure in error.errors:
            error_console.print(f"  - {escape(str(failure))}")
    cause = getattr(error, "__cause__", None)
    if cause is not None:
        error_console.print(f"[dim]Caused by: {escape(str(cause))}[/dim]")
    return 1


def _themes_dir(args: argparse.Namespace, config: AppConfig) -> Path:
    return args.themes or config.themes_dir


if __name__ == "__main__":
    raise SystemExit(main())
