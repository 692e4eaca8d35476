"""Theme collection maintenance: downloading and clearing theme files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .errors import (
    ClearThemesError,
    NoThemesFoundError,
    ThemeDeletionError,
    with_cause,
)
from .fs_utils import safe_delete_file, safe_walk
from .github import (
    DEFAULT_REF,
    Opener,
    ProgressCallback,
    create_github_client,
)
from .result import Result, ResultAsync
from .theme import Theme
from .toml_utils import TOML_SUFFIX

logger = logging.getLogger(__name__)


def download_themes(
    repository_url: str,
    output_dir: Path,
    ref: str = DEFAULT_REF,
    on_progress: Optional[ProgressCallback] = None,
    opener: Optional[Opener] = None,
) -> ResultAsync[list[Theme], Any]:
    """Download every theme of ``repository_url`` into ``output_dir``.

    ``on_progress`` receives ``(completed, total)`` after each file.
    """

    target = Path(output_dir).expanduser().absolute()
    client = create_github_client(repository_url, ref=ref, opener=opener)

    def _download(client_) -> ResultAsync[list[Theme], Any]:
        logger.info(
            "Downloading themes from %s/%s@%s into %s",
            client_.owner,
            client_.repo,
            client_.ref,
            target,
        )
        return client_.list_themes().flat_map(
            lambda remote: client_.download_all_themes(
                remote,
                target,
                on_progress,
            )
        )

    return ResultAsync.from_result(client).flat_map(_download)


def clear_themes(themes_dir: Path) -> ResultAsync[list[Path], Any]:
    """Delete every ``*.toml`` file under ``themes_dir``.

    Deletions run concurrently and all of them are attempted. When any fail,
    the result is a :class:`ClearThemesError` listing both the failures and
    the files that were removed.
    """

    root = Path(themes_dir).expanduser().absolute()

    def _delete_all(paths: list[Path]) -> ResultAsync[list[Path], Any]:
        if not paths:
            return ResultAsync.err(NoThemesFoundError(root))
        logger.info("Deleting %d theme file(s) from %s", len(paths), root)
        deletions = [
            safe_delete_file(path).map_err(
                lambda exc, path=path: with_cause(
                    ThemeDeletionError(path),
                    exc,
                )
            )
            for path in paths
        ]
        return ResultAsync(_settle_deletions(paths, deletions))

    return safe_walk(root, TOML_SUFFIX).flat_map(_delete_all)


async def _settle_deletions(
    paths: list[Path],
    deletions: list[ResultAsync[Path, ThemeDeletionError]],
) -> Result[list[Path], ClearThemesError]:
    combined = await ResultAsync.all_settled(deletions)
    outcomes = [await deletion for deletion in deletions]
    if combined.is_ok():
        return Result.ok(combined.data)
    deleted = [
        path
        for path, outcome in zip(paths, outcomes)
        if outcome.is_ok()
    ]
    for error in combined.error:
        logger.warning("%s", error)
    return Result.err(ClearThemesError(combined.error, deleted))
