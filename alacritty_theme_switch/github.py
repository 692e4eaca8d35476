"""Fetch Alacritty themes from a GitHub repository.

Listing uses the GitHub REST API (rate limited: 60 requests per hour
without a token). File contents come from ``raw.githubusercontent.com``,
which is not subject to the API limit. A token from ``GITHUB_TOKEN`` is sent
to the API when available.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path, PurePosixPath
import re
from typing import Any, Callable, Mapping, Optional, Sequence
from urllib.request import Request, urlopen

from .errors import (
    FileDownloadError,
    GitHubApiError,
    InvalidRepositoryUrlError,
    NoLicenseFileFoundError,
    with_cause,
)
from .fs_utils import safe_ensure_dir, safe_write_text
from .result import Result, ResultAsync
from .theme import Theme, unslugify
from .toml_utils import TOML_SUFFIX, parse_toml_content

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.github.com"
RAW_BASE_URL = "https://raw.githubusercontent.com"
DEFAULT_REF = "master"
DEFAULT_TIMEOUT = 30.0
TOKEN_ENV = "GITHUB_TOKEN"
USER_AGENT = "alacritty-theme-switch"
LICENSE_FILENAMES = (
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
    "license",
    "license.md",
    "license.txt",
)

_HTTPS_URL = re.compile(r"^https?://github\.com/([^/]+)/([^/]+?)(\.git)?/?$")
_SSH_URL = re.compile(r"^git@github\.com:([^/]+)/(.+?)(\.git)?$")

Opener = Callable[[str, Mapping[str, str]], bytes]
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RepositoryInfo:
    """Owner and name of a GitHub repository."""

    owner: str
    repo: str


@dataclass(frozen=True)
class RemoteTheme:
    """A theme file listed in a remote repository."""

    path: str

    @property
    def label(self) -> str:
        """Return the display label derived from the remote file name."""

        return unslugify(PurePosixPath(self.path).name)


def urlopen_bytes(
    url: str,
    headers: Mapping[str, str],
    timeout: float = DEFAULT_TIMEOUT,
) -> bytes:
    """GET ``url`` and return the body; non-2xx statuses raise."""

    request = Request(url, headers=dict(headers))
    with urlopen(request, timeout=timeout) as response:
        return response.read()


def parse_repository_url(url: str) -> Optional[RepositoryInfo]:
    """Extract owner and repository from an HTTPS or SSH GitHub URL."""

    candidate = url.strip()
    match = _HTTPS_URL.match(candidate) or _SSH_URL.match(candidate)
    if match is None:
        return None
    return RepositoryInfo(owner=match.group(1), repo=match.group(2))


class GitHubClient:
    """List and download TOML theme files from one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        ref: str = DEFAULT_REF,
        token: Optional[str] = None,
        opener: Optional[Opener] = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self._token = token
        self._opener = opener or urlopen_bytes

    @property
    def license_filename(self) -> str:
        """Return the local file name used for the repository licence."""

        return f"license_{self.owner}-{self.repo}.txt"

    def list_themes(self) -> ResultAsync[list[RemoteTheme], GitHubApiError]:
        """List every ``.toml`` blob in the repository tree."""

        url = (
            f"{API_BASE_URL}/repos/{self.owner}/{self.repo}"
            "/git/trees/HEAD?recursive=1"
        )
        return self._fetch_json(url).flat_map(
            lambda payload: _themes_from_tree(url, payload)
        )

    def download_theme(
        self,
        remote_path: str,
        output_dir: Path,
    ) -> ResultAsync[Theme, Any]:
        """Download ``remote_path`` into ``output_dir`` and return it."""

        target = Path(output_dir) / PurePosixPath(remote_path).name
        return (
            safe_ensure_dir(Path(output_dir))
            .flat_map(
                lambda _dir: self._fetch_text(self._raw_url(remote_path))
            )
            .flat_map(
                lambda content: parse_toml_content(content).map(
                    lambda _document: content
                )
            )
            .flat_map(lambda content: safe_write_text(target, content))
            .map(Theme)
        )

    def download_all_themes(
        self,
        themes: Sequence[RemoteTheme],
        output_dir: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ResultAsync[list[Theme], Any]:
        """Download every theme concurrently, failing on the first error.

        The repository licence is stored alongside the themes once every
        download succeeded.
        """

        total = len(themes)
        completed = 0

        def _tick() -> None:
            nonlocal completed
            completed += 1
            if on_progress is not None:
                on_progress(completed, total)

        downloads = [
            self.download_theme(theme.path, output_dir).finally_(_tick)
            for theme in themes
        ]
        return ResultAsync.all(downloads).flat_map(
            lambda downloaded: self.download_license(output_dir)
            .or_else(_skip_missing_license)
            .map(lambda _license: downloaded)
        )

    def download_license(
        self,
        output_dir: Path,
    ) -> ResultAsync[Path, Any]:
        """Store the first licence file found in the repository."""

        target = Path(output_dir) / self.license_filename

        async def _download() -> Result[Path, Any]:
            for filename in LICENSE_FILENAMES:
                fetched = await self._fetch_text(self._raw_url(filename))
                if fetched.is_ok():
                    return await safe_write_text(target, fetched.data)
                logger.debug("No %s in %s/%s", filename, self.owner, self.repo)
            return Result.err(NoLicenseFileFoundError())

        return safe_ensure_dir(Path(output_dir)).flat_map(
            lambda _dir: _download()
        )

    def _raw_url(self, remote_path: str) -> str:
        path = remote_path.lstrip("/")
        return f"{RAW_BASE_URL}/{self.owner}/{self.repo}/{self.ref}/{path}"

    def _fetch_json(self, url: str) -> ResultAsync[Any, GitHubApiError]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        def _get() -> Any:
            return json.loads(self._opener(url, headers).decode("utf-8"))

        logger.debug("GET %s", url)
        return ResultAsync.from_awaitable(
            asyncio.to_thread(_get),
            lambda exc: with_cause(GitHubApiError(url), exc),
        )

    def _fetch_text(self, url: str) -> ResultAsync[str, FileDownloadError]:
        headers = {"User-Agent": USER_AGENT}

        def _get() -> str:
            return self._opener(url, headers).decode("utf-8")

        logger.debug("GET %s", url)
        return ResultAsync.from_awaitable(
            asyncio.to_thread(_get),
            lambda exc: with_cause(FileDownloadError(url), exc),
        )


def create_github_client(
    repository_url: str,
    ref: str = DEFAULT_REF,
    token: Optional[str] = None,
    opener: Optional[Opener] = None,
) -> Result[GitHubClient, InvalidRepositoryUrlError]:
    """Build a client for ``repository_url``.

    ``token`` defaults to the ``GITHUB_TOKEN`` environment variable.
    """

    info = parse_repository_url(repository_url)
    if info is None:
        return Result.err(InvalidRepositoryUrlError(repository_url))
    return Result.ok(
        GitHubClient(
            info.owner,
            info.repo,
            ref=ref,
            token=token if token is not None else os.environ.get(TOKEN_ENV),
            opener=opener,
        )
    )


def _themes_from_tree(
    url: str,
    payload: Any,
) -> Result[list[RemoteTheme], GitHubApiError]:
    tree = payload.get("tree") if isinstance(payload, dict) else None
    if not isinstance(tree, list):
        error = GitHubApiError(url)
        error.__cause__ = ValueError("Response has no 'tree' array")
        return Result.err(error)
    if payload.get("truncated"):
        logger.warning("Repository tree listing for %s was truncated", url)
    return Result.ok(
        [
            RemoteTheme(path=item["path"])
            for item in tree
            if isinstance(item, dict)
            and item.get("type") == "blob"
            and str(item.get("path", "")).endswith(TOML_SUFFIX)
        ]
    )


def _skip_missing_license(error: Any) -> Result[None, Any]:
    if isinstance(error, NoLicenseFileFoundError):
        logger.warning("%s; continuing without it", error)
        return Result.ok(None)
    return Result.err(error)
