from __future__ import annotations

import json
from urllib.error import HTTPError

import pytest

from alacritty_theme_switch import github
from alacritty_theme_switch.errors import (
    FileDownloadError,
    GitHubApiError,
    InvalidRepositoryUrlError,
    NoLicenseFileFoundError,
    TomlParseError,
)

API_TREE = (
    "https://api.github.com/repos/alacritty/alacritty-theme"
    "/git/trees/HEAD?recursive=1"
)
RAW = "https://raw.githubusercontent.com/alacritty/alacritty-theme/master"


class FakeOpener:
    """Serve canned responses and record requests."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, url, headers):
        self.requests.append((url, dict(headers)))
        body = self.responses.get(url)
        if body is None:
            raise HTTPError(url, 404, "Not Found", None, None)
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return body.encode("utf-8")
        return json.dumps(body).encode("utf-8")


def _client(responses, token=None):
    opener = FakeOpener(responses)
    client = github.create_github_client(
        "https://github.com/alacritty/alacritty-theme",
        token=token,
        opener=opener,
    ).unwrap()
    return client, opener


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/alacritty/alacritty-theme",
        "https://github.com/alacritty/alacritty-theme.git",
        "https://github.com/alacritty/alacritty-theme/",
        "git@github.com:alacritty/alacritty-theme.git",
    ],
)
def test_parse_repository_url_accepts_known_forms(url):
    info = github.parse_repository_url(url)

    assert info == github.RepositoryInfo("alacritty", "alacritty-theme")


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://gitlab.com/alacritty/alacritty-theme",
        "https://github.com/alacritty",
        "not a url",
    ],
)
def test_parse_repository_url_rejects_others(url):
    assert github.parse_repository_url(url) is None


def test_create_github_client_rejects_bad_url():
    result = github.create_github_client("https://example.com/a/b")

    assert isinstance(result.error, InvalidRepositoryUrlError)


def test_create_github_client_reads_token_from_env(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "secret")

    client = github.create_github_client(
        "https://github.com/alacritty/alacritty-theme",
        ref="v1",
    ).unwrap()

    assert client._token == "secret"
    assert client.ref == "v1"


@pytest.mark.asyncio
async def test_list_themes_keeps_toml_blobs(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    client, opener = _client(
        {
            API_TREE: {
                "tree": [
                    {"path": "themes", "type": "tree"},
                    {"path": "themes/dracula.toml", "type": "blob"},
                    {"path": "README.md", "type": "blob"},
                    {"path": "themes/nord.toml", "type": "blob"},
                ]
            }
        }
    )

    result = await client.list_themes()

    assert result.unwrap() == [
        github.RemoteTheme("themes/dracula.toml"),
        github.RemoteTheme("themes/nord.toml"),
    ]
    url, headers = opener.requests[0]
    assert url == API_TREE
    assert headers["Accept"] == "application/vnd.github.v3+json"
    assert headers["User-Agent"] == "alacritty-theme-switch"
    assert "Authorization" not in headers


@pytest.mark.asyncio
async def test_list_themes_sends_token():
    client, opener = _client({API_TREE: {"tree": []}}, token="abc")

    await client.list_themes()

    assert opener.requests[0][1]["Authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_list_themes_errors():
    failing, _ = _client({})
    malformed, _ = _client({API_TREE: {"message": "rate limited"}})

    failed = await failing.list_themes()
    bad_payload = await malformed.list_themes()

    assert isinstance(failed.error, GitHubApiError)
    assert isinstance(failed.error.__cause__, HTTPError)
    assert isinstance(bad_payload.error, GitHubApiError)


def test_remote_theme_label():
    assert github.RemoteTheme("themes/ayu_dark.toml").label == "Ayu Dark"


@pytest.mark.asyncio
async def test_download_theme_writes_basename(tmp_path):
    content = "[colors.primary]\nbackground = '#282a36'\n"
    client, opener = _client({f"{RAW}/themes/dracula.toml": content})
    output = tmp_path / "out"

    result = await client.download_theme("themes/dracula.toml", output)

    theme = result.unwrap()
    assert theme.path == output / "dracula.toml"
    assert theme.path.read_text(encoding="utf-8") == content
    assert "Authorization" not in opener.requests[0][1]


@pytest.mark.asyncio
async def test_download_theme_rejects_invalid_toml(tmp_path):
    client, _ = _client({f"{RAW}/themes/bad.toml": "= broken"})

    result = await client.download_theme("themes/bad.toml", tmp_path)

    assert isinstance(result.error, TomlParseError)
    assert not (tmp_path / "bad.toml").exists()


@pytest.mark.asyncio
async def test_download_theme_reports_http_failure(tmp_path):
    client, _ = _client({})

    result = await client.download_theme("themes/gone.toml", tmp_path)

    assert isinstance(result.error, FileDownloadError)
    assert result.error.url == f"{RAW}/themes/gone.toml"


@pytest.mark.asyncio
async def test_download_all_themes_reports_progress_and_license(tmp_path):
    client, _ = _client(
        {
            f"{RAW}/themes/a.toml": "a = 1\n",
            f"{RAW}/themes/b.toml": "b = 2\n",
            f"{RAW}/LICENSE.md": "Apache-2.0\n",
        }
    )
    progress = []

    result = await client.download_all_themes(
        [github.RemoteTheme("themes/a.toml"), github.RemoteTheme("themes/b.toml")],
        tmp_path,
        on_progress=lambda done, total: progress.append((done, total)),
    )

    assert [theme.path.name for theme in result.unwrap()] == [
        "a.toml",
        "b.toml",
    ]
    assert sorted(progress) == [(1, 2), (2, 2)]
    license_path = tmp_path / "license_alacritty-alacritty-theme.txt"
    assert license_path.read_text(encoding="utf-8") == "Apache-2.0\n"


@pytest.mark.asyncio
async def test_download_all_themes_without_license_succeeds(tmp_path):
    client, opener = _client({f"{RAW}/themes/a.toml": "a = 1\n"})

    result = await client.download_all_themes(
        [github.RemoteTheme("themes/a.toml")],
        tmp_path,
    )

    assert result.is_ok()
    requested = [url for url, _headers in opener.requests]
    assert requested[1:] == [
        f"{RAW}/{name}" for name in github.LICENSE_FILENAMES
    ]


@pytest.mark.asyncio
async def test_download_license_reports_missing_license(tmp_path):
    client, _ = _client({})

    result = await client.download_license(tmp_path)

    assert isinstance(result.error, NoLicenseFileFoundError)


@pytest.mark.asyncio
async def test_download_all_themes_fails_with_first_error(tmp_path):
    client, _ = _client(
        {
            f"{RAW}/themes/a.toml": "a = 1\n",
            f"{RAW}/themes/c.toml": "= broken",
        }
    )

    result = await client.download_all_themes(
        [
            github.RemoteTheme("themes/a.toml"),
            github.RemoteTheme("themes/b.toml"),
            github.RemoteTheme("themes/c.toml"),
        ],
        tmp_path,
    )

    assert isinstance(result.error, FileDownloadError)
    assert result.error.url == f"{RAW}/themes/b.toml"
    assert not (tmp_path / "license_alacritty-alacritty-theme.txt").exists()
