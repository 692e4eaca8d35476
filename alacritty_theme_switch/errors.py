"""Tagged error values returned by theme manager operations."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, TypeVar, Union

PathLike = Union[str, Path]
_E = TypeVar("_E", bound="ThemeSwitchError")


class ThemeSwitchError(Exception):
    """Base class for every error value produced by the core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def tag(self) -> str:
        """Return the discriminating tag of this error."""

        return type(self).__name__

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class PathError(ThemeSwitchError):
    """Error bound to a filesystem path."""

    template = "{path}"

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(self.template.format(path=self.path))


class FileMissingError(PathError):
    """Raised when a file cannot be found or statted."""

    template = "File {path} not found."


class FileNotReadableError(PathError):
    """Raised when a file exists but cannot be read or parsed."""

    template = "File {path} is not readable."


class FileNotTOMLError(PathError):
    """Raised when a file does not carry the ``.toml`` extension."""

    template = "{path} is not a TOML file."


class FileIsDirectoryError(PathError):
    """Raised when a file was expected but a directory was found."""

    template = "{path} is a directory."


class FileDeletionError(PathError):
    """Raised when deleting a file fails."""

    template = "Failed to delete file {path}."


class DirectoryIsFileError(PathError):
    """Raised when a directory was expected but a file was found."""

    template = "Given themes directory {path} is a file."


class DirectoryNotDirectoryError(PathError):
    """Raised when a path is neither a file nor a directory."""

    template = "Given themes directory {path} is not a directory."


class DirectoryNotAccessibleError(PathError):
    """Raised when a directory does not exist or cannot be read."""

    template = (
        "Given themes directory {path} does not exist or is not readable."
    )


class WriteError(PathError):
    """Raised when writing a file fails."""

    template = "Failed to write to {path}."


class BackupError(PathError):
    """Raised when the configuration backup cannot be created."""

    template = "Failed to create backup of {path}."


class ThemeNotTOMLError(PathError):
    """Raised when the selected theme is not a TOML file."""

    template = "Given selected theme {path} is not a TOML file."


class NoThemesFoundError(PathError):
    """Raised when a themes directory holds no theme files."""

    template = (
        "Given themes directory {path} does not contain any TOML files."
    )


class ThemeDeletionError(PathError):
    """Raised when a theme file cannot be removed."""

    template = "Failed to delete theme file {path}."


class InvalidConfigError(PathError):
    """Raised when the configuration has an unexpected shape."""

    def __init__(self, path: PathLike, reason: str) -> None:
        self.reason = reason
        self.path = Path(path)
        ThemeSwitchError.__init__(
            self,
            f"Configuration {self.path} is invalid: {reason}",
        )


class ThemeNotFoundError(ThemeSwitchError):
    """Raised when no known theme matches a requested file name."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"Given selected theme {filename} does not exist.")


class TomlParseError(ThemeSwitchError):
    """Raised when TOML text cannot be parsed."""

    def __init__(self, content: str) -> None:
        self.content = content
        super().__init__("Failed to parse TOML content.")


class InvalidRepositoryUrlError(ThemeSwitchError):
    """Raised when a repository URL is not a recognized GitHub URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            f"Invalid GitHub repository URL: {url}. Expected format: "
            "https://github.com/owner/repo or git@github.com:owner/repo.git"
        )


class GitHubApiError(ThemeSwitchError):
    """Raised when a GitHub API request fails."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"GitHub API request failed: {url}")


class FileDownloadError(ThemeSwitchError):
    """Raised when downloading a raw file fails."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Failed to download file: {url}")


class NoLicenseFileFoundError(ThemeSwitchError):
    """Raised when a repository has no recognizable licence file."""

    def __init__(self) -> None:
        super().__init__("No license file found in repository")


class ClearThemesError(ThemeSwitchError):
    """Raised when one or more theme files could not be deleted."""

    def __init__(
        self,
        errors: Sequence[ThemeDeletionError],
        deleted: Sequence[Path],
    ) -> None:
        self.errors = tuple(errors)
        self.deleted = tuple(deleted)
        super().__init__(
            f"Failed to delete {len(self.errors)} theme file(s); "
            f"{len(self.deleted)} deleted."
        )


def with_cause(error: _E, cause: BaseException) -> _E:
    """Attach ``cause`` to ``error`` and return ``error``."""

    error.__cause__ = cause
    return error
