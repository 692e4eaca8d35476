"""Theme records and display-label derivation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
import re
from typing import Optional

_TOML_EXTENSION = re.compile(r"\.toml$")
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")
_ROMAN_NUMERAL = re.compile(r"^(i{1,3}|iv|v|vi{0,3}|ix|x)$", re.IGNORECASE)


@dataclass(frozen=True)
class Theme:
    """A theme file on disk.

    Equality and hashing use ``path`` only. ``is_currently_active`` is
    ``None`` until the theme is evaluated against a configuration.
    """

    path: Path
    is_currently_active: Optional[bool] = field(default=None, compare=False)

    @property
    def label(self) -> str:
        """Return the human-readable name derived from the file name."""

        return unslugify(self.path.name)

    @property
    def key(self) -> str:
        """Return the path string used in the configuration import list."""

        return str(self.path)

    def with_active(self, active: Optional[bool]) -> "Theme":
        """Return a copy annotated with ``active``."""

        return replace(self, is_currently_active=active)


def is_roman_numeral(word: str) -> bool:
    """Return whether ``word`` is a Roman numeral between I and X."""

    return bool(_ROMAN_NUMERAL.match(word))


def unslugify(filename: str) -> str:
    """Turn a slugified theme file name into a display label.

    >>> unslugify("monokai_pro.toml")
    'Monokai Pro'
    >>> unslugify("moonlight_ii_vscode.toml")
    'Moonlight II Vscode'
    """

    stem = _TOML_EXTENSION.sub("", filename)
    words = _NON_ALPHANUMERIC.sub(" ", stem).strip().split(" ")
    titled = [word[:1].upper() + word[1:] for word in words]
    return " ".join(
        word.upper() if is_roman_numeral(word) else word for word in titled
    )
