"""Persistence for adopted tokens.

A token store holds a single token string. The file store reads it back
with trailing whitespace removed, so a hand-edited file ending in a newline
still yields the bare token.

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

TOKEN_FILE_ENV = "GITHUB_DEV_TOKEN"
DEFAULT_TOKEN_FILE = ".github_token"


def default_token_path() -> Path:
    """Return the token file named by ``GITHUB_DEV_TOKEN`` or ``.github_token``."""
    return Path(os.environ.get(TOKEN_FILE_ENV) or DEFAULT_TOKEN_FILE)


@runtime_checkable
class TokenStore(Protocol):
    """Somewhere to load and save one token."""

    def load(self) -> str | None:
        """Return the stored token, or None when nothing is stored."""
        ...

    def save(self, token: str) -> None:
        """Persist ``token``, replacing any previous value."""
        ...


class FileTokenStore:
    """Token store backed by a plain text file.

    Example:
        >>> store = FileTokenStore(".github_token")
        >>> store.save("ghp_xxx")
        >>> store.load()
        'ghp_xxx'

    """

    __slots__ = ("_path",)

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else default_token_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        """Read the token file.

        Returns:
            The token with trailing whitespace removed, or None if the file
            is missing or blank.

        Raises:
            OSError: If the file exists but cannot be read.

        """
        if not self._path.is_file():
            return None
        token = self._path.read_text(encoding="utf-8").rstrip()
        return token or None

    def save(self, token: str) -> None:
        """Write the token, creating parent directories as needed.

        Raises:
            OSError: If the file cannot be written.

        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token, encoding="utf-8")
        logger.debug("Saved token to %s", self._path)

    def __repr__(self) -> str:
        return f"FileTokenStore(path={str(self._path)!r})"


class MemoryTokenStore:
    """Token store that keeps the token in memory only."""

    __slots__ = ("saves", "token")

    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.saves = 0

    def load(self) -> str | None:
        return self.token

    def save(self, token: str) -> None:
        self.token = token
        self.saves += 1

    def __repr__(self) -> str:
        return f"MemoryTokenStore(has_token={self.token is not None})"
