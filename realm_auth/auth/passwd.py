"""Colon-delimited passwd file store.

The file is re-read on every lookup so edits take effect immediately and a
removed user can never authenticate from a stale copy.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from ..exceptions import StoreUnavailableError
from .matcher import PasswordMatcher, default_matcher

logger = structlog.get_logger()


@dataclass(frozen=True)
class PasswdEntry:
    """Single record of a passwd file."""

    username: str
    stored_password: str


def parse_passwd(content: str) -> dict[str, PasswdEntry]:
    """Parse passwd file content into a username -> entry mapping.

    Lines with fewer than two fields are skipped. Later lines win over
    earlier ones for the same username.
    """
    entries: dict[str, PasswdEntry] = {}
    for lineno, line in enumerate(content.splitlines(), start=1):
        if not line or line.startswith("#"):
            continue

        fields = line.split(":")
        if len(fields) < 2:
            logger.debug("Skipping malformed passwd line", line=lineno)
            continue

        username, stored_password = fields[0], fields[1]
        entries[username] = PasswdEntry(username=username, stored_password=stored_password)

    return entries


class PasswdFileStore:
    """Looks up and verifies users against a passwd file."""

    def __init__(self, matcher: PasswordMatcher | None = None, encoding: str = "utf-8"):
        self.matcher = matcher or default_matcher
        self.encoding = encoding

    def load(self, path: str) -> dict[str, PasswdEntry]:
        """Read and parse the file at ``path``.

        Raises:
            StoreUnavailableError: If the file cannot be opened or decoded
        """
        try:
            content = Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise StoreUnavailableError(path, str(e)) from e
        return parse_passwd(content)

    def lookup(self, path: str, username: str) -> str | None:
        """Return the stored password for ``username`` or None if absent."""
        entry = self.load(path).get(username)
        return entry.stored_password if entry else None

    def verify(self, path: str, username: str, password: str) -> bool:
        """Check ``password`` for ``username`` against the file at ``path``."""
        stored = self.lookup(path, username)
        if stored is None:
            logger.debug("User not present in passwd file", path=path, username=username)
            return False
        return self.matcher.matches(password, stored)


_default_store = PasswdFileStore()


def lookup(path: str, username: str) -> str | None:
    """Look up ``username`` in the passwd file at ``path``."""
    return _default_store.lookup(path, username)


__all__ = [
    "PasswdEntry",
    "PasswdFileStore",
    "lookup",
    "parse_passwd",
]
