"""Errors raised inside the verification core.

None of these cross the ``authenticate``/``check_auth`` boundary; the
dispatcher turns every one of them into a negative result.
"""


class RealmAuthError(Exception):
    """Base class for realm-auth errors."""


class ConfigurationError(RealmAuthError):
    """Realm configuration does not describe a usable strategy."""


class StoreUnavailableError(RealmAuthError):
    """Passwd file is missing or unreadable."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Passwd file {path!r} unavailable: {reason}")
        self.path = path
        self.reason = reason


class DirectoryUnavailableError(RealmAuthError):
    """Connection, bind or search against the directory server failed."""

    def __init__(self, host: str, reason: str):
        super().__init__(f"Directory {host!r} unavailable: {reason}")
        self.host = host
        self.reason = reason


class AmbiguousIdentityError(RealmAuthError):
    """Directory search did not resolve to exactly one entry."""

    def __init__(self, username: str, matches: int):
        super().__init__(f"Expected one directory entry for {username!r}, got {matches}")
        self.username = username
        self.matches = matches
