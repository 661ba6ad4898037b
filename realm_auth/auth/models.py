"""Authentication models and types."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Credentials:
    """Username and password as supplied by the client."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class Identity:
    """Identity extracted from a request, verified or not."""

    username: str


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a realm check.

    ``identity`` carries the attempted username even when ``ok`` is False so
    callers can log who failed.
    """

    ok: bool
    identity: Identity | None = None

    @classmethod
    def for_credentials(cls, credentials: Credentials | None, ok: bool) -> "AuthResult":
        """Build a result echoing the supplied username when there is one."""
        identity = None
        if credentials is not None and credentials.username:
            identity = Identity(username=credentials.username)
        return cls(ok=ok, identity=identity)


class Verifier(Protocol):
    """Protocol for resolved realm strategies."""

    kind: str

    def verify(self, credentials: Credentials) -> bool:
        """Return True if the credentials are valid for this strategy."""
        ...
