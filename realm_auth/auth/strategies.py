"""Resolved verification strategies.

Each realm resolves to exactly one of these variants. They are immutable and
safe to share between concurrent requests.
"""

import hmac
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from .directory import DEFAULT_FILTER, DirectoryClient
from .matcher import PasswordMatcher, default_matcher
from .models import Credentials
from .passwd import PasswdFileStore

logger = structlog.get_logger()

CheckCallback = Callable[[str, str], bool]


@dataclass(frozen=True)
class CallbackStrategy:
    """Delegates the decision to a user supplied function."""

    fn: CheckCallback
    kind: str = field(default="callback", init=False)

    def verify(self, credentials: Credentials) -> bool:
        result = self.fn(credentials.username, credentials.password)
        if not isinstance(result, bool):
            logger.warning(
                "Realm callback returned a non-boolean, treating as failure",
                result_type=type(result).__name__,
            )
            return False
        return result


@dataclass(frozen=True)
class StaticCredentialStrategy:
    """Single username with a plaintext or hashed password."""

    username: str
    password: str = field(repr=False)
    matcher: PasswordMatcher = field(default=default_matcher, repr=False, compare=False)
    kind: str = field(default="static", init=False)

    def verify(self, credentials: Credentials) -> bool:
        # Evaluate both so timing does not reveal which part was wrong
        user_ok = hmac.compare_digest(
            credentials.username.encode("utf-8"), self.username.encode("utf-8")
        )
        password_ok = self.matcher.matches(credentials.password, self.password)
        return user_ok and password_ok


@dataclass(frozen=True)
class PasswdFileStrategy:
    """Users listed in a colon-delimited passwd file."""

    path: str
    store: PasswdFileStore = field(default_factory=PasswdFileStore, repr=False, compare=False)
    kind: str = field(default="passwd", init=False)

    def verify(self, credentials: Credentials) -> bool:
        return self.store.verify(self.path, credentials.username, credentials.password)


@dataclass(frozen=True)
class DirectoryStrategy:
    """LDAP / Active Directory bind."""

    host: str
    basedn: str
    binddn: str | None = None
    bindpw: str | None = field(default=None, repr=False)
    filter: str = DEFAULT_FILTER
    port: int | None = None
    use_ssl: bool = False
    timeout: int | None = None
    client: DirectoryClient = field(default_factory=DirectoryClient, repr=False, compare=False)
    kind: str = field(default="directory", init=False)

    @property
    def anonymous(self) -> bool:
        return self.binddn is None

    def verify(self, credentials: Credentials) -> bool:
        return self.client.verify(
            self.host,
            self.basedn,
            credentials.username,
            credentials.password,
            binddn=self.binddn,
            bindpw=self.bindpw,
            search_filter=self.filter,
            port=self.port,
            use_ssl=self.use_ssl,
            timeout=self.timeout,
        )


Strategy = CallbackStrategy | StaticCredentialStrategy | PasswdFileStrategy | DirectoryStrategy

STRATEGY_TYPES = (
    CallbackStrategy,
    StaticCredentialStrategy,
    PasswdFileStrategy,
    DirectoryStrategy,
)

__all__ = [
    "CallbackStrategy",
    "CheckCallback",
    "DirectoryStrategy",
    "PasswdFileStrategy",
    "STRATEGY_TYPES",
    "StaticCredentialStrategy",
    "Strategy",
]
