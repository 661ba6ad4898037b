"""Hash-aware password matching.

Stored passwords are either plaintext or one of the hash encodings passlib
can identify from a fixed prefix (``$2b$``, ``$6$``, ``$apr1$``, ``{SSHA}``,
``{SHA}`` ...). Anything passlib does not recognise is compared as plaintext.
"""

import hmac
from typing import Protocol

import structlog
from passlib.context import CryptContext

logger = structlog.get_logger()

# des_crypt is left out: any 13 character alphanumeric plaintext would be
# identified as one.
HASH_SCHEMES = [
    "bcrypt",
    "sha512_crypt",
    "sha256_crypt",
    "md5_crypt",
    "apr_md5_crypt",
    "ldap_salted_sha512",
    "ldap_salted_sha256",
    "ldap_salted_sha1",
    "ldap_salted_md5",
    "ldap_sha1",
    "ldap_md5",
]


def _make_context() -> CryptContext:
    return CryptContext(schemes=HASH_SCHEMES, default="sha512_crypt")


class PasswordMatcher(Protocol):
    """Protocol for checking a supplied password against a stored value."""

    def matches(self, supplied: str, stored: str) -> bool:
        """Return True if ``supplied`` corresponds to ``stored``."""
        ...


class HashAwareMatcher:
    """Matcher that detects the stored encoding before comparing.

    A stored value counts as hashed only when the scheme matching its prefix
    can parse it into a complete hash. Anything else, including plaintext
    that merely starts with ``$1$`` or ``{SSHA}``, is compared as plaintext.
    """

    def __init__(self, context: CryptContext | None = None):
        self.context = context or _make_context()

    def identify(self, stored: str) -> str | None:
        """Return the passlib scheme name for ``stored`` or None for plaintext."""
        try:
            scheme = self.context.identify(stored, required=False)
        except (TypeError, ValueError):
            return None
        if scheme is None:
            return None

        handler = self.context.handler(scheme)
        try:
            parsed = handler.from_string(stored)
        except (TypeError, ValueError):
            return None

        # Salt-only config strings carry no checksum
        if not getattr(parsed, "checksum", None):
            return None
        # Unsalted digests ({SHA}, {MD5}) have a fixed length
        if "salt" not in handler.setting_kwds and len(stored) != len(handler.hash("")):
            return None
        return scheme

    def matches(self, supplied: str, stored: str) -> bool:
        scheme = self.identify(stored)
        if scheme is None:
            return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))

        try:
            return bool(self.context.handler(scheme).verify(supplied, stored))
        except (TypeError, ValueError) as e:
            logger.warning(
                "Stored password hash could not be verified",
                scheme=scheme,
                error=str(e),
            )
            return False


default_matcher = HashAwareMatcher()


def matches(supplied: str, stored: str) -> bool:
    """Check ``supplied`` against ``stored`` with the default matcher."""
    return default_matcher.matches(supplied, stored)


__all__ = [
    "HASH_SCHEMES",
    "HashAwareMatcher",
    "PasswordMatcher",
    "default_matcher",
    "matches",
]
