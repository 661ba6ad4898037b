"""HTTP Basic authentication with pluggable, realm-scoped credential checks."""

from .auth import AuthResult, Credentials, Identity, authenticate, check_auth

__all__ = [
    "AuthResult",
    "Credentials",
    "Identity",
    "authenticate",
    "check_auth",
]
