"""Realm-scoped credential verification."""

from .dispatcher import authenticate, check_auth
from .models import AuthResult, Credentials, Identity
from .resolver import resolve
from .strategies import (
    CallbackStrategy,
    DirectoryStrategy,
    PasswdFileStrategy,
    StaticCredentialStrategy,
    Strategy,
)

__all__ = [
    "AuthResult",
    "CallbackStrategy",
    "Credentials",
    "DirectoryStrategy",
    "Identity",
    "PasswdFileStrategy",
    "StaticCredentialStrategy",
    "Strategy",
    "authenticate",
    "check_auth",
    "resolve",
]
