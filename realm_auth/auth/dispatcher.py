"""Realm authentication dispatcher.

``authenticate`` and ``check_auth`` never raise: configuration errors,
unreadable passwd files, directory outages and misbehaving callbacks all
produce a negative ``AuthResult``.
"""

import structlog

from ..exceptions import (
    ConfigurationError,
    DirectoryUnavailableError,
    RealmAuthError,
    StoreUnavailableError,
)
from .models import AuthResult, Credentials
from .resolver import RealmConfig, resolve

logger = structlog.get_logger()


def _run(
    realm_name: str,
    realm_config: RealmConfig,
    credentials: Credentials,
    challenge: bool,
) -> AuthResult:
    log = logger.bind(realm=realm_name, username=credentials.username)

    try:
        strategy = resolve(realm_config)
    except ConfigurationError as e:
        log.error("Realm misconfigured", error=str(e))
        return AuthResult.for_credentials(credentials, ok=False)

    log = log.bind(strategy=strategy.kind)
    try:
        ok = strategy.verify(credentials)
    except StoreUnavailableError as e:
        log.error("Passwd file unavailable", path=e.path, error=e.reason)
        ok = False
    except DirectoryUnavailableError as e:
        log.error("Directory unavailable", host=e.host, error=e.reason)
        ok = False
    except RealmAuthError as e:
        log.error("Authentication error", error=str(e), error_type=type(e).__name__)
        ok = False
    except Exception as e:
        log.error(
            "Authentication unexpected error",
            error=str(e),
            error_type=type(e).__name__,
        )
        ok = False

    if ok:
        log.info("Authentication successful")
    elif challenge:
        log.warning("Authentication failed")
    else:
        log.debug("Authentication check failed")

    return AuthResult.for_credentials(credentials, ok=ok)


def authenticate(
    realm_name: str, realm_config: RealmConfig, credentials: Credentials
) -> AuthResult:
    """Verify ``credentials`` for a realm whose failure triggers a challenge."""
    return _run(realm_name, realm_config, credentials, challenge=True)


def check_auth(
    realm_name: str, realm_config: RealmConfig, credentials: Credentials
) -> AuthResult:
    """Same as :func:`authenticate`, for callers that never send a challenge."""
    return _run(realm_name, realm_config, credentials, challenge=False)


__all__ = [
    "authenticate",
    "check_auth",
]
