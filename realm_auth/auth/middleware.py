"""Basic authentication middleware for Starlette applications."""

import base64
import binascii
from typing import Any

import structlog
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..exceptions import ConfigurationError
from .dispatcher import authenticate, check_auth
from .models import AuthResult, Credentials
from .resolver import RealmConfig, resolve

logger = structlog.get_logger()

DEFAULT_UNPROTECTED_PATHS = ("/health",)


def parse_basic_authorization(header: str | None) -> Credentials | None:
    """Decode an ``Authorization: Basic`` header value into credentials.

    Returns None when the header is absent, uses another scheme, or is not
    valid base64 ``username:password``.
    """
    if not header:
        return None

    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        raw = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError):
        return None

    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        decoded = raw.decode("latin-1")

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return Credentials(username=username, password=password)


def challenge_header(realm_name: str) -> dict[str, str]:
    """WWW-Authenticate header for ``realm_name``, passed through verbatim."""
    return {"WWW-Authenticate": f'Basic realm="{realm_name}"'}


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Protects every request of the wrapped app with one realm.

    With ``challenge=False`` the middleware only records the outcome on
    ``request.state.auth`` and lets the request through.
    """

    def __init__(
        self,
        app: Any,
        realm: str,
        realm_config: RealmConfig,
        challenge: bool = True,
        unprotected_paths: tuple[str, ...] = DEFAULT_UNPROTECTED_PATHS,
    ):
        super().__init__(app)
        self.realm = realm
        self.challenge = challenge
        self.unprotected_paths = unprotected_paths

        try:
            self.realm_config = resolve(realm_config)
        except ConfigurationError as e:
            # Kept unresolved so every request fails closed in the dispatcher
            logger.error("Realm misconfigured at registration", realm=realm, error=str(e))
            self.realm_config = realm_config

    async def dispatch(self, request: Any, call_next: Any) -> Any:
        """Process request with Basic authentication."""
        if request.url.path in self.unprotected_paths:
            return await call_next(request)

        credentials = parse_basic_authorization(request.headers.get("Authorization"))
        if credentials is None:
            logger.debug(
                "No usable Basic credentials",
                realm=self.realm,
                path=request.url.path,
            )
            result = AuthResult(ok=False)
        else:
            check = authenticate if self.challenge else check_auth
            result = await run_in_threadpool(check, self.realm, self.realm_config, credentials)

        request.state.auth = result

        if not result.ok and self.challenge:
            return JSONResponse(
                status_code=401,
                content={"error": "Authentication required"},
                headers=challenge_header(self.realm),
            )

        if result.ok:
            request.state.user = result.identity

        return await call_next(request)


__all__ = [
    "BasicAuthMiddleware",
    "challenge_header",
    "parse_basic_authorization",
]
