#!/usr/bin/env python3
"""Starlette service protecting one mounted area per configured realm."""

import os
from collections.abc import Iterable
from typing import Any

import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .auth.middleware import BasicAuthMiddleware
from .config import RealmSettings, get_config_loader
from .logging import configure_logging, get_uvicorn_log_config

logger = structlog.get_logger()


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy"})


def _realm_app(realm: RealmSettings) -> Starlette:
    async def whoami(request: Request) -> JSONResponse:
        result = getattr(request.state, "auth", None)
        identity = result.identity if result else None
        return JSONResponse(
            {
                "realm": realm.name,
                "authenticated": bool(result and result.ok),
                "username": identity.username if identity else None,
            }
        )

    return Starlette(
        routes=[Route("/", whoami)],
        middleware=[
            Middleware(
                BasicAuthMiddleware,
                realm=realm.name,
                realm_config=realm.config,
                challenge=realm.challenge,
            )
        ],
    )


def create_app(realms: Iterable[RealmSettings]) -> Starlette:
    """Build the ASGI app: ``/health`` plus one mount per realm."""
    routes: list[Any] = [Route("/health", health)]
    for realm in realms:
        routes.append(Mount(realm.mount, app=_realm_app(realm)))
        logger.info(
            f"Registered realm: {realm.name}",
            realm=realm.name,
            mount=realm.mount,
            challenge=realm.challenge,
        )
    return Starlette(routes=routes)


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    configure_logging()

    config_loader = get_config_loader()
    realms = config_loader.load_realms()
    logger.info(f"Loaded {len(realms)} realms", realm_count=len(realms))

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    timeout_graceful_shutdown = int(os.getenv("SHUTDOWN_TIMEOUT_SECONDS", "8"))

    app = create_app(realms.values())

    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            timeout_graceful_shutdown=timeout_graceful_shutdown,
            log_level="info",
            log_config=get_uvicorn_log_config(),
        )
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


if __name__ == "__main__":
    main()
