"""LDAP / Active Directory bind verification."""

import os
from collections.abc import Callable
from typing import Any

import structlog
from ldap3 import ANONYMOUS, NONE, SIMPLE, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException, LDAPPasswordIsMandatoryError
from ldap3.utils.conv import escape_filter_chars

from ..exceptions import AmbiguousIdentityError, DirectoryUnavailableError

logger = structlog.get_logger()

DEFAULT_FILTER = "(uid={username})"

ConnectionFactory = Callable[..., Any]


def default_timeout() -> int:
    """Directory connect/receive timeout from the environment."""
    return int(os.getenv("LDAP_TIMEOUT_SECONDS", "10"))


def _make_server(host: str, port: int | None, use_ssl: bool, timeout: int) -> Server:
    return Server(
        host,
        port=port,
        use_ssl=use_ssl,
        get_info=NONE,
        connect_timeout=timeout,
    )


def _make_connection(
    server: Server,
    user: str | None = None,
    password: str | None = None,
    timeout: int = 10,
) -> Connection:
    return Connection(
        server,
        user=user,
        password=password,
        authentication=SIMPLE if user is not None else ANONYMOUS,
        receive_timeout=timeout,
        read_only=True,
        raise_exceptions=False,
    )


class DirectoryClient:
    """Verifies a user by resolving its entry and binding as it.

    The flow is: service bind (anonymous or ``binddn``/``bindpw``), search
    ``basedn`` with ``search_filter``, then a second bind as the single
    matching entry using the supplied password. No retries are attempted.
    """

    def __init__(
        self,
        server_factory: Callable[..., Any] = _make_server,
        connection_factory: ConnectionFactory = _make_connection,
    ):
        self.server_factory = server_factory
        self.connection_factory = connection_factory

    def verify(
        self,
        host: str,
        basedn: str,
        username: str,
        password: str,
        binddn: str | None = None,
        bindpw: str | None = None,
        search_filter: str = DEFAULT_FILTER,
        port: int | None = None,
        use_ssl: bool = False,
        timeout: int | None = None,
    ) -> bool:
        """Return True if ``username``/``password`` bind successfully.

        Raises:
            DirectoryUnavailableError: On connection, bind or search faults
        """
        timeout = timeout if timeout is not None else default_timeout()

        try:
            server = self.server_factory(host, port, use_ssl, timeout)
            user_dn = self._resolve_dn(
                server, host, basedn, username, binddn, bindpw, search_filter, timeout
            )
            return self._bind_as(server, user_dn, password, timeout)
        except AmbiguousIdentityError as e:
            logger.warning(
                "Directory search did not resolve a unique entry",
                host=host,
                username=username,
                matches=e.matches,
            )
            return False
        except LDAPException as e:
            raise DirectoryUnavailableError(host, str(e)) from e

    def _resolve_dn(
        self,
        server: Any,
        host: str,
        basedn: str,
        username: str,
        binddn: str | None,
        bindpw: str | None,
        search_filter: str,
        timeout: int,
    ) -> str:
        conn = self.connection_factory(server, user=binddn, password=bindpw, timeout=timeout)
        try:
            if not conn.bind():
                raise DirectoryUnavailableError(
                    host, f"service bind rejected: {conn.result}"
                )

            query = search_filter.format(username=escape_filter_chars(username))
            conn.search(basedn, query, search_scope=SUBTREE, attributes=[])
            entries = [
                item["dn"]
                for item in (conn.response or [])
                if item.get("type") == "searchResEntry"
            ]
        finally:
            conn.unbind()

        if len(entries) != 1:
            raise AmbiguousIdentityError(username, len(entries))

        logger.debug("Resolved directory entry", host=host, dn=entries[0])
        return entries[0]

    def _bind_as(self, server: Any, user_dn: str, password: str, timeout: int) -> bool:
        conn = self.connection_factory(server, user=user_dn, password=password, timeout=timeout)
        try:
            ok = bool(conn.bind())
        except LDAPPasswordIsMandatoryError:
            ok = False
        finally:
            conn.unbind()

        if not ok:
            logger.debug("Directory bind rejected", dn=user_dn)
        return ok


__all__ = [
    "DEFAULT_FILTER",
    "DirectoryClient",
    "default_timeout",
]
