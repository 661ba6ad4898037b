"""Turns a realm configuration into exactly one verification strategy."""

from collections.abc import Mapping
from typing import Any

from ..exceptions import ConfigurationError
from .directory import DEFAULT_FILTER
from .strategies import (
    STRATEGY_TYPES,
    CallbackStrategy,
    DirectoryStrategy,
    PasswdFileStrategy,
    StaticCredentialStrategy,
    Strategy,
)

RealmConfig = Any


def _is_set(config: Mapping[str, Any], key: str) -> bool:
    return bool(config.get(key))


def _optional_int(config: Mapping[str, Any], key: str) -> int | None:
    value = config.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Directory option {key!r} must be an integer") from e


def _directory_strategy(config: Mapping[str, Any]) -> DirectoryStrategy:
    if not _is_set(config, "basedn"):
        raise ConfigurationError("Directory realm requires 'basedn'")

    binddn = config.get("binddn") or None
    bindpw = config.get("bindpw") or None
    if (binddn is None) != (bindpw is None):
        raise ConfigurationError(
            "Directory realm needs both 'binddn' and 'bindpw' or neither"
        )

    search_filter = str(config.get("filter") or DEFAULT_FILTER)
    try:
        search_filter.format(username="x")
    except (AttributeError, KeyError, IndexError, ValueError) as e:
        raise ConfigurationError(
            f"Directory filter must only use the {{username}} placeholder: {search_filter!r}"
        ) from e

    return DirectoryStrategy(
        host=str(config["host"]),
        basedn=str(config["basedn"]),
        binddn=binddn,
        bindpw=bindpw,
        filter=search_filter,
        port=_optional_int(config, "port"),
        use_ssl=bool(config.get("use_ssl", False)),
        timeout=_optional_int(config, "timeout"),
    )


def resolve(realm_config: RealmConfig) -> Strategy:
    """Resolve ``realm_config`` into a strategy.

    Precedence, first match wins: callable, ``username`` + ``password``,
    ``path``, ``host``. Fields of lower precedence strategies are ignored.

    Raises:
        ConfigurationError: If no strategy can be recognised
    """
    if isinstance(realm_config, STRATEGY_TYPES):
        return realm_config

    if callable(realm_config):
        return CallbackStrategy(fn=realm_config)

    if not isinstance(realm_config, Mapping):
        raise ConfigurationError(
            f"Unsupported realm configuration type: {type(realm_config).__name__}"
        )

    if _is_set(realm_config, "username") and _is_set(realm_config, "password"):
        return StaticCredentialStrategy(
            username=str(realm_config["username"]),
            password=str(realm_config["password"]),
        )

    if _is_set(realm_config, "path"):
        return PasswdFileStrategy(path=str(realm_config["path"]))

    if _is_set(realm_config, "host"):
        return _directory_strategy(realm_config)

    raise ConfigurationError(
        "Realm configuration matches no strategy "
        "(expected a callable, username/password, path or host)"
    )


__all__ = [
    "RealmConfig",
    "resolve",
]
