"""Configuration loader for realm definition YAML files."""

import importlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

DEFAULT_REALMS_FILE = "/etc/realm-auth/realms.yaml"


@dataclass
class RealmSettings:
    """A realm and the URL prefix it protects."""

    name: str
    mount: str
    config: Any
    challenge: bool = True


def import_callback(reference: str) -> Any:
    """Import a ``package.module:function`` reference."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Callback reference must look like 'module:function': {reference!r}")

    target = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)

    if not callable(target):
        raise ValueError(f"Callback reference is not callable: {reference!r}")
    return target


class ConfigLoader:
    """Loads and parses realm configuration files."""

    def __init__(self, realms_file: str = DEFAULT_REALMS_FILE):
        self.realms_file = Path(realms_file)
        self.realms: dict[str, RealmSettings] = {}

    def load_realms(self) -> dict[str, RealmSettings]:
        """Load all realms from the YAML file."""
        if not self.realms_file.exists():
            logger.warning("Realms file does not exist", file=str(self.realms_file))
            return {}

        try:
            self._load_yaml_file(self.realms_file)
        except Exception as e:
            logger.error(
                "Failed to load realms file",
                file=str(self.realms_file),
                error=str(e),
            )

        return self.realms

    def _load_yaml_file(self, yaml_file: Path) -> None:
        with open(yaml_file) as f:
            content = yaml.safe_load(f)

        if not content or "realms" not in content:
            return

        for realm_config in content["realms"] or []:
            try:
                realm = self._parse_realm(realm_config)
                self.realms[realm.name] = realm
            except Exception as e:
                logger.error(
                    "Failed to parse realm",
                    name=realm_config.get("name") if isinstance(realm_config, dict) else None,
                    error=str(e),
                )
                continue

    def _parse_realm(self, realm_config: dict) -> RealmSettings:
        name = realm_config["name"]
        mount = realm_config.get("mount") or "/" + name.strip().lower().replace(" ", "-")
        if not mount.startswith("/"):
            mount = "/" + mount

        config = realm_config.get("config") or {}
        if isinstance(config, dict) and config.get("callback"):
            config = import_callback(config["callback"])

        return RealmSettings(
            name=name,
            mount=mount.rstrip("/") or "/",
            config=config,
            challenge=bool(realm_config.get("challenge", True)),
        )

    def get_realm(self, name: str) -> RealmSettings | None:
        """Get a specific realm by name."""
        return self.realms.get(name)

    def list_realm_names(self) -> list[str]:
        """Get list of all realm names."""
        return list(self.realms.keys())

    def reload(self) -> dict[str, RealmSettings]:
        """Reload realms from file."""
        self.realms.clear()
        return self.load_realms()


def get_config_loader() -> ConfigLoader:
    """Get configured config loader instance."""
    realms_file = os.getenv("REALMS_CONFIG_PATH", DEFAULT_REALMS_FILE)
    return ConfigLoader(realms_file)
