"""Tests for logging configuration."""

import json
import logging
import os
from unittest.mock import patch

from realm_auth.logging import (
    UVICORN_LOGGERS,
    build_formatter,
    get_log_level,
    get_uvicorn_log_config,
)


def test_log_level_default() -> None:
    """Test INFO is used when LOG_LEVEL is unset."""
    with patch.dict(os.environ, {}, clear=True):
        assert get_log_level() == logging.INFO


def test_log_level_from_env() -> None:
    """Test LOG_LEVEL is honoured case-insensitively."""
    with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
        assert get_log_level() == logging.DEBUG


def test_log_level_invalid() -> None:
    """Test unknown levels fall back to INFO."""
    with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}):
        assert get_log_level() == logging.INFO


def test_stdlib_record_rendered_as_json() -> None:
    """Test plain stdlib records get the structlog keys and a UTC timestamp."""
    record = logging.LogRecord(
        "uvicorn.error", logging.WARNING, __file__, 1, "hello %s", ("x",), None
    )

    entry = json.loads(build_formatter().format(record))

    assert entry["event"] == "hello x"
    assert entry["level"] == "warning"
    assert entry["logger"] == "uvicorn.error"
    assert entry["timestamp"].endswith("Z")


def test_uvicorn_log_config_propagates_to_root() -> None:
    """Test uvicorn loggers have no handlers of their own."""
    with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
        config = get_uvicorn_log_config()

    assert "handlers" not in config
    assert set(config["loggers"]) == set(UVICORN_LOGGERS)
    for logger in config["loggers"].values():
        assert logger == {"handlers": [], "level": "WARNING", "propagate": True}
