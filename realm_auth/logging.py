"""Structured JSON logging for realm-auth.

structlog events and plain stdlib records (uvicorn, ldap3, passlib) share one
root handler and one ``ProcessorFormatter``, so every line carries the same
keys and a UTC timestamp.
"""

import logging
import os

import structlog

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def build_formatter() -> structlog.stdlib.ProcessorFormatter:
    """JSON formatter for both structlog events and foreign stdlib records."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


def get_log_level() -> int:
    """Log level from ``LOG_LEVEL``, INFO when unset or unknown."""
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """Route structlog and stdlib logging through one JSON handler."""
    log_level = get_log_level()

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # ldap3 and passlib are chatty at DEBUG
    logging.getLogger("ldap3").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


def get_uvicorn_log_config() -> dict:
    """uvicorn dictConfig that hands its records to the root JSON handler.

    uvicorn's own handlers are removed and its loggers propagate, so
    ``configure_logging`` stays the single place that formats output.
    """
    level = logging.getLevelName(get_log_level())
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {
            name: {"handlers": [], "level": level, "propagate": True}
            for name in UVICORN_LOGGERS
        },
    }
