"""
Logging configuration for the SessionKeeper API.

Uvicorn access lines for polling endpoints are suppressed; everything
under the ``sessionkeeper`` logger follows the configured level.
"""

import logging
import logging.config
from typing import Any, Dict, Iterable

PACKAGE_LOGGER = "sessionkeeper"
QUIET_PATHS = ("/health",)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET requests on quiet paths."""

    def __init__(self, paths: Iterable[str] = QUIET_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        if "GET" not in message:
            return True
        return not any(f"GET {path} " in message for path in self.paths)


def _logger(handler: str, level: str) -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(level: str = "INFO", quiet_paths: Iterable[str] = QUIET_PATHS) -> Dict[str, Any]:
    """
    Build a dictConfig mapping.

    Args:
        level: Level for the session loggers and the root logger
        quiet_paths: Request paths whose GET access lines are dropped

    Returns:
        Mapping accepted by logging.config.dictConfig and uvicorn's log_config
    """
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter,
                "paths": list(quiet_paths),
            }
        },
        "formatters": {
            "default": {"format": DEFAULT_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": {
            "uvicorn": _logger("default", "INFO"),
            "uvicorn.error": _logger("default", "INFO"),
            "uvicorn.access": _logger("access", "INFO"),
            PACKAGE_LOGGER: _logger("default", level),
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration to the current process."""
    logging.config.dictConfig(get_logging_config(level))
