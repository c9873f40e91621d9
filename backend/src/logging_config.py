"""Process-wide logging setup shared by the API server and the CLI."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server loggers follow LOG_LEVEL; client libraries log request lines at INFO
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_CLIENT_LOGGERS = ("httpx", "httpcore")


def _stdout_logger(level: str) -> dict:
    return {"level": level, "handlers": ["stdout"], "propagate": False}


def build_logging_config(level_name: str, client_level: str = "WARNING") -> dict:
    loggers = {name: _stdout_logger(level_name) for name in _SERVER_LOGGERS}
    loggers.update({name: _stdout_logger(client_level) for name in _CLIENT_LOGGERS})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level_name, "handlers": ["stdout"]},
        "loggers": loggers,
    }


def configure_logging(default_level: Optional[str] = None) -> None:
    """Log to stdout with one formatter. Later calls are no-ops.

    ``LOG_LEVEL`` sets the application level and ``HTTP_CLIENT_LOG_LEVEL`` the
    level of the extraction client's transport libraries.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (default_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    client_level = os.getenv("HTTP_CLIENT_LOG_LEVEL", "WARNING").upper()
    logging.config.dictConfig(build_logging_config(level_name, client_level))
    _CONFIGURED = True
