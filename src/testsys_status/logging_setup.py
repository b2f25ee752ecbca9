"""Central logging configuration for processes embedding the status clients.

Installs a single stdout handler. The package logger follows the requested
level; when ``TESTSYS_LOG`` is set it overrides the root level instead, so
library loggers can be turned up without code changes.
"""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig

LOG_ENV_VAR = "TESTSYS_LOG"


def configure_logging(level: str = "INFO") -> None:
    """Configure logging once; later calls only adjust levels."""
    override = os.getenv(LOG_ENV_VAR, "").strip().upper()
    package_level = level.upper()
    root_level = override or "WARNING"

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(root_level)
        logging.getLogger("testsys_status").setLevel(override or package_level)
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": root_level, "handlers": ["console"]},
            "loggers": {
                "testsys_status": {"level": override or package_level},
            },
        }
    )
