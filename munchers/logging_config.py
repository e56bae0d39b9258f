"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging.config
import sys


def configure_logging(level: str = "INFO") -> None:
    """Route every ``munchers.*`` logger to stderr at ``level``."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": sys.stderr,
                },
            },
            "loggers": {
                "munchers": {
                    "handlers": ["console"],
                    "level": level.upper(),
                    "propagate": False,
                },
            },
        },
    )
