"""
Logging configuration for vault-login.
"""

import logging
import logging.config
from typing import Any, Dict


class FrameDumpFilter(logging.Filter):
    """Filter to drop HTTP/2 frame debug records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Suppress h2/hpack frame dumps, which can contain the identity token."""
        if record.name.startswith(("hpack", "h2")) and record.levelno < logging.WARNING:
            return False
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration for the given level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "frame_dump_filter": {
                "()": FrameDumpFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["frame_dump_filter"]
            }
        },
        "loggers": {
            "vault_login": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "httpcore": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def setup_logging(level: str = "INFO") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
