"""
Logging settings for linktitle.

Hosts embedding the engine usually configure logging themselves; headless
tools and scripts can call ``configure_logging()`` to get console output.
The level comes from the ``LINKTITLE_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import logging.config
import os
from typing import Any, Dict


def build_logging(level: str | None = None) -> Dict[str, Any]:
    log_level = (level or os.getenv('LINKTITLE_LOG_LEVEL', 'INFO')).upper()
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {
                'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'console',
            },
        },
        'root': {
            'handlers': ['console'],
            'level': log_level,
        },
        'loggers': {
            'linktitle': {
                'handlers': ['console'],
                'level': log_level,
                'propagate': False,
            },
            'httpx': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False,
            },
        },
    }


LOGGING = build_logging()


def configure_logging(level: str | None = None) -> None:
    """Apply the console logging configuration."""

    logging.config.dictConfig(build_logging(level) if level else LOGGING)
