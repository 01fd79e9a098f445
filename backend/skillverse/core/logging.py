import logging
import logging.config
from typing import Any

from .config import settings


def setup_logging() -> dict[str, Any]:
    """Configure logging for the application."""
    level = settings.LOG_LEVEL.upper()
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            "skillverse": {"level": level},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }

    logging.config.dictConfig(config)
    return config
