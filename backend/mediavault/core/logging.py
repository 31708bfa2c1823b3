"""
Logging configuration for the application.
"""

import json
import logging
import logging.config
from typing import Any, Dict, Optional

from mediavault.core.config import Settings, get_settings

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    ]
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping for the given settings."""
    if settings.logging.json_logs:
        formatter: Dict[str, Any] = {
            "()": f"{JSONFormatter.__module__}.{JSONFormatter.__name__}"
        }
    else:
        formatter = {"format": settings.logging.format}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "level": settings.logging.level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "error": {
                "class": "logging.StreamHandler",
                "level": "ERROR",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "mediavault": {
                "level": settings.logging.level,
                "handlers": ["default", "error"],
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "INFO",
                "handlers": ["default", "error"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING" if not settings.database.echo else "INFO",
                "handlers": ["default"],
                "propagate": False,
            },
            "alembic": {
                "level": "INFO",
                "handlers": ["default"],
                "propagate": False,
            },
        },
        "root": {
            "level": settings.logging.level,
            "handlers": ["default"],
        },
    }


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure application logging."""
    settings = settings or get_settings()
    logging.config.dictConfig(build_logging_config(settings))

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured - Level: {settings.logging.level}, "
        f"JSON: {settings.logging.json_logs}"
    )
