"""Logging setup: stdlib handlers fed through structlog processors.

Both structlog events and plain ``logging`` records end up in the same
console and rotating file handlers, rendered by one formatter. Every record
carries the service name and environment bound from settings.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, List

import structlog

from .config import Settings


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]


def log_file_path(settings: Settings) -> Path:
    options = settings.logging
    return Path(options.log_dir) / (options.file_name or f"{settings.service_name}.log")


def configure_logging(settings: Settings) -> None:
    options = settings.logging
    log_file = log_file_path(settings)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    level_value = getattr(logging, options.level.upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if options.json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
                "foreign_pre_chain": _shared_processors(),
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "level": options.level,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(log_file),
                "formatter": "structured",
                "maxBytes": options.max_log_file_size_mb * 1024 * 1024,
                "backupCount": options.backup_count,
                "level": options.level,
                "encoding": "utf-8",
            },
        },
        "root": {
            "handlers": ["console", "file"],
            "level": options.level,
        },
    }

    logging.config.dictConfig(logging_config)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=settings.service_name,
        environment=settings.environment,
    )
