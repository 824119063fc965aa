"""Structured logging configuration."""

import sys
import structlog
import logging
from pathlib import Path
from typing import List, Optional
from core.config import Settings

# Chatty libraries kept at WARNING regardless of the configured level
QUIET_LOGGERS = ("aiosqlite", "asyncpg", "sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access")


def _handlers(settings: Settings, level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        path = Path(settings.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def _renderer(settings: Settings):
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=False,
        pad_event=35,
        exception_formatter=structlog.dev.plain_traceback
    )


def configure_logging(settings: Settings) -> None:
    """Route structlog through stdlib logging at the configured level and format."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level}")

    logging.basicConfig(format="%(message)s", level=level,
                        handlers=_handlers(settings, level), force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    json_output = settings.log_format == "json"
    processors = [
        structlog.stdlib.add_logger_name if json_output else None,
        structlog.processors.TimeStamper(fmt="iso" if json_output else "%H:%M:%S", utc=json_output),
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(settings),
    ]

    structlog.configure(
        processors=[p for p in processors if p is not None],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_cache_operation(logger: structlog.stdlib.BoundLogger, operation: str,
                        key: str, hit: Optional[bool] = None, **kwargs) -> None:
    """Debug-level trace of a single cache read or write.

    ``hit`` is only attached for reads; stale reads pass ``stale=True``.
    """
    if hit is not None:
        kwargs["cache_hit"] = hit
    logger.debug("Cache operation", operation=operation, cache_key=key, **kwargs)
