"""
Logging setup.

Records carry the current request id and user id (set by the middleware
and the auth dependency through context variables). Output is JSON lines
when ``LOG_FORMAT=json``, otherwise plain text, coloured in development.
structlog is configured to render through the same stdlib handlers.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, MutableMapping, Optional, Tuple

import colorlog
import structlog
from pythonjsonlogger import jsonlogger

from hajzi.config.settings import settings

request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

SERVICE_NAME = "hajzi-booking"
ROOT_LOGGER_NAME = "hajzi"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# (logger name, level) applied after the root logger is configured
_QUIET_LOGGERS: List[Tuple[str, int]] = [
    ("uvicorn.access", logging.WARNING),
    ("httpx", logging.WARNING),
]


def _add_request_context(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]):
    """structlog processor mirroring ``_ContextFilter``."""
    for key, var in (("request_id", request_id), ("user_id", user_id)):
        value = var.get()
        if value:
            event_dict[key] = value
    event_dict["service"] = SERVICE_NAME
    event_dict["environment"] = settings.ENVIRONMENT
    return event_dict


class _ContextFilter(logging.Filter):

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or request_id.get()
        record.user_id = getattr(record, "user_id", None) or user_id.get()
        return True


class JsonLineFormatter(jsonlogger.JsonFormatter):

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            service=SERVICE_NAME,
            environment=settings.ENVIRONMENT,
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def _make_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return JsonLineFormatter("%(timestamp)s %(level)s %(logger)s %(message)s")
    if settings.is_development():
        return colorlog.ColoredFormatter("%(log_color)s" + TEXT_FORMAT, log_colors=LOG_COLORS)
    return logging.Formatter(TEXT_FORMAT)


def _make_handlers() -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf8"
            )
        )
    return handlers


def _configure_structlog() -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_FORMAT == "json"
        else structlog.processors.KeyValueRenderer()
    )
    structlog.configure(
        processors=[
            _add_request_context,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter whose bound fields are merged into every record's ``extra``.
    Per-call ``extra`` wins over bound fields.
    """

    def __init__(self, logger: logging.Logger, **bound: Any):
        super().__init__(logger, bound)

    def bind(self, **fields: Any) -> "ContextLogger":
        return ContextLogger(self.logger, **{**self.extra, **fields})

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: Optional[str] = None) -> ContextLogger:
    return ContextLogger(logging.getLogger(name or ROOT_LOGGER_NAME))


def setup_logging() -> None:
    """Configure the root logger and structlog from settings. Safe to call twice."""
    level = getattr(logging, settings.LOG_LEVEL)
    formatter = _make_formatter()
    context_filter = _ContextFilter()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in _make_handlers():
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)

    sql_level = logging.INFO if settings.LOG_SQL_QUERIES else logging.WARNING
    for name, logger_level in _QUIET_LOGGERS + [("sqlalchemy.engine", sql_level)]:
        logging.getLogger(name).setLevel(logger_level)

    _configure_structlog()
    get_logger(__name__).info(
        "Logging configured",
        extra={"log_level": settings.LOG_LEVEL, "log_format": settings.LOG_FORMAT},
    )


__all__ = ["ContextLogger", "get_logger", "setup_logging", "request_id", "user_id"]
