"""
Logging setup for the back office.

Every record carries a `correlation_id` so the lines written while serving
one operation (a staff request, a statement run, a reconciliation) can be
grouped. Output goes to the console and, optionally, to rotating files;
`log_format="json"` switches both to python-json-logger for aggregation.
"""

import logging
import logging.config
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from axiobank.core.config import settings

NO_CORRELATION_ID = "no-request-id"

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Third-party loggers that are chatty at INFO (SQL echo, gateway calls)
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "aiosmtplib")

TEXT_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"
)
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(correlation_id)s %(funcName)s %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Stamp the current correlation id on every record that lacks one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get() or NO_CORRELATION_ID
        return True


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block under one correlation id.

    Log records and audit entries written inside the block share the id.

    Example:
        with correlation_scope() as cid:
            await statement_service.generate_and_send_statement(request)
    """
    cid = correlation_id or uuid.uuid4().hex
    token = correlation_id_var.set(cid)
    try:
        yield cid
    finally:
        correlation_id_var.reset(token)


def _file_handler(filename: str, level: str, formatter: str) -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": filename,
        "maxBytes": settings.log_file_max_bytes,
        "backupCount": settings.log_file_backup_count,
        "encoding": "utf-8",
        "filters": ["correlation_id"],
    }


def get_logging_config() -> dict[str, Any]:
    """
    Build the dictConfig for the current settings.

    Returns:
        Dictionary compatible with logging.config.dictConfig()
    """
    formatter = "json" if settings.log_format == "json" else "text"
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": formatter,
            "stream": sys.stdout,
            "filters": ["correlation_id"],
        },
    }

    if settings.log_file_enabled:
        log_file = Path(settings.log_file_path)
        handlers["file"] = _file_handler(str(log_file), settings.log_level, formatter)
        handlers["error_file"] = _file_handler(
            str(log_file.parent / "error.log"), "ERROR", formatter
        )

    handler_names = list(handlers)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {"format": TEXT_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": JSON_FORMAT,
            },
        },
        "filters": {"correlation_id": {"()": CorrelationIdFilter}},
        "handlers": handlers,
        "root": {"level": settings.log_level, "handlers": handler_names},
        "loggers": {
            "axiobank": {
                "level": settings.log_level,
                "handlers": handler_names,
                "propagate": False,
            },
            **{
                name: {"level": "WARNING", "handlers": handler_names, "propagate": False}
                for name in QUIET_LOGGERS
            },
        },
    }


def setup_logging() -> None:
    """Configure logging once at process startup."""
    if settings.log_file_enabled:
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_config())
    logging.getLogger(__name__).info(
        f"Logging configured: level={settings.log_level}, "
        f"format={settings.log_format}, file_enabled={settings.log_file_enabled}"
    )
