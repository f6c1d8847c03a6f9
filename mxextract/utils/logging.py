"""
Logging configuration for the mxextract engine.

Console output goes through rich; a JSON-lines file log can be added through
``MXEXTRACT_LOG_FILE``. Fields set with ``LogContext`` (the module being
extracted, the running operation) are stamped onto every record emitted
inside the block, including records from awaited loads.
"""

import functools
import inspect
import json
import logging
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from mxextract.config import get_settings
from mxextract.utils.errors import ConfigurationError

# Attributes every LogRecord has; anything else was added through ``extra``
# or the context filter.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}

_log_context: ContextVar[Dict[str, Any]] = ContextVar("mxextract_log_context", default={})


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Copy the active ``LogContext`` fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _console_handler(dev_mode: bool) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=dev_mode,
        rich_tracebacks=True,
        tracebacks_show_locals=dev_mode,
    )
    handler.addFilter(ContextFilter())
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_file_path: Optional[Path] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Logging level (defaults to settings)
        log_file_path: JSON-lines log file (defaults to settings, none if unset)
    """
    settings = get_settings()
    log_level = (log_level or settings.log_level).upper()
    log_file_path = log_file_path or settings.get_log_file_path()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(settings.dev_mode))

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.addFilter(ContextFilter())
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": log_level, "log_file": str(log_file_path) if log_file_path else None},
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Add fields to every record logged inside the block.

    Nested contexts layer over the outer fields and restore them on exit.
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set({**_log_context.get(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _log_context.reset(self._token)


def log_performance(func):
    """
    Log how long a coroutine function takes.

    Usage:
        @log_performance
        async def extract_project(self, model) -> Document:
            ...
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"log_performance expects a coroutine function, got {func!r}")

    logger = get_logger(func.__module__)

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        started = time.perf_counter()
        with LogContext(operation=func.__name__):
            logger.debug(f"Starting {func.__name__}")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{func.__name__} failed after {time.perf_counter() - started:.2f}s: {e}",
                    extra={"duration_seconds": time.perf_counter() - started},
                )
                raise
            duration = time.perf_counter() - started
            logger.info(
                f"{func.__name__} finished in {duration:.2f}s",
                extra={"duration_seconds": duration},
            )
            return result

    return wrapper


# Configure on first import unless the host application already has handlers.
if not logging.getLogger().handlers:
    try:
        setup_logging()
    except ConfigurationError:
        # Invalid settings are reported by the command that reads them.
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger().addHandler(_console_handler(dev_mode=False))
