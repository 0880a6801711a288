"""
Structured Logging for hotprops

Provides JSON and human-readable formatters for the standard library logging
system, plus reload context tracking so that every record emitted while a
watched file is being reloaded carries the file path and a correlation ID.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, TextIO, Union

# Context variables for reload tracking
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
reload_path_var: ContextVar[Optional[str]] = ContextVar('reload_path', default=None)

ROOT_LOGGER_NAME = "hotprops"

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class LogLevel(Enum):
    """Log levels for the hotprops logging setup"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        return getattr(logging, self.value)


class ReloadContextFilter(logging.Filter):
    """Stamps the current reload context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        record.reload_path = reload_path_var.get()
        return True


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and key not in ('correlation_id', 'reload_path')
    }


class JSONLogFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', None),
            'reload_path': getattr(record, 'reload_path', None),
        }

        extra = _extra_fields(record)
        if extra:
            payload['extra'] = extra
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload['exception'] = {
                'type': type(exc).__name__,
                'message': str(exc),
                'module': type(exc).__module__
            }

        # Remove None values to keep logs clean
        return json.dumps({k: v for k, v in payload.items() if v is not None}, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development/debugging"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        base_msg = f"[{timestamp}] {record.levelname} {record.name}: {record.getMessage()}"

        reload_path = getattr(record, 'reload_path', None)
        if reload_path:
            base_msg += f" [reload_path={reload_path}]"
        correlation_id = getattr(record, 'correlation_id', None)
        if correlation_id:
            base_msg += f" [correlation_id={correlation_id}]"

        extra = _extra_fields(record)
        if extra:
            extra_str = ', '.join(f"{k}={v}" for k, v in extra.items())
            base_msg += f" [{extra_str}]"

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)
        return base_msg


@contextmanager
def reload_context(path: str, correlation_id: Optional[str] = None) -> Iterator[str]:
    """Context manager tagging log records with the file being reloaded"""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    path_token = reload_path_var.set(path)
    correlation_token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(correlation_token)
        reload_path_var.reset(path_token)


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the hotprops namespace"""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_default_logging(
    level: LogLevel = LogLevel.INFO,
    use_json: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    stream: TextIO = sys.stdout
) -> logging.Logger:
    """Configure default logging for hotprops"""

    # Choose formatter
    formatter = JSONLogFormatter() if use_json else HumanReadableFormatter()
    context_filter = ReloadContextFilter()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.to_logging_level())

    for handler in list(root_logger.handlers):
        if getattr(handler, '_hotprops_handler', False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    console_handler._hotprops_handler = True
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        file_handler._hotprops_handler = True
        root_logger.addHandler(file_handler)

    return root_logger


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context"""
    return correlation_id_var.get()


def get_reload_path() -> Optional[str]:
    """Get the path of the file currently being reloaded, if any"""
    return reload_path_var.get()
