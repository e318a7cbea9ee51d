"""
JSON structured logging for modeltidy.

Records are emitted one JSON object per line so that table production and
validation events can be filtered by role, model type and schema
fingerprint.

Module loggers under the ``modeltidy`` namespace share the handlers of the
package logger, which `configure_logging` sets up from the loaded settings
(level and optional log file). Loggers outside the namespace, or created
with their own file or level, get their own handlers.
"""

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "modeltidy"
LEVEL_ENV = "MODELTIDY_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {
    'message', 'asctime', 'context', 'taskName'
}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


class JSONFormatter(logging.Formatter):
    """
    Render a record as a single JSON object.

    Keys: timestamp (UTC, ISO 8601), level, logger, message, plus `context`
    and `exception` when present and any extra attributes passed to the
    logging call.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, 'context', None)
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        entry.update({
            key: _jsonable(value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        })
        return json.dumps(entry, default=str)


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever `sys.stderr` is at emit time."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(LEVEL_ENV) or DEFAULT_LEVEL).upper()
    return getattr(logging, name, logging.WARNING)


def _attach_handlers(logger: logging.Logger, log_file: Optional[str],
                     console_output: bool):
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    handlers = []
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    if console_output:
        # stdout is reserved for CLI tables
        handlers.append(_StderrHandler())

    for handler in handlers:
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.propagate = False


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    (Re)configure the package logger shared by all modeltidy modules.

    Args:
        level: Level name; defaults to $MODELTIDY_LOG_LEVEL, then WARNING
        log_file: Optional path for a JSON-lines log file
        console_output: Also write records to stderr

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_resolve_level(level))
    _attach_handlers(package_logger, log_file, console_output)
    return package_logger


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


class StructuredLogger:
    """
    Logger wrapper taking a `context` dict on every call.

    Wraps a standard library logger; extra keyword arguments become record
    attributes and end up as top-level JSON keys.
    """

    def __init__(
        self,
        name: str,
        log_file: Optional[str] = None,
        level: Optional[str] = None,
        console_output: bool = True
    ):
        """
        Args:
            name: Logger name (typically module name)
            log_file: Path to a log file for this logger only
            level: Level for this logger only
            console_output: Whether this logger's own handlers include stderr
        """
        self.logger = logging.getLogger(name)

        if _in_package(name) and log_file is None and level is None:
            package_logger = logging.getLogger(PACKAGE_LOGGER)
            if not package_logger.handlers:
                configure_logging()
            if name != PACKAGE_LOGGER:
                self.logger.propagate = True
            return

        self.logger.setLevel(_resolve_level(level))
        _attach_handlers(self.logger, log_file, console_output)

    def _log(self, level: int, message: str, context: Optional[Dict[str, Any]] = None,
             exc_info: bool = False, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        extra = dict(kwargs, context=context or {})
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None,
              exc_info: bool = True, **kwargs):
        """Log an error, with the active exception's traceback by default."""
        self._log(logging.ERROR, message, context, exc_info=exc_info, **kwargs)

    def log_event(self, event_type: str, details: Dict[str, Any], level: str = "INFO"):
        """
        Log a named event such as 'table_produced'.

        Args:
            event_type: Event name, stored as context.event_type
            details: Merged into the context
            level: Level name
        """
        self._log(_resolve_level(level), f"Event: {event_type}",
                  {"event_type": event_type, **details})

    def log_operation_failed(self, operation: str, error: Exception,
                             details: Optional[Dict[str, Any]] = None):
        """Log a failed user-facing operation without a traceback."""
        context = {
            "operation": operation,
            "status": "failed",
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        context.update(details or {})
        self.error(f"Operation failed: {operation}", context=context, exc_info=False)


def get_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    console_output: bool = True
) -> StructuredLogger:
    """
    Get a structured logger.

    Module loggers (``get_logger(__name__)``) share the package handlers.
    Passing `log_file` or `level` gives the logger handlers of its own.
    """
    return StructuredLogger(name, log_file=log_file, level=level,
                            console_output=console_output)
