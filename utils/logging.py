"""
Centralized logging configuration for the shop ledger client.

Loggers write one JSON object per record to stderr (plain text on request),
so command output on stdout stays clean. Helpers log the outgoing API
requests, their responses and client errors with a common set of fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Attributes every LogRecord carries; anything else was passed through ``extra``
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Process-wide defaults, overridden once at start-up by configure_logging()
_defaults: Dict[str, Any] = {"level": "INFO", "structured": True}
_loggers: List[logging.Logger] = []


class StructuredFormatter(logging.Formatter):
    """Render a record and its ``extra`` fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def _formatter(structured: bool) -> logging.Formatter:
    return StructuredFormatter() if structured else logging.Formatter(TEXT_FORMAT)


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(level: str = "INFO", structured: bool = True) -> None:
    """
    Set the level and output format of every logger made by setup_logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: JSON lines when True, plain text otherwise
    """
    _defaults["level"] = level.upper()
    _defaults["structured"] = structured

    # Module loggers already exist by the time the CLI parses its options
    for logger in _loggers:
        logger.setLevel(_level(level))
        for handler in logger.handlers:
            handler.setFormatter(_formatter(structured))


def setup_logger(
    name: str, level: Optional[str] = None, structured: Optional[bool] = None
) -> logging.Logger:
    """
    Return the named logger, attaching the stderr handler on first use.

    Args:
        name: Logger name, usually ``__name__``
        level: Log level; the configured default when omitted
        structured: JSON output; the configured default when omitted

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if structured is None:
        structured = _defaults["structured"]
    logger.setLevel(_level(level or _defaults["level"]))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(structured))
    logger.addHandler(handler)
    logger.propagate = False
    _loggers.append(logger)
    return logger


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an outgoing API call; only the names of query parameters are recorded."""
    logger.debug(
        "API request started",
        extra={
            "http_method": method,
            "path": path,
            "query_params": sorted(params) if params else [],
        },
    )


def log_response(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    elapsed_ms: Optional[float] = None,
    response_size: Optional[int] = None,
) -> None:
    """
    Log the outcome of an API call.

    Error statuses are logged as warnings; the caller decides whether they
    become an exception.

    Args:
        logger: Logger instance
        method: HTTP method
        path: Request path
        status_code: HTTP status returned by the backend
        elapsed_ms: Round trip time in milliseconds
        response_size: Size of the response body in bytes
    """
    log = logger.info if status_code < 400 else logger.warning
    log(
        "API request completed",
        extra={
            "http_method": method,
            "path": path,
            "status_code": status_code,
            "execution_time_ms": round(elapsed_ms, 2) if elapsed_ms is not None else None,
            "response_size": response_size,
        },
    )


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log a failure with its type, message and traceback.

    Args:
        logger: Logger instance
        error: The exception being handled
        context: Extra fields such as the action or request path
    """
    fields = {"error_type": type(error).__name__, "error_message": str(error)}
    fields.update(context or {})
    logger.error(f"{type(error).__name__}: {error}", extra=fields, exc_info=True)
