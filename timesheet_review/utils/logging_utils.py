"""Structured logging utilities with context support."""

import functools
import logging
import threading
from typing import Any, Callable, Dict, Optional

# Per-thread log context; each bulk worker thread carries its own
_thread_local = threading.local()

# Field name fragments whose values are redacted
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "secret",
    "credentials",
    "authorization",
}


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the current thread's log context."""
    return dict(getattr(_thread_local, "context", {}))


class LogContext:
    """
    Context manager adding structured fields to every log record in scope.

    Example:
        with LogContext(actor_id="u-7", timesheet_id="ts-1"):
            logger.info("Approving timesheet")
            # record carries actor_id and timesheet_id
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._previous: Optional[Dict[str, Any]] = None

    def __enter__(self):
        self._previous = get_log_context()
        _thread_local.context = {**self._previous, **self.fields}
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self._previous or {}
        return False


class ContextFilter(logging.Filter):
    """Logging filter that copies the thread's context fields onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in getattr(_thread_local, "context", {}).items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact values of sensitive fields, recursing into nested dicts.

    Args:
        data: Dictionary to sanitize

    Returns:
        New dictionary with sensitive values replaced by ``***REDACTED***``
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(value)
        else:
            sanitized[key] = value
    return sanitized


def log_function_call(
    func: Optional[Callable] = None, *, level: str = "DEBUG"
) -> Callable:
    """
    Decorator logging entry, exit and exceptions of a function.

    Arguments are not logged since they may carry review reasons or tokens.

    Example:
        @log_function_call(level="INFO")
        def execute(self, batch, actor):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())
            logger.log(log_level, f"Entering {f.__qualname__}")
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(f"Exception in {f.__qualname__}: {type(e).__name__}: {e}")
                raise
            logger.log(log_level, f"Exiting {f.__qualname__}")
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
