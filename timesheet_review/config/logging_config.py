"""Centralized logging configuration for the review core."""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from timesheet_review.utils.logging_utils import ContextFilter, sanitize_sensitive_data

# LogRecord attributes that are not user-supplied extras
_RESERVED_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with context fields and redaction."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
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

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_FIELDS and not key.startswith("_")
        }
        log_data.update(sanitize_sensitive_data(extras))

        return json.dumps(log_data, default=str)


@dataclass
class LoggingConfig:
    """
    Configuration for centralized logging.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('standard' or 'json')
        log_file: Path to log file (optional)
        enable_console: Enable console output
        enable_file: Enable rotating file output
        max_file_size: Maximum log file size in bytes
        backup_count: Number of rotated files to keep
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    enable_file: bool = False
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5

    VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    VALID_FORMATS = ("standard", "json")

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in self.VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {', '.join(self.VALID_LEVELS)}"
            )
        if self.log_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. "
                f"Must be one of {', '.join(self.VALID_FORMATS)}"
            )
        if self.enable_file and not self.log_file:
            raise ValueError("log_file must be specified when enable_file is True")

    @classmethod
    def from_env(cls, log_level: Optional[str] = None) -> "LoggingConfig":
        """
        Create configuration from environment variables.

        Environment Variables:
            LOG_LEVEL: Log level (default: INFO)
            LOG_FORMAT: Log format (default: standard)
            LOG_FILE: Log file path; enables file output when set
            LOG_CONSOLE: Enable console output (default: true)

        Args:
            log_level: Overrides LOG_LEVEL when given

        Returns:
            LoggingConfig instance
        """
        log_file = os.getenv("LOG_FILE")
        return cls(
            log_level=log_level or os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            log_file=log_file,
            enable_console=os.getenv("LOG_CONSOLE", "true").lower() == "true",
            enable_file=bool(log_file),
        )


def configure_logging(config: LoggingConfig) -> None:
    """
    Configure the root logger according to ``config``.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        config: LoggingConfig instance
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    level = getattr(logging, config.log_level)
    root_logger.setLevel(level)

    if config.log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers = []
    if config.enable_console:
        handlers.append(logging.StreamHandler())
    if config.enable_file and config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=config.log_file,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
            )
        )

    context_filter = ContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove all root handlers and restore the default level (for tests)."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.WARNING)
