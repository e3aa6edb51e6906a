"""
Error classification for remote timesheet API failures.
"""

import logging
import socket
from enum import Enum
from typing import Optional

import requests.exceptions

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of error types."""

    RETRYABLE = "retryable"  # 429, 5xx, network errors
    FATAL = "fatal"  # 4xx except 429
    UNKNOWN = "unknown"


def _status_code(exception: Exception) -> Optional[int]:
    response = getattr(exception, "response", None)
    return getattr(response, "status_code", None)


class ErrorClassifier:
    """
    Classifies remote errors and describes them for failure reports.

    Features:
    - HTTP status classification for ``requests`` errors
    - Network and timeout error detection
    - Human-readable descriptions, including the server's message when present
    """

    def classify(self, exception: Exception) -> ErrorType:
        """
        Classify an exception into retryable, fatal, or unknown.

        Args:
            exception: The exception to classify

        Returns:
            ErrorType classification
        """
        status_code = _status_code(exception)
        if isinstance(exception, requests.exceptions.HTTPError) and status_code:
            if status_code == 429 or 500 <= status_code < 600:
                return ErrorType.RETRYABLE
            if 400 <= status_code < 500:
                return ErrorType.FATAL

        if isinstance(
            exception,
            (
                socket.timeout,
                TimeoutError,
                ConnectionError,
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            ),
        ):
            return ErrorType.RETRYABLE

        return ErrorType.UNKNOWN

    def is_retryable(self, exception: Exception) -> bool:
        """Check if an exception is worth retrying."""
        return self.classify(exception) == ErrorType.RETRYABLE

    def describe(self, exception: Exception) -> str:
        """
        Get a human-readable error description.

        Args:
            exception: The exception to describe

        Returns:
            Error description string
        """
        status_code = _status_code(exception)
        if isinstance(exception, requests.exceptions.HTTPError) and status_code:
            detail = self._server_message(exception)
            suffix = f": {detail}" if detail else ""
            if status_code == 429:
                return f"Rate limit error (HTTP 429){suffix}"
            if 500 <= status_code < 600:
                return f"Server error (HTTP {status_code}){suffix}"
            return f"Client error (HTTP {status_code}){suffix}"

        if isinstance(
            exception, (socket.timeout, TimeoutError, requests.exceptions.Timeout)
        ):
            return "Network timeout error"

        if isinstance(exception, (ConnectionError, requests.exceptions.ConnectionError)):
            return "Network connection error"

        return f"{type(exception).__name__}: {exception}"

    @staticmethod
    def _server_message(exception: Exception) -> Optional[str]:
        response = getattr(exception, "response", None)
        if response is None:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            return str(message) if message else None
        return None
