"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
import requests

from timesheet_review.cli.utils.formatters import format_error, format_warning
from timesheet_review.exceptions import (
    EmptyBatch,
    InvalidTransition,
    PermissionDenied,
    RemoteFailure,
    ReviewError,
    ValidationFailed,
)
from timesheet_review.services.error_classifier import ErrorClassifier
from timesheet_review.services.retry_handler import CircuitBreakerError, RetryExhaustedException


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


# exit code, heading, hint
_REVIEW_ERROR_OUTPUT = {
    PermissionDenied: (3, "Permission Denied", None),
    InvalidTransition: (4, "Invalid Transition", "Check the timesheet status with list-timesheets"),
    ValidationFailed: (5, "Validation Failed", None),
    EmptyBatch: (5, "Empty Batch", "Pass at least one timesheet id"),
    RemoteFailure: (6, "Remote Call Failed", "The action was not retried; check the timesheet before retrying"),
}


def _echo_hint(hint: Optional[str]) -> None:
    if hint:
        click.echo(format_warning(f"Hint: {hint}"))


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Print a user-friendly message for ``error`` and return the exit code.

    Exit codes:
        1: configuration error
        3: permission denied
        4: invalid transition
        5: validation failed or empty batch
        6: remote call failed
        7: HTTP error while reading, retries exhausted or circuit open
        130: cancelled by user
        255: unexpected error

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code
    """
    if isinstance(error, ConfigurationError):
        click.echo(format_error(f"Configuration Error: {error.message}"))
        _echo_hint(error.recovery_hint)
        return 1

    if isinstance(error, ReviewError):
        exit_code, heading, hint = _REVIEW_ERROR_OUTPUT.get(
            type(error), (255, "Review Error", None)
        )
        click.echo(format_error(f"{heading}: {error.message}"))
        if error.guard:
            click.echo(f"  Failed check: {error.guard}")
        for warning in getattr(error, "warnings", []):
            click.echo(format_warning(f"  {warning}"))
        _echo_hint(hint)
        return exit_code

    if isinstance(error, (RetryExhaustedException, CircuitBreakerError)):
        cause = getattr(error, "last_exception", None)
        detail = ErrorClassifier().describe(cause) if cause is not None else str(error)
        click.echo(format_error(f"API Error: {detail}"))
        _echo_hint("The API is unavailable; try again later")
        return 7

    if isinstance(error, requests.RequestException):
        click.echo(format_error(f"API Error: {ErrorClassifier().describe(error)}"))
        _echo_hint("Check API_BASE_URL and API_TOKEN in your .env file")
        return 7

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo(traceback.format_exc())
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Example:
        @click.command()
        def my_command():
            with with_error_handling(debug):
                ...
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, SystemExit):
                sys.exit(handle_cli_error(exc_val, self.show_debug))
            return False

    return ErrorHandler(debug)
