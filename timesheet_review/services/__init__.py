"""
Remote collaborators of the review core.

- TimesheetApiClient: REST client for the timesheet backend
- RetryHandler: backoff and circuit breaker for idempotent reads
- ResponseCache: explicit TTL/LRU cache for read responses
- ErrorClassifier: retryable/fatal classification and failure descriptions
- CurrentActorProvider: the session actor
"""

from .error_classifier import ErrorClassifier, ErrorType
from .response_cache import ResponseCache
from .retry_handler import CircuitBreakerError, RetryExhaustedException, RetryHandler
from .session import CurrentActorProvider
from .timesheet_api import (
    RemoteTimesheetOperations,
    TimesheetApiClient,
    create_api_client,
    parse_timesheet,
)

__all__ = [
    "CircuitBreakerError",
    "CurrentActorProvider",
    "ErrorClassifier",
    "ErrorType",
    "RemoteTimesheetOperations",
    "ResponseCache",
    "RetryExhaustedException",
    "RetryHandler",
    "TimesheetApiClient",
    "create_api_client",
    "parse_timesheet",
]
