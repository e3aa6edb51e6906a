"""
Retry handler with exponential backoff, jitter, and circuit breaker.

Only idempotent reads go through this handler. Review writes (submit,
approve, reject, reopen) are never retried automatically: repeating one
blindly could apply it twice on the server.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Optional

from timesheet_review.services.error_classifier import ErrorClassifier

logger = logging.getLogger(__name__)


class RetryExhaustedException(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception


class CircuitBreakerError(Exception):
    """Raised when the circuit breaker is open."""


class RetryHandler:
    """
    Retries transient failures with exponential backoff and a circuit breaker.

    Features:
    - Exponential backoff with configurable base and jitter
    - Circuit breaker that stops calling a failing API for a cool-down period
    - Thread-safe, so one handler can serve concurrent readers
    - Retry decision delegated to ErrorClassifier unless overridden
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2,
        jitter_factor: float = 0.1,
        circuit_breaker_threshold: int = 10,
        circuit_breaker_timeout: float = 60.0,
        retry_condition: Optional[Callable[[Exception], bool]] = None,
    ):
        """
        Initialize retry handler.

        Args:
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff (seconds)
            max_delay: Maximum delay between retries (seconds)
            exponential_base: Base for exponential backoff calculation
            jitter_factor: Factor for random jitter (0.0 to 1.0)
            circuit_breaker_threshold: Consecutive failures before opening the circuit
            circuit_breaker_timeout: Cool-down before trying again (seconds)
            retry_condition: Custom function deciding whether to retry
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.circuit_breaker_threshold = circuit_breaker_threshold
        self.circuit_breaker_timeout = circuit_breaker_timeout
        self.retry_condition = retry_condition or ErrorClassifier().is_retryable

        self._circuit_open = False
        self._circuit_opened_at = 0.0
        self._failure_count = 0

        self._total_calls = 0
        self._total_retries = 0
        self._total_failures = 0

        self._lock = threading.Lock()

    def _calculate_delay(self, attempt: int) -> float:
        """Backoff delay for a 0-based attempt, capped and jittered."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
        return max(0.0, delay + jitter)

    def _is_circuit_open(self) -> bool:
        with self._lock:
            if not self._circuit_open:
                return False
            if time.time() - self._circuit_opened_at >= self.circuit_breaker_timeout:
                logger.info("Circuit breaker transitioning to half-open state")
                return False
            return True

    def _record_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._circuit_open:
                logger.info("Circuit breaker closed after successful execution")
                self._circuit_open = False

    def _record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._total_failures += 1
            if not self._circuit_open and self._failure_count >= self.circuit_breaker_threshold:
                logger.warning(f"Circuit breaker opened after {self._failure_count} failures")
                self._circuit_open = True
                self._circuit_opened_at = time.time()

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a function, retrying transient failures.

        Args:
            func: Function to execute
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            Result of function execution

        Raises:
            CircuitBreakerError: If the circuit breaker is open
            RetryExhaustedException: If all retries are exhausted
            Exception: The original exception if it is not retryable
        """
        with self._lock:
            self._total_calls += 1

        if self._is_circuit_open():
            raise CircuitBreakerError("Circuit breaker is open")

        func_name = getattr(func, "__name__", repr(func))
        for attempt in range(self.max_retries + 1):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.retry_condition(e):
                    logger.debug(f"Not retrying {func_name}: {type(e).__name__}")
                    raise

                if attempt >= self.max_retries:
                    logger.warning(f"Max retries ({self.max_retries}) exceeded for {func_name}")
                    with self._lock:
                        self._total_retries += attempt
                    self._record_failure()
                    raise RetryExhaustedException(
                        f"Max retries ({self.max_retries}) exceeded. "
                        f"Last error: {type(e).__name__}: {e}",
                        last_exception=e,
                    ) from e

                delay = self._calculate_delay(attempt)
                logger.debug(
                    f"Retrying {func_name} in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retries + 1}). "
                    f"Error: {type(e).__name__}: {e}"
                )
                time.sleep(delay)
                continue

            if attempt > 0:
                logger.info(f"{func_name} succeeded after {attempt} retries")
                with self._lock:
                    self._total_retries += attempt
            self._record_success()
            return result

        raise RuntimeError("unreachable")  # pragma: no cover

    def get_retry_statistics(self) -> dict:
        """Return call, retry and failure counters."""
        with self._lock:
            return {
                "total_calls": self._total_calls,
                "total_retries": self._total_retries,
                "total_failures": self._total_failures,
                "circuit_breaker_open": self._circuit_open,
                "failure_count": self._failure_count,
            }

    def reset_circuit_breaker(self) -> None:
        """Manually reset the circuit breaker."""
        with self._lock:
            self._circuit_open = False
            self._failure_count = 0
            self._circuit_opened_at = 0.0
        logger.info("Circuit breaker manually reset")
