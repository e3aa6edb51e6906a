"""
Unit tests for the error classifier.
"""

import socket

import pytest
import requests

from timesheet_review.services.error_classifier import ErrorClassifier, ErrorType


def http_error(status: int, body: bytes = b"") -> requests.exceptions.HTTPError:
    """Build an HTTPError carrying a real Response."""
    response = requests.Response()
    response.status_code = status
    response._content = body
    return requests.exceptions.HTTPError(f"HTTP {status}", response=response)


class TestErrorClassifier:
    """Test cases for ErrorClassifier."""

    @pytest.fixture
    def classifier(self):
        return ErrorClassifier()

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_http_errors(self, classifier, status):
        """Test that 429 and 5xx errors are retryable."""
        assert classifier.classify(http_error(status)) == ErrorType.RETRYABLE
        assert classifier.is_retryable(http_error(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_fatal_http_errors(self, classifier, status):
        """Test that other 4xx errors are fatal."""
        assert classifier.classify(http_error(status)) == ErrorType.FATAL
        assert not classifier.is_retryable(http_error(status))

    def test_network_errors_are_retryable(self, classifier):
        """Test that network errors are retryable."""
        errors = [
            socket.timeout("timed out"),
            TimeoutError("timed out"),
            ConnectionError("reset"),
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.ReadTimeout("slow"),
        ]
        for error in errors:
            assert classifier.classify(error) == ErrorType.RETRYABLE

    def test_unknown_errors(self, classifier):
        """Test that other errors are classified as unknown."""
        for error in [ValueError("x"), KeyError("k"), RuntimeError("r")]:
            assert classifier.classify(error) == ErrorType.UNKNOWN
            assert not classifier.is_retryable(error)

    def test_http_error_without_response(self, classifier):
        """Test an HTTPError with no response is unknown."""
        assert classifier.classify(requests.exceptions.HTTPError("bare")) == ErrorType.UNKNOWN


class TestDescribe:
    """Test failure descriptions."""

    @pytest.fixture
    def classifier(self):
        return ErrorClassifier()

    def test_rate_limit_with_server_message(self, classifier):
        """Test the server message is appended."""
        error = http_error(429, b'{"message": "Too many requests"}')
        assert classifier.describe(error) == "Rate limit error (HTTP 429): Too many requests"

    def test_server_error(self, classifier):
        """Test 5xx description."""
        assert classifier.describe(http_error(503)) == "Server error (HTTP 503)"

    def test_client_error_with_error_key(self, classifier):
        """Test the 'error' key is used when there is no 'message'."""
        error = http_error(409, b'{"error": "Timesheet already approved"}')
        assert classifier.describe(error) == "Client error (HTTP 409): Timesheet already approved"

    def test_non_json_body_ignored(self, classifier):
        """Test an HTML error page does not break the description."""
        assert classifier.describe(http_error(502, b"<html>bad gateway</html>")) == (
            "Server error (HTTP 502)"
        )

    def test_timeout(self, classifier):
        """Test timeout description."""
        assert classifier.describe(requests.exceptions.Timeout("x")) == "Network timeout error"
        assert classifier.describe(socket.timeout("x")) == "Network timeout error"

    def test_connection_error(self, classifier):
        """Test connection error description."""
        assert classifier.describe(ConnectionError("reset")) == "Network connection error"

    def test_other_error(self, classifier):
        """Test fallback to type and message."""
        assert classifier.describe(RuntimeError("boom")) == "RuntimeError: boom"
