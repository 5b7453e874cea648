"""Unit tests for the exponential backoff retry wrapper."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import time
import pytest
from unittest.mock import Mock, patch
from services.errors import (
    EmbeddingServiceUnavailable,
    LLMClientError,
    LLMError,
    RequestTimeoutError,
)
from services.retry import OVERLOADED, is_overloaded, with_retry


def overloaded_error():
    return LLMClientError(LLMError(code=OVERLOADED, message="The model is overloaded.", details={}))


class TestIsOverloaded:
    """Test suite for is_overloaded."""

    def test_llm_overloaded(self):
        assert is_overloaded(overloaded_error()) is True

    def test_llm_other_code(self):
        error = LLMClientError(LLMError(code="AUTHENTICATION_ERROR", message="bad key", details={}))
        assert is_overloaded(error) is False

    def test_embedding_unavailable(self):
        assert is_overloaded(EmbeddingServiceUnavailable("503")) is True

    def test_generic_error(self):
        assert is_overloaded(RuntimeError("boom")) is False


class TestWithRetry:
    """Test suite for with_retry."""

    def test_success_first_attempt(self):
        operation = Mock(return_value="ok")
        sleep = Mock()

        assert with_retry(operation, sleep=sleep) == "ok"
        operation.assert_called_once()
        sleep.assert_not_called()

    def test_succeeds_on_third_attempt_with_increasing_delay(self):
        operation = Mock(side_effect=[overloaded_error(), overloaded_error(), "answer"])
        delays = []

        result = with_retry(operation, max_attempts=3, initial_delay_ms=1000, sleep=delays.append)

        assert result == "answer"
        assert operation.call_count == 3
        assert delays == [1.0, 2.0]
        assert delays[1] > delays[0]

    def test_non_transient_error_not_retried(self):
        operation = Mock(side_effect=ValueError("bad input"))
        sleep = Mock()

        with pytest.raises(ValueError, match="bad input"):
            with_retry(operation, max_attempts=5, sleep=sleep)

        operation.assert_called_once()
        sleep.assert_not_called()

    def test_exhausted_retries_raise_last_error(self):
        errors = [overloaded_error(), overloaded_error()]
        operation = Mock(side_effect=errors)
        delays = []

        with pytest.raises(LLMClientError) as exc_info:
            with_retry(operation, max_attempts=2, initial_delay_ms=10, sleep=delays.append)

        assert exc_info.value is errors[-1]
        assert operation.call_count == 2
        # No wait after the final attempt
        assert delays == [0.01]

    def test_custom_predicate(self):
        operation = Mock(side_effect=[KeyError("flaky"), "done"])

        result = with_retry(
            operation,
            should_retry=lambda e: isinstance(e, KeyError),
            sleep=Mock(),
        )

        assert result == "done"

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            with_retry(Mock(), max_attempts=0)

    def test_deadline_already_passed(self):
        operation = Mock(return_value="never")

        with pytest.raises(RequestTimeoutError):
            with_retry(operation, deadline=time.monotonic() - 1)

        operation.assert_not_called()

    def test_deadline_stops_retrying(self):
        """A wait that would run past the deadline abandons the request."""
        operation = Mock(side_effect=[overloaded_error(), "too late"])
        sleep = Mock()

        with patch("services.retry.time.monotonic", return_value=100.0):
            with pytest.raises(RequestTimeoutError) as exc_info:
                with_retry(operation, initial_delay_ms=5000, deadline=102.0, sleep=sleep)

        assert isinstance(exc_info.value.__cause__, LLMClientError)
        operation.assert_called_once()
        sleep.assert_not_called()

    def test_deadline_allows_retry_within_budget(self):
        operation = Mock(side_effect=[overloaded_error(), "in time"])

        with patch("services.retry.time.monotonic", return_value=100.0):
            result = with_retry(operation, initial_delay_ms=1000, deadline=110.0, sleep=Mock())

        assert result == "in time"
