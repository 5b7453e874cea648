"""Exponential backoff retry shared by every provider call."""
import logging
import time
from typing import Callable, Optional, TypeVar

from services.errors import EmbeddingServiceUnavailable, LLMClientError, RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

OVERLOADED = "OVERLOADED"


def is_overloaded(error: BaseException) -> bool:
    """True for the transient "service unavailable" signals of our providers."""
    if isinstance(error, LLMClientError):
        return error.error.code == OVERLOADED
    return isinstance(error, EmbeddingServiceUnavailable)


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay_ms: int = 1000,
    should_retry: Callable[[BaseException], bool] = is_overloaded,
    deadline: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `operation`, retrying transient failures with exponential backoff.

    After failed attempt n (0-based) the wait is initial_delay_ms * 2**n.
    Errors rejected by `should_retry` propagate immediately; once
    `max_attempts` is reached the last error propagates.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total number of attempts (>= 1)
        initial_delay_ms: Delay before the second attempt, in milliseconds
        should_retry: Predicate deciding whether an error is transient
        deadline: Optional time.monotonic() value after which no new attempt starts
        sleep: Sleep function, injectable for tests

    Returns:
        Whatever `operation` returns

    Raises:
        RequestTimeoutError: If waiting for the next attempt would pass `deadline`
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[BaseException] = None

    for attempt in range(max_attempts):
        if deadline is not None and time.monotonic() >= deadline:
            raise RequestTimeoutError("Request deadline exceeded") from last_error

        try:
            return operation()
        except Exception as e:
            if not should_retry(e):
                raise
            last_error = e

        if attempt == max_attempts - 1:
            break

        delay_s = initial_delay_ms * (2 ** attempt) / 1000.0
        if deadline is not None and time.monotonic() + delay_s > deadline:
            logger.warning(f"Abandoning retries, next wait of {delay_s:.1f}s passes the request deadline")
            raise RequestTimeoutError("Request deadline exceeded while retrying") from last_error

        logger.warning(
            f"Retry attempt {attempt + 1}/{max_attempts} after {delay_s * 1000:.0f}ms: {last_error}"
        )
        sleep(delay_s)

    logger.error(f"Giving up after {max_attempts} attempts: {last_error}")
    raise last_error
