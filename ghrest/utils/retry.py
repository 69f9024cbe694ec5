"""Caller-side retry with exponential backoff.

The request core never retries on its own. This module lets a caller opt
in by wrapping an operation that returns a ``Result``.

Retry Conditions:
    - RATE_LIMITED failures (respects Retry-After when present)
    - SERVER_ERROR failures with 500, 502, 503, 504
    - TRANSPORT_ERROR failures classified as transient

Non-Retryable:
    - NOT_FOUND, UNAUTHORIZED, CLIENT_ERROR, UNEXPECTED_STATUS
    - DNS resolution failures

Example:
    >>> result = retry_result(lambda: client.get("/repos/octocat/hello-world"))

"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import ParamSpec

from ghrest.exceptions import TransportError
from ghrest.results import Failure, FailureCategory, Result

logger = logging.getLogger(__name__)

P = ParamSpec("P")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Backoff settings.

    Attributes:
        max_attempts: Total attempts including the first.
        base_delay: Initial delay in seconds.
        factor: Exponential multiplier.
        max_delay: Cap on any single delay.
        jitter: Randomize each delay by +/-25%.

    """

    max_attempts: int = 3
    base_delay: float = 1.0
    factor: float = 2.0
    max_delay: float = 60.0
    jitter: bool = True


def is_retryable_failure(failure: Failure) -> bool:
    """Determine if a failure is transient.

    Args:
        failure: The failure to check.

    Returns:
        True if the same request may succeed on another attempt.

    """
    if failure.category is FailureCategory.RATE_LIMITED:
        return True

    if failure.category is FailureCategory.SERVER_ERROR:
        return failure.status_code in RETRYABLE_STATUS_CODES

    if failure.category is FailureCategory.TRANSPORT_ERROR:
        error = failure.error
        if isinstance(error, TransportError):
            return error.is_retryable
        return TransportError("", original_error=error).is_retryable

    return False


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 60.0,
    jitter: bool = True,
) -> float:
    """Calculate delay for exponential backoff.

    Args:
        attempt: Current attempt number (0-indexed).
        base_delay: Initial delay in seconds.
        factor: Exponential factor.
        max_delay: Maximum delay cap.
        jitter: Add randomness to prevent thundering herd.

    Returns:
        Delay in seconds before next retry.

    """
    delay = min(base_delay * (factor**attempt), max_delay)

    if jitter:
        delay = delay * (0.75 + random.random() * 0.5)  # nosec B311

    return delay


def get_retry_after(failure: Failure) -> float | None:
    """Read the delay the service asked for, if any.

    Returns:
        Seconds to wait, or None if the response did not say.

    """
    value = failure.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def retry_result(
    operation: Callable[[], Result],
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Result:
    """Invoke ``operation`` until it succeeds or stops being retryable.

    Args:
        operation: Zero-argument callable returning a Result.
        config: Backoff settings.
        sleep: Blocks for the given number of seconds.

    Returns:
        The first Success, the first non-retryable Failure, or the last
        Failure once attempts are exhausted.

    """
    config = config or RetryConfig()
    result = operation()

    for attempt in range(config.max_attempts - 1):
        if result.ok or not is_retryable_failure(result):
            return result

        delay = get_retry_after(result)
        if delay is None:
            delay = calculate_backoff(
                attempt,
                base_delay=config.base_delay,
                factor=config.factor,
                max_delay=config.max_delay,
                jitter=config.jitter,
            )

        logger.info(
            "Retry %d/%d after %.2fs: %s",
            attempt + 1,
            config.max_attempts - 1,
            delay,
            result.message,
        )
        sleep(delay)
        result = operation()

    if not result.ok:
        logger.warning("Giving up after %d attempt(s): %s", config.max_attempts, result.message)
    return result


def retry(
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[P, Result]], Callable[P, Result]]:
    """Decorator form of ``retry_result``.

    Example:
        >>> @retry(RetryConfig(max_attempts=5))
        ... def fetch_repo():
        ...     return client.get("/repos/octocat/hello-world")

    """

    def decorator(func: Callable[P, Result]) -> Callable[P, Result]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result:
            return retry_result(lambda: func(*args, **kwargs), config, sleep)

        return wrapper

    return decorator
