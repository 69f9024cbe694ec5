"""Unit tests for the caller-side retry helper."""

from __future__ import annotations

import httpx
import pytest
from ghrest.results import Failure, FailureCategory, Success
from ghrest.utils.retry import (
    RetryConfig,
    calculate_backoff,
    get_retry_after,
    is_retryable_failure,
    retry,
    retry_result,
)


def failure(category: FailureCategory, status: int | None = None, **kwargs) -> Failure:
    return Failure(category, "failed", status_code=status, **kwargs)


class TestIsRetryableFailure:
    """Tests for retry classification."""

    @pytest.mark.parametrize(
        "result,expected",
        [
            (failure(FailureCategory.RATE_LIMITED, 429), True),
            (failure(FailureCategory.SERVER_ERROR, 503), True),
            (failure(FailureCategory.SERVER_ERROR, 501), False),
            (failure(FailureCategory.NOT_FOUND, 404), False),
            (failure(FailureCategory.UNAUTHORIZED, 401), False),
            (failure(FailureCategory.CLIENT_ERROR, 422), False),
            (
                failure(FailureCategory.TRANSPORT_ERROR, error=httpx.ConnectError("timed out")),
                True,
            ),
            (
                failure(
                    FailureCategory.TRANSPORT_ERROR,
                    error=httpx.ConnectError("Name or service not known"),
                ),
                False,
            ),
        ],
    )
    def test_classification(self, result, expected):
        assert is_retryable_failure(result) is expected


class TestBackoff:
    """Tests for backoff calculation."""

    def test_exponential_without_jitter(self):
        assert calculate_backoff(0, jitter=False) == 1.0
        assert calculate_backoff(1, jitter=False) == 2.0
        assert calculate_backoff(3, jitter=False) == 8.0

    def test_capped(self):
        assert calculate_backoff(20, max_delay=60.0, jitter=False) == 60.0

    def test_jitter_bounds(self):
        for _ in range(50):
            assert 0.75 <= calculate_backoff(0) <= 1.25

    def test_retry_after_header(self):
        assert get_retry_after(failure(FailureCategory.RATE_LIMITED, headers={"Retry-After": "7"})) == 7.0
        assert get_retry_after(failure(FailureCategory.RATE_LIMITED)) is None


class TestRetryResult:
    """Tests for retry_result and the retry decorator."""

    def test_retries_until_success(self):
        outcomes = [
            failure(FailureCategory.SERVER_ERROR, 502),
            failure(FailureCategory.SERVER_ERROR, 503),
            Success(payload="ok", status_code=200),
        ]
        sleeps: list[float] = []

        result = retry_result(
            lambda: outcomes.pop(0), RetryConfig(max_attempts=3, jitter=False), sleeps.append
        )

        assert result.ok
        assert sleeps == [1.0, 2.0]

    def test_stops_on_non_retryable(self):
        calls = []

        def operation():
            calls.append(1)
            return failure(FailureCategory.NOT_FOUND, 404)

        result = retry_result(operation, RetryConfig(max_attempts=5), lambda s: None)

        assert result.category is FailureCategory.NOT_FOUND
        assert len(calls) == 1

    def test_gives_up_after_max_attempts(self):
        calls = []

        def operation():
            calls.append(1)
            return failure(FailureCategory.SERVER_ERROR, 500)

        result = retry_result(operation, RetryConfig(max_attempts=3), lambda s: None)

        assert not result.ok
        assert len(calls) == 3

    def test_honors_retry_after(self):
        outcomes = [
            failure(FailureCategory.RATE_LIMITED, 429, headers={"Retry-After": "12"}),
            Success(payload=None, status_code=204),
        ]
        sleeps: list[float] = []

        retry_result(lambda: outcomes.pop(0), RetryConfig(), sleeps.append)

        assert sleeps == [12.0]

    def test_decorator(self):
        outcomes = [failure(FailureCategory.RATE_LIMITED, 429), Success("x", 200)]

        @retry(RetryConfig(max_attempts=2, jitter=False), sleep=lambda s: None)
        def fetch(tag: str):
            return outcomes.pop(0)

        assert fetch("a").payload == "x"
