"""Result values returned by the request core.

The executor never raises for an HTTP or transport outcome. It returns a
``Success`` or a ``Failure``; callers inspect ``ok`` or call ``unwrap()``
to turn a failure into the matching exception.

Example:
    >>> result = client.get("/repos/octocat/hello-world/labels/bug")
    >>> if result.ok:
    ...     print(result.payload["color"])
    ... elif result.category is FailureCategory.NOT_FOUND:
    ...     print("no such label")

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

import httpx

from ghrest.exceptions import GitHubError, exception_from_failure

T = TypeVar("T")


class FailureCategory(str, Enum):
    """Why a request did not produce the expected response."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    TRANSPORT_ERROR = "transport_error"
    UNEXPECTED_STATUS = "unexpected_status"


def classify_status(status_code: int, headers: Mapping[str, str] | None = None) -> FailureCategory:
    """Map an unexpected HTTP status to a failure category.

    A 403 is a rate-limit response only when the quota header says no
    requests remain; otherwise it is an authorization problem.

    Args:
        status_code: HTTP status code of the response.
        headers: Response headers.

    Returns:
        The matching FailureCategory.

    """
    headers = httpx.Headers(headers or {})
    if status_code == 404:
        return FailureCategory.NOT_FOUND
    if status_code == 429:
        return FailureCategory.RATE_LIMITED
    if status_code == 403 and headers.get("X-RateLimit-Remaining") == "0":
        return FailureCategory.RATE_LIMITED
    if status_code in (401, 403):
        return FailureCategory.UNAUTHORIZED
    if 400 <= status_code < 500:
        return FailureCategory.CLIENT_ERROR
    if 500 <= status_code < 600:
        return FailureCategory.SERVER_ERROR
    return FailureCategory.UNEXPECTED_STATUS


@dataclass(frozen=True)
class Success:
    """A response whose status was in the expected set.

    Attributes:
        payload: Decoded JSON body, or None for 204/empty bodies.
        status_code: HTTP status code.
        headers: Response headers (case-insensitive).

    """

    payload: Any
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def ok(self) -> bool:
        return True

    @property
    def link_header(self) -> str | None:
        """The Link header carrying pagination cursors, if any."""
        return self.headers.get("Link")

    def unwrap(self) -> Any:
        """Return the payload."""
        return self.payload


@dataclass(frozen=True)
class Failure:
    """A request that did not produce an expected response.

    Attributes:
        category: Classification of the failure.
        message: Human-readable description.
        status_code: HTTP status, or None for transport failures.
        body: Decoded error body, if any.
        headers: Response headers (case-insensitive).
        error: Underlying exception for transport failures.

    """

    category: FailureCategory
    message: str
    status_code: int | None = None
    body: Any = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    error: BaseException | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def ok(self) -> bool:
        return False

    def to_exception(self) -> GitHubError:
        """Build the exception that corresponds to this failure."""
        return exception_from_failure(self)

    def unwrap(self) -> Any:
        """Raise the exception that corresponds to this failure."""
        raise self.to_exception()


Result = Union[Success, Failure]


@dataclass
class PageResult(Generic[T]):
    """Materialized output of a paginated fetch.

    When a page request fails mid-stream, ``items`` still holds everything
    collected from earlier pages and ``failure`` holds the terminating
    failure.

    Attributes:
        items: Collected (and transformed) items in page order.
        failure: The failure that stopped the fetch, if any.
        pages_fetched: Number of pages successfully fetched.

    """

    items: list[T] = field(default_factory=list)
    failure: Failure | None = None
    pages_fetched: int = 0

    @property
    def complete(self) -> bool:
        """Check whether the fetch ended without a failure."""
        return self.failure is None

    def unwrap(self) -> list[T]:
        """Return the items, raising if the fetch failed.

        Raises:
            GitHubError: The exception matching ``failure``.

        """
        if self.failure is not None:
            raise self.failure.to_exception()
        return self.items

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
