"""Rate-limit tracking backed by ``GET /rate_limit``.

The tracker caches one snapshot in the shared ``ClientContext`` and refetches
it only when it is older than the TTL (60 seconds by default). The
check-then-refresh runs under the context's lock, so concurrent readers
trigger a single fetch.

GitHub Rate Limit Resources:
    - core: 5000/hour (authenticated), 60/hour (anonymous)
    - search: 30/minute (authenticated), 10/minute (anonymous)

Example:
    >>> tracker = RateLimitTracker(http, context)
    >>> tracker.core_remaining()
    4987
    >>> tracker.core_percent_used()
    0

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ghrest.exceptions import GitHubError
from ghrest.models import RateBucket, RateLimitSnapshot
from ghrest.results import Failure, classify_status

if TYPE_CHECKING:
    from ghrest.context import ClientContext
    from ghrest.utils.http import HTTPClient

logger = logging.getLogger(__name__)

RATE_LIMIT_PATH = "/rate_limit"

# Anonymous core quota is 60/hour; anything under this ceiling is anonymous.
ANONYMOUS_CORE_CEILING = 100
AUTHENTICATED_CORE_LIMIT = 5000


class RateLimitTracker:
    """Cached view of the caller's API quota.

    Attributes:
        ttl: Seconds a snapshot stays fresh.

    """

    __slots__ = ("_context", "_transport", "ttl")

    def __init__(
        self,
        transport: HTTPClient,
        context: ClientContext,
        ttl: float = 60,
    ) -> None:
        self._transport = transport
        self._context = context
        self.ttl = ttl

    def get_snapshot(self) -> RateLimitSnapshot:
        """Return a snapshot no older than the TTL.

        Returns:
            The cached snapshot when fresh, otherwise a newly fetched one.

        Raises:
            GitHubError: If the refresh fails; the stale snapshot is kept.

        """
        with self._context.rate_limit_lock:
            snapshot = self._context.rate_limit_snapshot
            now = self._context.clock()
            if snapshot is not None and now - snapshot.fetched_at <= self.ttl:
                return snapshot

            snapshot = self._fetch(now)
            self._context.store_rate_limit_snapshot(snapshot)
            return snapshot

    def _fetch(self, now: float) -> RateLimitSnapshot:
        self._context.increment_query_count()
        logger.debug("Refreshing rate limit snapshot")
        try:
            response = self._transport.request("GET", RATE_LIMIT_PATH)
        except GitHubError:
            logger.warning("Rate limit refresh failed")
            raise

        if response.status_code != 200 or not isinstance(response.data, dict):
            message = "Could not read rate limit"
            if isinstance(response.data, dict) and response.data.get("message"):
                message = str(response.data["message"])
            raise Failure(
                category=classify_status(response.status_code, response.headers),
                message=message,
                status_code=response.status_code,
                body=response.data,
                headers=response.headers,
            ).to_exception()

        try:
            return RateLimitSnapshot.from_payload(response.data, fetched_at=now)
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubError(
                f"Malformed rate limit response: {e}", response_data=response.data
            ) from e

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read refetches."""
        self._context.clear_rate_limit_snapshot()

    # =========================================================================
    # Accessors
    # =========================================================================

    def bucket(self, resource: str = "core") -> RateBucket:
        """Return the quota bucket for a resource class.

        Raises:
            KeyError: If the service reported no such resource.

        """
        snapshot = self.get_snapshot()
        if resource == "core":
            return snapshot.core
        if resource == "search":
            return snapshot.search
        return snapshot.resources[resource]

    def core_limit(self) -> int:
        return self.bucket("core").limit

    def core_remaining(self) -> int:
        return self.bucket("core").remaining

    def core_percent_used(self) -> int:
        """Integer percent of the core quota consumed."""
        return self.bucket("core").percent_used

    def core_seconds_until_reset(self) -> float:
        """Seconds until the core window resets; negative once it has passed."""
        return self.bucket("core").reset - self._context.clock()

    def search_limit(self) -> int:
        return self.bucket("search").limit

    def search_remaining(self) -> int:
        return self.bucket("search").remaining

    def search_percent_used(self) -> int:
        return self.bucket("search").percent_used

    def search_seconds_until_reset(self) -> float:
        return self.bucket("search").reset - self._context.clock()

    def is_anonymous_quota(self) -> bool:
        """Check whether the core quota is the anonymous one."""
        return self.core_limit() < ANONYMOUS_CORE_CEILING

    def is_authenticated_quota(self) -> bool:
        """Check whether the core quota is the authenticated ceiling."""
        return self.core_limit() == AUTHENTICATED_CORE_LIMIT

    def has_capacity(self, resource: str = "core") -> bool:
        """Check whether a request against ``resource`` may proceed.

        True when requests remain, or when the window has already reset.

        """
        bucket = self.bucket(resource)
        return bucket.remaining > 0 or bucket.reset <= self._context.clock()

    def __repr__(self) -> str:
        return f"RateLimitTracker(ttl={self.ttl})"
