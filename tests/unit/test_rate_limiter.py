"""Unit tests for the rate limit tracker."""

from __future__ import annotations

import threading

import httpx
import pytest
import respx
from ghrest.context import ClientContext
from ghrest.exceptions import GitHubError, ServerError, TransportError
from ghrest.models import RateBucket, RateLimitSnapshot
from ghrest.utils.rate_limiter import RateLimitTracker


class TestRateBucket:
    """Tests for the per-resource quota model."""

    def test_percent_used(self):
        """Percent used is integer division of consumed by limit."""
        assert RateBucket(limit=60, remaining=45, reset=0).percent_used == 25
        assert RateBucket(limit=5000, remaining=4999, reset=0).percent_used == 0
        assert RateBucket(limit=3, remaining=1, reset=0).percent_used == 66

    def test_percent_used_zero_limit(self):
        assert RateBucket(limit=0, remaining=0, reset=0).percent_used == 100

    def test_snapshot_drops_legacy_rate(self, rate_limit_body):
        snapshot = RateLimitSnapshot.from_payload(rate_limit_body(), fetched_at=1.0)

        assert "rate" not in snapshot.resources
        assert snapshot.core.limit == 5000
        assert snapshot.search.limit == 30


class TestSnapshotCache:
    """Tests for the TTL cache around GET /rate_limit."""

    def test_single_fetch_within_ttl(
        self, tracker: RateLimitTracker, clock, api: respx.MockRouter, rate_limit_body
    ):
        """Reads within 60 seconds reuse the cached snapshot."""
        route = api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body())
        )

        tracker.core_limit()
        clock.advance(30)
        tracker.core_remaining()
        clock.advance(30)
        tracker.search_limit()

        assert route.call_count == 1

    def test_refetch_after_ttl(
        self, tracker: RateLimitTracker, clock, api: respx.MockRouter, rate_limit_body
    ):
        """A read 61 seconds later triggers a second fetch."""
        route = api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body())
        )

        tracker.core_limit()
        clock.advance(61)
        tracker.core_limit()

        assert route.call_count == 2

    def test_invalidate_forces_refetch(
        self, tracker: RateLimitTracker, api: respx.MockRouter, rate_limit_body
    ):
        route = api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body())
        )

        tracker.core_limit()
        tracker.invalidate()
        tracker.core_limit()

        assert route.call_count == 2

    def test_refresh_counts_as_query(
        self,
        tracker: RateLimitTracker,
        context: ClientContext,
        api: respx.MockRouter,
        rate_limit_body,
    ):
        api.get("/rate_limit").mock(return_value=httpx.Response(200, json=rate_limit_body()))

        tracker.get_snapshot()
        tracker.get_snapshot()

        assert context.query_count == 1

    def test_concurrent_readers_fetch_once(
        self, tracker: RateLimitTracker, api: respx.MockRouter, rate_limit_body
    ):
        route = api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body())
        )

        threads = [threading.Thread(target=tracker.core_remaining) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert route.call_count == 1

    def test_shared_context_shares_cache(
        self, http, context: ClientContext, api: respx.MockRouter, rate_limit_body
    ):
        """Two trackers on one context reuse one snapshot."""
        route = api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body())
        )

        RateLimitTracker(http, context).core_limit()
        RateLimitTracker(http, context).core_limit()

        assert route.call_count == 1

    def test_server_error_raises(self, tracker: RateLimitTracker, api: respx.MockRouter):
        api.get("/rate_limit").mock(return_value=httpx.Response(503, json={"message": "down"}))

        with pytest.raises(ServerError):
            tracker.get_snapshot()

    def test_transport_error_raises(self, tracker: RateLimitTracker, api: respx.MockRouter):
        api.get("/rate_limit").mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError):
            tracker.get_snapshot()

    def test_malformed_body_raises(
        self, tracker: RateLimitTracker, context: ClientContext, api: respx.MockRouter
    ):
        api.get("/rate_limit").mock(return_value=httpx.Response(200, json={"resources": {}}))

        with pytest.raises(GitHubError, match="Malformed rate limit response"):
            tracker.get_snapshot()

        assert context.rate_limit_snapshot is None


class TestAccessors:
    """Tests for quota accessors."""

    def test_core_values(
        self, tracker: RateLimitTracker, clock, api: respx.MockRouter, rate_limit_body
    ):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(
                200,
                json=rate_limit_body(
                    core_limit=60, core_remaining=45, core_reset=int(clock.now) + 120
                ),
            )
        )

        assert tracker.core_limit() == 60
        assert tracker.core_remaining() == 45
        assert tracker.core_percent_used() == 25
        assert tracker.core_seconds_until_reset() == 120

    def test_seconds_until_reset_may_be_negative(
        self, tracker: RateLimitTracker, clock, api: respx.MockRouter, rate_limit_body
    ):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(
                200, json=rate_limit_body(core_reset=int(clock.now) - 10)
            )
        )

        assert tracker.core_seconds_until_reset() == -10

    def test_search_values(self, tracker: RateLimitTracker, api: respx.MockRouter, rate_limit_body):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(
                200, json=rate_limit_body(search_limit=30, search_remaining=15)
            )
        )

        assert tracker.search_limit() == 30
        assert tracker.search_remaining() == 15
        assert tracker.search_percent_used() == 50

    @pytest.mark.parametrize(
        "limit,anonymous,authenticated",
        [(60, True, False), (5000, False, True), (15000, False, False)],
    )
    def test_quota_classification(
        self,
        tracker: RateLimitTracker,
        api: respx.MockRouter,
        rate_limit_body,
        limit,
        anonymous,
        authenticated,
    ):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(
                200, json=rate_limit_body(core_limit=limit, core_remaining=limit)
            )
        )

        assert tracker.is_anonymous_quota() is anonymous
        assert tracker.is_authenticated_quota() is authenticated

    def test_has_capacity(
        self, tracker: RateLimitTracker, clock, api: respx.MockRouter, rate_limit_body
    ):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(
                200,
                json=rate_limit_body(core_remaining=0, core_reset=int(clock.now) + 100),
            )
        )

        assert tracker.has_capacity("core") is False
        assert tracker.has_capacity("search") is True
