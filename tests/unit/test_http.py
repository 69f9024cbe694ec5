"""Unit tests for the HTTP transport."""

from __future__ import annotations

import logging

import httpx
import pytest
import respx
from ghrest.exceptions import TransportError
from ghrest.executor import SingleResourceExecutor
from ghrest.utils.http import HTTPClient, HTTPResponse


class TestHTTPResponse:
    """Tests for response header accessors."""

    def test_rate_limit_headers(self):
        response = HTTPResponse(
            None,
            200,
            {
                "X-RateLimit-Limit": "5000",
                "X-RateLimit-Remaining": "4999",
                "X-RateLimit-Reset": "1372700873",
            },
        )

        assert response.rate_limit_limit == 5000
        assert response.rate_limit_remaining == 4999
        assert response.rate_limit_reset == 1372700873

    @pytest.mark.parametrize("value", ["", "soon"])
    def test_missing_or_garbled_headers(self, value: str):
        response = HTTPResponse(None, 200, {"X-RateLimit-Remaining": value})

        assert response.rate_limit_remaining is None
        assert response.rate_limit_limit is None


class TestHTTPClient:
    """Tests for request sending and body decoding."""

    def test_resolve_url(self, http: HTTPClient):
        assert http.resolve_url("/user") == "https://api.github.com/user"
        assert http.resolve_url("https://example.com/x") == "https://example.com/x"

    def test_text_body(self, http: HTTPClient, api: respx.MockRouter):
        api.get("/zen").mock(return_value=httpx.Response(200, text="Keep it simple."))

        response = http.request("GET", "/zen")

        assert response.data is None
        assert response.text == "Keep it simple."

    def test_empty_204(self, http: HTTPClient, api: respx.MockRouter):
        api.delete("/thing").mock(return_value=httpx.Response(204))

        assert http.request("DELETE", "/thing").data is None

    def test_connect_error_converted(self, http: HTTPClient, api: respx.MockRouter):
        api.get("/user").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TransportError):
            http.request("GET", "/user")


class TestQuotaWarning:
    """Tests for the exhausted-quota log line."""

    def test_exhausted_quota_logged(
        self,
        executor: SingleResourceExecutor,
        api: respx.MockRouter,
        caplog: pytest.LogCaptureFixture,
    ):
        api.get("/user").mock(
            return_value=httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={
                    "X-RateLimit-Limit": "60",
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": "1372700873",
                },
            )
        )

        with caplog.at_level(logging.WARNING, logger="ghrest.executor"):
            executor.get("/user")

        assert "Rate limit exhausted (limit 60), resets at 1372700873" in caplog.text
