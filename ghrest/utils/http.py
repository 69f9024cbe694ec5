"""HTTP transport for the GitHub API.

A thin wrapper around ``httpx.Client`` that handles:
- Base URL, Accept and User-Agent headers
- Injecting the current Authorization header on every request
- JSON decoding (204 and empty bodies decode to None)
- Converting httpx failures to ``TransportError``

The transport does not classify statuses or retry; that belongs to the
executor and to callers respectively.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from ghrest.exceptions import TransportError

if TYPE_CHECKING:
    from ghrest.auth.credentials import CredentialStore
    from ghrest.config import ClientConfig

logger = logging.getLogger(__name__)


class HTTPClient:
    """Low-level HTTP client for GitHub API requests.

    Note:
        This is an internal class. Use GitHubClient for the public API.

    """

    __slots__ = ("_client", "_config", "_credentials")

    # GitHub REST v3 media type
    ACCEPT_HEADER = "application/vnd.github.v3+json"

    def __init__(
        self,
        config: ClientConfig,
        credentials: CredentialStore,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: Client configuration.
            credentials: Source of the Authorization header.
            transport: Optional httpx transport (for tests and proxies).

        """
        self._config = config
        self._credentials = credentials
        self._client = self._create_client(transport)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def _create_client(self, transport: httpx.BaseTransport | None) -> httpx.Client:
        return httpx.Client(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._config.timeout),
            headers={
                "Accept": self.ACCEPT_HEADER,
                "User-Agent": self._config.user_agent,
            },
            event_hooks={"request": [self._apply_authorization]},
            follow_redirects=True,
            transport=transport,
        )

    def _apply_authorization(self, request: httpx.Request) -> None:
        """Attach the current identity's Authorization header.

        A header set explicitly on the request is left alone.

        """
        if "Authorization" in request.headers:
            return
        value = self._credentials.authorization_header_value()
        if value is not None:
            request.headers["Authorization"] = value

    def resolve_url(self, url: str) -> str:
        """Return an absolute URL, joining paths onto the base URL.

        Example:
            >>> http.resolve_url("/user")
            'https://api.github.com/user'

        """
        if url.startswith(("http://", "https://")):
            return url
        if not url.startswith("/"):
            url = "/" + url
        return self._config.base_url + url

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_data: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> HTTPResponse:
        """Send one request.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            url: Path relative to the base URL, or an absolute URL.
            headers: Extra request headers.
            json_data: JSON body for POST/PUT/PATCH requests.
            params: Query parameters.

        Returns:
            HTTPResponse for any status code.

        Raises:
            TransportError: If the request could not complete.

        """
        target = self.resolve_url(url)
        logger.debug("Request: %s %s", method, target)

        try:
            response = self._client.request(
                method,
                target,
                headers=dict(headers) if headers else None,
                json=json_data,
                params=dict(params) if params else None,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", original_error=e) from e
        except httpx.ConnectError as e:
            raise TransportError(f"Connection failed: {e}", original_error=e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", original_error=e) from e

        return self._process_response(response)

    def _process_response(self, response: httpx.Response) -> HTTPResponse:
        data: Any = None
        if response.status_code != 204 and response.content:
            try:
                data = response.json()
            except ValueError:
                data = None

        logger.debug(
            "Response: %d %s (remaining: %s)",
            response.status_code,
            response.reason_phrase,
            response.headers.get("X-RateLimit-Remaining", "N/A"),
        )

        return HTTPResponse(
            data=data,
            status_code=response.status_code,
            headers=response.headers,
            text=response.text if data is None else "",
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class HTTPResponse:
    """Container for HTTP response data and metadata.

    Attributes:
        data: Decoded JSON body, or None.
        status_code: HTTP status code.
        headers: Response headers (case-insensitive).
        text: Raw body text when it was not JSON.

    """

    __slots__ = ("data", "headers", "status_code", "text")

    def __init__(
        self,
        data: Any,
        status_code: int,
        headers: Mapping[str, str],
        text: str = "",
    ) -> None:
        self.data = data
        self.status_code = status_code
        self.headers = headers if isinstance(headers, httpx.Headers) else httpx.Headers(headers)
        self.text = text

    @property
    def rate_limit_remaining(self) -> int | None:
        """Requests left in the window, from X-RateLimit-Remaining."""
        return _header_int(self.headers, "X-RateLimit-Remaining")

    @property
    def rate_limit_limit(self) -> int | None:
        return _header_int(self.headers, "X-RateLimit-Limit")

    @property
    def rate_limit_reset(self) -> int | None:
        """Epoch seconds when the window resets."""
        return _header_int(self.headers, "X-RateLimit-Reset")

    def __repr__(self) -> str:
        return f"HTTPResponse(status={self.status_code}, data_type={type(self.data).__name__})"


def _header_int(headers: httpx.Headers, name: str) -> int | None:
    value = headers.get(name)
    try:
        return int(value) if value else None
    except ValueError:
        return None
