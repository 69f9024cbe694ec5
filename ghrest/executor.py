"""Single-resource request execution.

The executor turns one request descriptor into exactly one HTTP call and a
``Success`` or ``Failure`` value. Validation happens before any I/O:

- the verb must be one of GET, POST, PUT, PATCH, DELETE
- the current identity must hold every required scope

Each verb has a default expected status (GET/PUT/PATCH 200, POST 201,
DELETE 204). The executor never retries; wrap calls with
``ghrest.utils.retry`` if that is wanted.

Example:
    >>> result = executor.execute("DELETE", "/repos/octocat/hello-world/labels/bug")
    >>> result.ok, result.status_code
    (True, 204)

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ghrest.auth.identity import Anonymous, BasicCredentialed
from ghrest.exceptions import (
    GitHubError,
    InsufficientScopeError,
    TransportError,
    UnsupportedVerbError,
)
from ghrest.results import Failure, FailureCategory, Result, Success, classify_status

if TYPE_CHECKING:
    from ghrest.auth.credentials import CredentialStore
    from ghrest.context import ClientContext
    from ghrest.utils.http import HTTPClient, HTTPResponse
    from ghrest.utils.rate_limiter import RateLimitTracker

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_STATUS: dict[str, int] = {
    "GET": 200,
    "POST": 201,
    "PUT": 200,
    "PATCH": 200,
    "DELETE": 204,
}


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to dispatch one request.

    Attributes:
        verb: Upper-case HTTP verb.
        url: Path or absolute URL.
        json_data: JSON body, if any.
        expected_statuses: Statuses that count as success.
        required_scopes: Scopes the identity must hold.
        headers: Extra request headers.

    """

    verb: str
    url: str
    json_data: Any = None
    expected_statuses: frozenset[int] = frozenset()
    required_scopes: frozenset[str] = frozenset()
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        verb: str,
        url: str,
        *,
        json_data: Any = None,
        expected_statuses: int | Iterable[int] | None = None,
        required_scopes: Iterable[str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        """Normalize caller input into a descriptor.

        Raises:
            UnsupportedVerbError: If the verb is not dispatchable.

        """
        normalized = (verb or "").strip().upper()
        if normalized not in DEFAULT_EXPECTED_STATUS:
            raise UnsupportedVerbError(verb)

        if expected_statuses is None:
            statuses = frozenset({DEFAULT_EXPECTED_STATUS[normalized]})
        elif isinstance(expected_statuses, int):
            statuses = frozenset({expected_statuses})
        else:
            statuses = frozenset(expected_statuses)

        return cls(
            verb=normalized,
            url=url,
            json_data=json_data,
            expected_statuses=statuses,
            required_scopes=frozenset(required_scopes or ()),
            headers=dict(headers or {}),
        )


class SingleResourceExecutor:
    """Dispatches single requests and classifies their outcomes.

    Attributes:
        gate: Refuse dispatch when the cached quota says none remains.

    """

    __slots__ = ("_context", "_credentials", "_rate_limits", "_transport", "gate")

    def __init__(
        self,
        transport: HTTPClient,
        credentials: CredentialStore,
        context: ClientContext,
        rate_limits: RateLimitTracker | None = None,
        gate: bool = False,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._context = context
        self._rate_limits = rate_limits
        self.gate = gate

    def execute(
        self,
        verb: str,
        url: str,
        *,
        json_data: Any = None,
        expected_statuses: int | Iterable[int] | None = None,
        required_scopes: Iterable[str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result:
        """Perform one request.

        Args:
            verb: HTTP verb, any case.
            url: Path relative to the base URL, or an absolute URL.
            json_data: JSON body.
            expected_statuses: Status or statuses that count as success;
                defaults to the verb's usual status.
            required_scopes: Scopes the current token must hold.
            headers: Extra request headers. An explicit Authorization
                header overrides the current identity for this call.

        Returns:
            Success with the decoded payload, or Failure with a category.

        Raises:
            UnsupportedVerbError: If the verb is not dispatchable.
            InsufficientScopeError: If the identity lacks a required scope.

        """
        descriptor = RequestDescriptor.build(
            verb,
            url,
            json_data=json_data,
            expected_statuses=expected_statuses,
            required_scopes=required_scopes,
            headers=headers,
        )
        return self.dispatch(descriptor)

    def dispatch(self, descriptor: RequestDescriptor) -> Result:
        """Perform one request described by a prepared descriptor."""
        self._check_scopes(descriptor.required_scopes)

        if self.gate and self._rate_limits is not None:
            gated = self._check_capacity(descriptor.url)
            if gated is not None:
                return gated

        self._context.increment_query_count()
        try:
            response = self._transport.request(
                descriptor.verb,
                descriptor.url,
                headers=descriptor.headers,
                json_data=descriptor.json_data,
            )
        except TransportError as e:
            logger.warning("%s %s failed: %s", descriptor.verb, descriptor.url, e)
            return Failure(
                category=FailureCategory.TRANSPORT_ERROR,
                message=str(e),
                error=e.original_error or e,
            )

        return self._classify(descriptor, response)

    def get(self, url: str, **kwargs: Any) -> Result:
        return self.execute("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Result:
        return self.execute("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Result:
        return self.execute("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Result:
        return self.execute("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Result:
        return self.execute("DELETE", url, **kwargs)

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_scopes(self, required: frozenset[str]) -> None:
        """Raise if the identity cannot hold ``required``.

        Anonymous callers hold no scopes. Basic credentials act as the
        account itself, and a token with unobserved scopes is left for the
        service to judge.

        """
        if not required:
            return
        identity = self._credentials.identity
        if isinstance(identity, BasicCredentialed):
            return
        if isinstance(identity, Anonymous):
            raise InsufficientScopeError(required, ())
        if identity.scopes is None:
            return
        granted = {scope.lower() for scope in identity.scopes}
        if not {scope.lower() for scope in required} <= granted:
            raise InsufficientScopeError(required, identity.scopes)

    def _check_capacity(self, url: str) -> Failure | None:
        assert self._rate_limits is not None
        resource = "search" if "/search/" in url else "core"
        try:
            if self._rate_limits.has_capacity(resource):
                return None
        except GitHubError as e:
            logger.warning("Quota check for %s failed, sending ungated: %s", url, e)
            return None
        logger.warning("Refusing %s: %s quota exhausted", url, resource)
        return Failure(
            category=FailureCategory.RATE_LIMITED,
            message=f"{resource} rate limit exhausted",
        )

    def _classify(self, descriptor: RequestDescriptor, response: HTTPResponse) -> Result:
        if response.rate_limit_remaining == 0:
            logger.warning(
                "Rate limit exhausted (limit %s), resets at %s",
                response.rate_limit_limit,
                response.rate_limit_reset,
            )

        if response.status_code in descriptor.expected_statuses:
            return Success(
                payload=response.data,
                status_code=response.status_code,
                headers=response.headers,
            )

        category = classify_status(response.status_code, response.headers)
        message = _error_message(response)
        logger.debug(
            "%s %s -> %d (%s)",
            descriptor.verb,
            descriptor.url,
            response.status_code,
            category.value,
        )
        return Failure(
            category=category,
            message=message,
            status_code=response.status_code,
            body=response.data if response.data is not None else response.text or None,
            headers=response.headers,
        )


def _error_message(response: HTTPResponse) -> str:
    if isinstance(response.data, dict) and response.data.get("message"):
        return str(response.data["message"])
    return f"HTTP {response.status_code}"
