"""Exception hierarchy for the ghrest client.

Two kinds of errors live here. Validation errors are raised before any
network activity and leave no side effects. Request errors mirror a
``Failure`` value returned by the executor and are raised only when a
caller asks for it (``Failure.unwrap()`` or the endpoint catalog).

Exception Hierarchy:
    GitHubError (base)
    ├── ConfigurationError         - Invalid client configuration
    ├── InvalidCredentialsError    - Empty username or password
    ├── InvalidTokenError          - Empty or whitespace-only token
    ├── InvalidScopeError          - Scope outside the fixed scope list
    ├── IdentityTransitionError    - Identity may not move backwards
    ├── NotAuthenticatedError      - Authenticated surface used anonymously
    ├── AuthenticationFailedError  - Login or authorization rejected
    │   └── TwoFactorRequiredError - Service demands a one-time password
    ├── InsufficientScopeError     - Token lacks a required scope
    ├── UnsupportedVerbError       - HTTP verb outside GET/POST/PUT/PATCH/DELETE
    ├── RequestFailedError         - HTTP response outside the expected set
    │   ├── NotFoundError          - 404
    │   ├── UnauthorizedError      - 401/403
    │   ├── RateLimitError         - 429, or 403 with quota exhausted
    │   ├── ClientError            - other 4xx
    │   ├── ServerError            - 5xx
    │   └── UnexpectedStatusError  - non-error status not in the expected set
    └── TransportError             - Connection failures, timeouts

Example:
    >>> try:
    ...     label = client.labels.get("octocat", "hello-world", "bug")
    ... except NotFoundError as e:
    ...     print(f"No such label: {e}")
    ... except RateLimitError as e:
    ...     print(f"Rate limited. Reset at: {e.reset_at}")

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ghrest.results import Failure


class GitHubError(Exception):
    """Base exception for all ghrest errors.

    Attributes:
        message: Human-readable error description.
        response_data: Raw response data from the API, if available.

    """

    def __init__(
        self,
        message: str,
        response_data: Any = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.

        """
        self.message = message
        self.response_data = response_data if response_data is not None else {}
        super().__init__(message)

    def __repr__(self) -> str:
        """Return a detailed representation for debugging."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class ConfigurationError(GitHubError):
    """Raised when client configuration is invalid.

    Example:
        >>> ClientConfig(base_url="not-a-url")
        ConfigurationError: Invalid base_url: not-a-url

    """


# =============================================================================
# Validation Errors (raised before any I/O)
# =============================================================================


class InvalidCredentialsError(GitHubError):
    """Raised when a username or password is empty."""

    def __init__(self, message: str = "Username and password must both be non-empty") -> None:
        super().__init__(message)


class InvalidTokenError(GitHubError):
    """Raised when a token is empty after trimming whitespace."""

    def __init__(self, message: str = "Token must be a non-empty string") -> None:
        super().__init__(message)


class InvalidScopeError(GitHubError):
    """Raised when a requested scope is not a known GitHub scope.

    Attributes:
        scopes: The offending scope strings.

    """

    def __init__(self, scopes: Iterable[str]) -> None:
        self.scopes = list(scopes)
        super().__init__(f"Invalid scope(s): {', '.join(self.scopes)}")


class IdentityTransitionError(GitHubError):
    """Raised when an identity change would move backwards.

    Identity only ever moves Anonymous -> BasicCredentialed -> TokenAuthenticated
    (or straight from Anonymous to TokenAuthenticated).

    """


class NotAuthenticatedError(GitHubError):
    """Raised when an authenticated-only operation is used anonymously."""

    def __init__(self, message: str = "This operation requires credentials or a token") -> None:
        super().__init__(message)


class UnsupportedVerbError(GitHubError):
    """Raised for an HTTP verb the executor does not dispatch.

    Attributes:
        verb: The rejected verb as given by the caller.

    """

    def __init__(self, verb: str) -> None:
        self.verb = verb
        super().__init__(f"Unsupported HTTP verb: {verb!r}")


class InsufficientScopeError(GitHubError):
    """Raised when the current token lacks scopes an operation requires.

    Attributes:
        required_scopes: Scopes the operation needs.
        granted_scopes: Scopes the current identity holds.

    Example:
        >>> client.authenticated.repos.delete("octocat", "hello-world")
        InsufficientScopeError: Missing scope(s): delete_repo

    """

    def __init__(
        self,
        required_scopes: Iterable[str],
        granted_scopes: Iterable[str] = (),
    ) -> None:
        self.required_scopes = sorted(required_scopes)
        self.granted_scopes = sorted(granted_scopes)
        missing = sorted(
            set(s.lower() for s in self.required_scopes)
            - set(s.lower() for s in self.granted_scopes)
        )
        super().__init__(f"Missing scope(s): {', '.join(missing)}")


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationFailedError(GitHubError):
    """Raised when login or token creation is rejected by the service.

    The identity is left exactly as it was before the attempt.

    Attributes:
        failure: The ``Failure`` that caused the rejection, if any.

    """

    def __init__(
        self,
        message: str = "Authentication failed",
        failure: Failure | None = None,
    ) -> None:
        self.failure = failure
        super().__init__(message, failure.body if failure is not None else None)


class TwoFactorRequiredError(AuthenticationFailedError):
    """Raised when the service answers with ``X-GitHub-OTP: required``.

    Retry the login with ``otp=`` set to the one-time password.

    """

    def __init__(
        self,
        message: str = "Two-factor authentication code required",
        failure: Failure | None = None,
    ) -> None:
        super().__init__(message, failure)


# =============================================================================
# Request Errors (mirror Failure categories)
# =============================================================================


class RequestFailedError(GitHubError):
    """Raised when an HTTP response falls outside the expected statuses.

    Attributes:
        status_code: HTTP status code of the response.
        headers: Response headers.

    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers = dict(headers or {})
        super().__init__(message, response_data)


class NotFoundError(RequestFailedError):
    """Raised for HTTP 404.

    GitHub also answers 404 for private resources the caller cannot see.

    """


class UnauthorizedError(RequestFailedError):
    """Raised for HTTP 401/403 that is not a rate-limit response."""


class RateLimitError(RequestFailedError):
    """Raised when the API quota is exhausted (429, or 403 with remaining 0).

    Attributes:
        limit: Maximum requests allowed in the window.
        remaining: Requests remaining (0 when this is raised).
        reset_at: When the quota window resets.
        retry_after: Seconds the service asked the caller to wait.

    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        status_code: int | None = 403,
        response_data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, status_code, response_data, headers)
        lowered = {k.lower(): v for k, v in self.headers.items()}
        self.limit = _int_or_none(lowered.get("x-ratelimit-limit"))
        self.remaining = _int_or_none(lowered.get("x-ratelimit-remaining")) or 0
        reset = _int_or_none(lowered.get("x-ratelimit-reset"))
        self.reset_at = datetime.fromtimestamp(reset) if reset else None
        self.retry_after = _int_or_none(lowered.get("retry-after"))

    def __str__(self) -> str:
        """Return a detailed error message with reset time."""
        base = self.message
        if self.reset_at:
            base += f" (resets at {self.reset_at.isoformat()})"
        if self.retry_after:
            base += f" (retry after {self.retry_after}s)"
        return base


class ClientError(RequestFailedError):
    """Raised for any other HTTP 4xx."""


class ServerError(RequestFailedError):
    """Raised for HTTP 5xx."""


class UnexpectedStatusError(RequestFailedError):
    """Raised when a non-error status is outside the expected set."""


class TransportError(GitHubError):
    """Raised when a request could not complete at the network level.

    This includes connection failures, DNS resolution errors,
    timeouts, and TLS errors.

    Attributes:
        original_error: The underlying exception.
        is_retryable: Whether the error is likely transient.

    """

    def __init__(
        self,
        message: str = "Transport error",
        original_error: BaseException | None = None,
    ) -> None:
        self.original_error = original_error
        self.is_retryable = self._classify_retryable(original_error)
        super().__init__(message)

    @staticmethod
    def _classify_retryable(error: BaseException | None) -> bool:
        """Determine if the transport error is likely transient.

        Args:
            error: The original exception.

        Returns:
            True if the error is likely transient and retryable.

        """
        if error is None:
            return True

        error_msg = str(error).lower()

        # DNS failures are a configuration problem
        dns_indicators = [
            "failed to resolve",
            "nodename nor servname",
            "name or service not known",
            "getaddrinfo failed",
        ]
        if any(indicator in error_msg for indicator in dns_indicators):
            return False

        transient_indicators = [
            "connection refused",
            "connection reset",
            "broken pipe",
            "timed out",
            "timeout",
        ]
        return any(indicator in error_msg for indicator in transient_indicators)


# =============================================================================
# Exception Factory
# =============================================================================


def exception_from_failure(failure: Failure) -> GitHubError:
    """Create the exception matching a ``Failure`` value.

    Args:
        failure: The failure returned by the executor or a fetch.

    Returns:
        The appropriate GitHubError subclass.

    """
    from ghrest.results import FailureCategory

    if failure.category is FailureCategory.TRANSPORT_ERROR:
        return TransportError(failure.message, original_error=failure.error)

    exception_map: dict[FailureCategory, type[RequestFailedError]] = {
        FailureCategory.NOT_FOUND: NotFoundError,
        FailureCategory.UNAUTHORIZED: UnauthorizedError,
        FailureCategory.RATE_LIMITED: RateLimitError,
        FailureCategory.CLIENT_ERROR: ClientError,
        FailureCategory.SERVER_ERROR: ServerError,
        FailureCategory.UNEXPECTED_STATUS: UnexpectedStatusError,
    }
    exc_type = exception_map[failure.category]
    return exc_type(
        failure.message,
        status_code=failure.status_code,
        response_data=failure.body,
        headers=failure.headers,
    )


def _int_or_none(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None
