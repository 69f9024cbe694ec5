"""ghrest - a GitHub REST API client for anonymous and logged-in callers.

The core is a small request engine: identity transitions, single-resource
requests returning Success/Failure values, a cached rate-limit tracker, and
Link-header pagination. Endpoint groups for labels, issues, repositories
and users are built on top of it.

Example:
    >>> from ghrest import GitHubClient
    >>> client = GitHubClient(token="ghp_xxx")
    >>> for label in client.labels.list("octocat", "hello-world"):
    ...     print(label.name)

"""

from ghrest.auth import (
    Anonymous,
    BasicCredentialed,
    FileTokenStore,
    IdentityState,
    MemoryTokenStore,
    TokenAuthenticated,
    is_valid_scope,
)
from ghrest.client import AuthenticatedAPI, GitHubClient
from ghrest.config import ClientConfig
from ghrest.context import ClientContext
from ghrest.exceptions import (
    AuthenticationFailedError,
    ClientError,
    ConfigurationError,
    GitHubError,
    IdentityTransitionError,
    InsufficientScopeError,
    InvalidCredentialsError,
    InvalidScopeError,
    InvalidTokenError,
    NotAuthenticatedError,
    NotFoundError,
    RateLimitError,
    RequestFailedError,
    ServerError,
    TransportError,
    TwoFactorRequiredError,
    UnauthorizedError,
    UnexpectedStatusError,
    UnsupportedVerbError,
)
from ghrest.results import Failure, FailureCategory, PageResult, Success

__version__ = "1.0.0"

__all__ = [
    "Anonymous",
    "AuthenticatedAPI",
    "AuthenticationFailedError",
    "BasicCredentialed",
    "ClientConfig",
    "ClientContext",
    "ClientError",
    "ConfigurationError",
    "Failure",
    "FailureCategory",
    "FileTokenStore",
    "GitHubClient",
    "GitHubError",
    "IdentityState",
    "IdentityTransitionError",
    "InsufficientScopeError",
    "InvalidCredentialsError",
    "InvalidScopeError",
    "InvalidTokenError",
    "MemoryTokenStore",
    "NotAuthenticatedError",
    "NotFoundError",
    "PageResult",
    "RateLimitError",
    "RequestFailedError",
    "ServerError",
    "Success",
    "TokenAuthenticated",
    "TransportError",
    "TwoFactorRequiredError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "UnsupportedVerbError",
    "is_valid_scope",
]
