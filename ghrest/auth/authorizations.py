"""Token minting through the GitHub Authorizations API.

``POST /authorizations`` exchanges basic credentials for a token. The
service answers ``X-GitHub-OTP: required; <method>`` when the account has
two-factor authentication enabled and no one-time password was sent.

API Reference: https://docs.github.com/en/rest/oauth-authorizations

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ghrest.exceptions import (
    AuthenticationFailedError,
    InvalidScopeError,
    TwoFactorRequiredError,
)
from ghrest.models import Authorization

if TYPE_CHECKING:
    from ghrest.executor import SingleResourceExecutor
    from ghrest.results import Failure, PageResult
    from ghrest.utils.pagination import PaginatedFetcher

logger = logging.getLogger(__name__)

VALID_SCOPES: tuple[str, ...] = (
    "user",
    "user:email",
    "user:follow",
    "public_repo",
    "repo",
    "repo_deployment",
    "repo:status",
    "delete_repo",
    "notifications",
    "gist",
    "read:repo_hook",
    "write:repo_hook",
    "admin:repo_hook",
    "admin:org_hook",
    "read:org",
    "write:org",
    "admin:org",
    "read:public_key",
    "write:public_key",
    "admin:public_key",
    "read:gpg_key",
    "write:gpg_key",
    "admin:gpg_key",
)

DEFAULT_SCOPES: tuple[str, ...] = ("user", "public_repo", "repo", "gist")

_VALID_SCOPES_LOWER = frozenset(scope.lower() for scope in VALID_SCOPES)


def is_valid_scope(scope: str) -> bool:
    """Check a scope against the fixed scope list, ignoring case.

    Example:
        >>> is_valid_scope("REPO")
        True
        >>> is_valid_scope("everything")
        False

    """
    return scope.lower() in _VALID_SCOPES_LOWER


def authentication_error(failure: Failure, message: str) -> AuthenticationFailedError:
    """Turn a rejected login or authorization into the matching exception."""
    otp_header = failure.headers.get("X-GitHub-OTP", "")
    if "required" in otp_header.lower():
        return TwoFactorRequiredError(failure=failure)
    return AuthenticationFailedError(f"{message}: {failure.message}", failure)


class AuthorizationService:
    """Creates, reads and revokes authorizations.

    Attributes:
        clock: Time source for the default note.

    """

    __slots__ = ("_executor", "_fetcher", "clock")

    def __init__(
        self,
        executor: SingleResourceExecutor,
        clock: Callable[[], float],
        fetcher: PaginatedFetcher | None = None,
    ) -> None:
        self._executor = executor
        self._fetcher = fetcher
        self.clock = clock

    def default_note(self) -> str:
        return f"ghrest token {int(self.clock())}"

    def create_authorization(
        self,
        scopes: Iterable[str] | None = None,
        note: str | None = None,
        *,
        basic_auth: str | None = None,
        otp: str | None = None,
        on_token: Callable[[str, list[str]], Any] | None = None,
    ) -> str:
        """Mint a token.

        Args:
            scopes: Scopes to request; defaults to user, public_repo, repo, gist.
            note: Label shown in the account's token list.
            basic_auth: Explicit Basic Authorization header value. Required
                unless the current identity already holds basic credentials.
            otp: One-time password for two-factor accounts.
            on_token: Called with the new token and its granted scopes
                before this method returns.

        Returns:
            The new token.

        Raises:
            InvalidScopeError: If any requested scope is unknown.
            TwoFactorRequiredError: If a one-time password is needed.
            AuthenticationFailedError: If the service rejects the request.

        """
        requested = list(scopes) if scopes is not None else list(DEFAULT_SCOPES)
        invalid = [scope for scope in requested if not is_valid_scope(scope)]
        if invalid:
            raise InvalidScopeError(invalid)

        headers: dict[str, str] = {}
        if basic_auth:
            headers["Authorization"] = basic_auth
        if otp:
            headers["X-GitHub-OTP"] = otp

        body = {"scopes": requested, "note": note or self.default_note()}
        result = self._executor.post("/authorizations", json_data=body, headers=headers)
        if not result.ok:
            raise authentication_error(result, "Could not create authorization")

        payload = result.payload if isinstance(result.payload, dict) else {}
        token = payload.get("token")
        if not token:
            raise AuthenticationFailedError("Authorization response carried no token")

        granted = list(payload.get("scopes") or requested)
        logger.info("Created authorization %s with scopes %s", payload.get("id"), granted)
        if on_token is not None:
            on_token(token, granted)
        return token

    def get_authorization(self, authorization_id: int) -> Authorization:
        """Fetch one authorization.

        Raises:
            NotFoundError: If the authorization does not exist.

        """
        result = self._executor.get(f"/authorizations/{authorization_id}")
        return Authorization.model_validate(result.unwrap())

    def list_authorizations(self, limit: int | None = None) -> PageResult[Authorization]:
        """List the account's authorizations across pages."""
        if self._fetcher is None:
            raise RuntimeError("AuthorizationService was built without a paginated fetcher")
        return self._fetcher.fetch_pages(
            "/authorizations",
            item_transform=Authorization.model_validate,
            page_limit=limit,
        )

    def delete_authorization(self, authorization_id: int) -> None:
        """Revoke an authorization.

        Raises:
            NotFoundError: If the authorization does not exist.

        """
        self._executor.delete(f"/authorizations/{authorization_id}").unwrap()
