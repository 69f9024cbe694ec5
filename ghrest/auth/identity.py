"""Caller identity and the transitions between identities.

An identity is exactly one of three variants:

    Anonymous           - no credentials, the low anonymous quota
    BasicCredentialed   - a username and password
    TokenAuthenticated  - a token, with the username and scopes if known

``IdentityStateMachine`` drives the forward-only transitions. Login probes
the service with basic credentials and, by default, trades them for a
token so the password is never retained.

Example:
    >>> machine.login("octocat", "s3cret")
    TokenAuthenticated(token='***', username='octocat', scopes=...)

"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from ghrest.auth.authorizations import authentication_error
from ghrest.exceptions import (
    AuthenticationFailedError,
    IdentityTransitionError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotAuthenticatedError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ghrest.auth.authorizations import AuthorizationService
    from ghrest.auth.credentials import CredentialStore
    from ghrest.executor import SingleResourceExecutor
    from ghrest.utils.rate_limiter import RateLimitTracker

logger = logging.getLogger(__name__)


class IdentityState(str, Enum):
    """Which identity variant is active."""

    ANONYMOUS = "anonymous"
    BASIC = "basic"
    TOKEN = "token"


# =============================================================================
# Identity Variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No credentials."""

    @property
    def state(self) -> IdentityState:
        return IdentityState.ANONYMOUS

    @property
    def has_credentials(self) -> bool:
        return False

    def authorization_header(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class BasicCredentialed:
    """A username and password, both non-empty."""

    username: str
    password: str

    def __post_init__(self) -> None:
        if not self.username or not self.password:
            raise InvalidCredentialsError()

    @property
    def state(self) -> IdentityState:
        return IdentityState.BASIC

    @property
    def has_credentials(self) -> bool:
        return True

    def authorization_header(self) -> str:
        """Return ``Basic <base64(username:password)>``."""
        raw = f"{self.username}:{self.password}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")

    def __repr__(self) -> str:
        return f"BasicCredentialed(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class TokenAuthenticated:
    """A non-empty token, with the owning username and scopes when known.

    ``scopes`` is None when the granted scopes have not been observed.

    """

    token: str
    username: str | None = None
    scopes: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if not self.token or not self.token.strip():
            raise InvalidTokenError()

    @property
    def state(self) -> IdentityState:
        return IdentityState.TOKEN

    @property
    def has_credentials(self) -> bool:
        return True

    def authorization_header(self) -> str:
        """Return ``token <token>``."""
        return f"token {self.token}"

    def __repr__(self) -> str:
        scopes = sorted(self.scopes) if self.scopes is not None else None
        return f"TokenAuthenticated(token='***', username={self.username!r}, scopes={scopes!r})"


Identity = Union[Anonymous, BasicCredentialed, TokenAuthenticated]


def parse_scopes_header(value: str | None) -> frozenset[str] | None:
    """Parse an ``X-OAuth-Scopes`` header into a scope set.

    Returns:
        The scopes, or None when the header is absent.

    """
    if value is None:
        return None
    return frozenset(part.strip() for part in value.split(",") if part.strip())


# =============================================================================
# State Machine
# =============================================================================


class IdentityStateMachine:
    """Drives login and token adoption for one credential store.

    Every promotion drops the cached rate-limit snapshot, since the quota
    depends on who is asking.

    """

    __slots__ = ("_authorizations", "_credentials", "_executor", "_persist", "_rate_limits")

    def __init__(
        self,
        credentials: CredentialStore,
        executor: SingleResourceExecutor,
        authorizations: AuthorizationService,
        rate_limits: RateLimitTracker | None = None,
        *,
        persist_tokens: bool = True,
    ) -> None:
        self._credentials = credentials
        self._executor = executor
        self._authorizations = authorizations
        self._rate_limits = rate_limits
        self._persist = persist_tokens

    @property
    def identity(self) -> Identity:
        return self._credentials.identity

    @property
    def state(self) -> IdentityState:
        return self._credentials.identity.state

    def login(
        self,
        username: str,
        password: str,
        auto_create_token: bool = True,
        otp: str | None = None,
    ) -> Identity:
        """Log in with a username and password.

        The credentials are probed with ``GET /user``. On success the
        identity becomes token-authenticated (minting a token) or, with
        ``auto_create_token=False``, basic-credentialed. On failure the
        identity is unchanged and nothing is persisted.

        Args:
            username: Account login.
            password: Account password.
            auto_create_token: Trade the credentials for a token.
            otp: One-time password for accounts with two-factor auth.

        Returns:
            The new identity.

        Raises:
            InvalidCredentialsError: If either value is empty.
            IdentityTransitionError: If a token is already held.
            TwoFactorRequiredError: If the service demands a one-time password.
            AuthenticationFailedError: If the service rejects the credentials.

        """
        basic = BasicCredentialed(username, password)
        if self._credentials.token is not None:
            raise IdentityTransitionError("Already authenticated with a token")

        headers = {"Authorization": basic.authorization_header()}
        if otp:
            headers["X-GitHub-OTP"] = otp

        logger.info("Logging in as %s", username)
        result = self._executor.get("/user", headers=headers)
        if not result.ok:
            raise authentication_error(result, f"Login failed for {username}")

        payload = result.payload if isinstance(result.payload, dict) else {}
        login_name = payload.get("login") or username

        if auto_create_token:
            self._authorizations.create_authorization(
                basic_auth=basic.authorization_header(),
                otp=otp,
                on_token=lambda token, scopes: self._credentials.set_token(
                    token, scopes, username=login_name, persist=self._persist
                ),
            )
        else:
            self._credentials.set_basic_credentials(username, password)
            self._credentials.set_username(login_name)

        self._invalidate_rate_limits()
        logger.info("Logged in as %s (%s)", login_name, self.state.value)
        return self._credentials.identity

    def adopt_token(
        self,
        token: str,
        scopes: Iterable[str] | None = None,
        persist: bool | None = None,
    ) -> Identity:
        """Adopt an existing token without contacting the service.

        Args:
            token: The token string; whitespace is trimmed.
            scopes: Scopes the token is known to carry.
            persist: Save the token; defaults to the machine's setting.

        Returns:
            The new identity.

        Raises:
            InvalidTokenError: If the token is empty after trimming.

        """
        self._credentials.set_token(
            token, scopes, persist=self._persist if persist is None else persist
        )
        self._invalidate_rate_limits()
        return self._credentials.identity

    def verify_token(self) -> str:
        """Confirm the held token and learn its username and scopes.

        Returns:
            The login of the token's owner.

        Raises:
            NotAuthenticatedError: If no token is held.
            AuthenticationFailedError: If the service rejects the token.

        """
        if self._credentials.token is None:
            raise NotAuthenticatedError("No token to verify")

        result = self._executor.get("/user")
        if not result.ok:
            raise AuthenticationFailedError("Token was rejected", result)

        payload = result.payload if isinstance(result.payload, dict) else {}
        login_name = payload.get("login")
        if login_name:
            self._credentials.set_username(login_name)
        scopes = parse_scopes_header(result.headers.get("X-OAuth-Scopes"))
        if scopes is not None:
            self._credentials.update_scopes(scopes)
        return login_name or ""

    def _invalidate_rate_limits(self) -> None:
        if self._rate_limits is not None:
            self._rate_limits.invalidate()

    def __repr__(self) -> str:
        return f"IdentityStateMachine(state={self.state.value})"
