"""Credential storage and Authorization header derivation.

The credential store owns the raw username, password, token and scope set
and derives the current identity from them. Identity only moves forward:
anonymous, then basic credentials, then a token. Once a token is held, the
password is discarded and basic credentials can no longer be set.

Example:
    >>> store = CredentialStore()
    >>> store.set_token("  ghp_xxx\\n", persist=False)
    >>> store.authorization_header_value()
    'token ghp_xxx'

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from ghrest.auth.identity import (
    Anonymous,
    BasicCredentialed,
    Identity,
    IdentityState,
    TokenAuthenticated,
)
from ghrest.auth.token_store import TokenStore
from ghrest.exceptions import (
    IdentityTransitionError,
    InvalidCredentialsError,
    InvalidTokenError,
)

logger = logging.getLogger(__name__)


class CredentialStore:
    """Holds the caller's credentials and derives the identity from them.

    Attributes:
        token_store: Where adopted tokens are persisted, if anywhere.

    """

    __slots__ = ("_lock", "_password", "_scopes", "_token", "_username", "token_store")

    def __init__(self, token_store: TokenStore | None = None) -> None:
        self.token_store = token_store
        self._lock = threading.RLock()
        self._username: str | None = None
        self._password: str | None = None
        self._token: str | None = None
        self._scopes: frozenset[str] | None = None

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def password(self) -> str | None:
        return self._password

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def scopes(self) -> frozenset[str] | None:
        """Scopes granted to the token, or None when unknown."""
        return self._scopes

    @property
    def identity(self) -> Identity:
        """The current identity variant, derived from the stored credentials."""
        with self._lock:
            if self._token is not None:
                return TokenAuthenticated(self._token, self._username, self._scopes)
            if self._username is not None and self._password is not None:
                return BasicCredentialed(self._username, self._password)
            return Anonymous()

    @property
    def state(self) -> IdentityState:
        return self.identity.state

    # =========================================================================
    # Transitions
    # =========================================================================

    def set_basic_credentials(self, username: str, password: str) -> None:
        """Record a username and password.

        Args:
            username: Account login.
            password: Account password.

        Raises:
            InvalidCredentialsError: If either value is empty.
            IdentityTransitionError: If a token is already held.

        """
        if not username or not password:
            raise InvalidCredentialsError()
        with self._lock:
            if self._token is not None:
                raise IdentityTransitionError(
                    "Cannot fall back to basic credentials while a token is held"
                )
            self._username = username
            self._password = password
        logger.debug("Stored basic credentials for %s", username)

    def set_token(
        self,
        token: str,
        scopes: Iterable[str] | None = None,
        *,
        username: str | None = None,
        persist: bool = True,
    ) -> str:
        """Adopt a token, promoting the identity to token-authenticated.

        Surrounding whitespace is trimmed. Any stored password is discarded.
        A different token starts with unknown scopes unless ``scopes`` is given.
        When ``persist`` is set and a token store is configured, the token
        is saved; a save failure is logged and does not undo the adoption.

        Args:
            token: The token string.
            scopes: Scopes the token is known to carry, if any.
            username: Login the token belongs to, if known.
            persist: Save the token through the token store.

        Returns:
            The trimmed token.

        Raises:
            InvalidTokenError: If the token is empty after trimming.

        """
        trimmed = (token or "").strip()
        if not trimmed:
            raise InvalidTokenError()

        with self._lock:
            # Scopes belong to a token; a different token starts unobserved
            if scopes is not None:
                self._scopes = frozenset(s.strip() for s in scopes if s.strip())
            elif trimmed != self._token:
                self._scopes = None
            self._token = trimmed
            self._password = None
            if username is not None:
                self._username = username
        logger.debug("Adopted token (scopes=%s)", sorted(self._scopes) if self._scopes else None)

        if persist and self.token_store is not None:
            try:
                self.token_store.save(trimmed)
            except OSError as e:
                logger.warning("Could not persist token: %s", e)
        return trimmed

    def update_scopes(self, scopes: Iterable[str]) -> None:
        """Replace the known scope set of the held token."""
        with self._lock:
            if self._token is None:
                raise IdentityTransitionError("No token held; scopes belong to a token")
            self._scopes = frozenset(s.strip() for s in scopes if s.strip())

    def set_username(self, username: str) -> None:
        with self._lock:
            self._username = username

    def clear_password(self) -> None:
        """Discard the password, keeping the username.

        Raises:
            IdentityTransitionError: If no token is held, since dropping the
                password would fall back to anonymous.

        """
        with self._lock:
            if self._token is None and self._password is not None:
                raise IdentityTransitionError(
                    "Cannot discard the password before a token is held"
                )
            self._password = None

    def load_from_store(self, store: TokenStore | None = None) -> bool:
        """Adopt the token found in a token store without re-saving it.

        Args:
            store: Store to read; defaults to ``token_store``.

        Returns:
            True if a token was found and adopted.

        """
        store = store if store is not None else self.token_store
        if store is None:
            return False
        token = store.load()
        if not token:
            return False
        self.set_token(token, persist=False)
        return True

    # =========================================================================
    # Header Derivation
    # =========================================================================

    def authorization_header_value(self) -> str | None:
        """Return the Authorization header for the current identity.

        Returns:
            ``token <token>`` when a token is held, ``Basic <b64>`` when only
            basic credentials are held, otherwise None.

        """
        return self.identity.authorization_header()

    def __repr__(self) -> str:
        return f"CredentialStore(state={self.state.value}, username={self._username!r})"
