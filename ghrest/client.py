"""Main GitHub client class.

``GitHubClient`` wires the request core together (credentials, transport,
executor, rate-limit tracker, paginated fetcher, identity state machine)
and exposes the endpoint groups.

Startup picks an identity in this order:
    1. An explicit ``token`` (or ``GITHUB_TOKEN``)
    2. An explicit ``token_file``
    3. ``username`` and ``password``, traded for a token by default
    4. The default token file (``GITHUB_DEV_TOKEN`` or ``.github_token``), if present

Example:
    >>> from ghrest import GitHubClient
    >>>
    >>> # Anonymous (60 requests/hour)
    >>> client = GitHubClient()
    >>> labels = client.labels.list("octocat", "hello-world")
    >>>
    >>> # Authenticated (5000 requests/hour)
    >>> client = GitHubClient(token="ghp_xxx")
    >>> client.authenticated.labels.create("octocat", "hello-world", "triage", "#00ff00")

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from ghrest.auth.authorizations import AuthorizationService
from ghrest.auth.credentials import CredentialStore
from ghrest.auth.identity import Identity, IdentityState, IdentityStateMachine
from ghrest.auth.token_store import FileTokenStore, TokenStore
from ghrest.config import ClientConfig
from ghrest.context import ClientContext
from ghrest.endpoints.issues import IssuesEndpoint
from ghrest.endpoints.labels import AuthenticatedLabelsEndpoint, LabelsEndpoint
from ghrest.endpoints.repos import AuthenticatedReposEndpoint, ReposEndpoint
from ghrest.endpoints.users import AuthenticatedUsersEndpoint, UsersEndpoint
from ghrest.exceptions import InvalidTokenError, NotAuthenticatedError
from ghrest.executor import SingleResourceExecutor
from ghrest.utils.http import HTTPClient
from ghrest.utils.pagination import PaginatedFetcher
from ghrest.utils.rate_limiter import RateLimitTracker

if TYPE_CHECKING:
    import httpx

    from ghrest.results import PageResult, Result


class AuthenticatedAPI:
    """Endpoint groups that need credentials.

    Obtained through ``GitHubClient.authenticated``, which refuses to hand
    it out to an anonymous caller.

    Attributes:
        labels: Label reads and writes.
        repos: Repository reads plus the caller's own repositories.
        users: User reads plus the caller's own profile.
        issues: Issue reads.
        authorizations: Token minting and revocation.

    """

    __slots__ = ("authorizations", "issues", "labels", "repos", "users")

    def __init__(
        self,
        executor: SingleResourceExecutor,
        fetcher: PaginatedFetcher,
        config: ClientConfig,
        authorizations: AuthorizationService,
    ) -> None:
        self.labels = AuthenticatedLabelsEndpoint(executor, fetcher, config)
        self.repos = AuthenticatedReposEndpoint(executor, fetcher, config)
        self.users = AuthenticatedUsersEndpoint(executor, fetcher, config)
        self.issues = IssuesEndpoint(executor, fetcher, config)
        self.authorizations = authorizations


class GitHubClient:
    """GitHub REST client for anonymous or logged-in callers.

    Context Manager:
        >>> with GitHubClient(token="ghp_xxx") as client:
        ...     print(client.rate_limits.core_remaining())

    """

    __slots__ = (
        "_authenticated",
        "_authorizations",
        "_config",
        "_context",
        "_credentials",
        "_executor",
        "_fetcher",
        "_http",
        "_identity",
        "_issues",
        "_labels",
        "_log",
        "_rate_limits",
        "_repos",
        "_token_source",
        "_users",
    )

    def __init__(
        self,
        token: str | None = None,
        *,
        username: str | None = None,
        password: str | None = None,
        token_file: str | None = None,
        auto_create_token: bool = True,
        otp: str | None = None,
        config: ClientConfig | None = None,
        context: ClientContext | None = None,
        token_store: TokenStore | None = None,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
        **config_overrides: Any,
    ) -> None:
        """Initialize the client and settle on a starting identity.

        Args:
            token: Token to adopt. Falls back to ``GITHUB_TOKEN``.
            username: Login for basic-credential startup.
            password: Password for basic-credential startup.
            token_file: Read the starting token from this file.
            auto_create_token: Trade username/password for a token.
            otp: One-time password for two-factor accounts.
            config: Base configuration; ``config_overrides`` apply on top.
            context: Shared counters and caches; defaults to the process-wide one.
            token_store: Where tokens are loaded from and saved to; defaults
                to a file store at ``config.token_file``.
            logger: Logger for client-level events.
            transport: httpx transport override.
            **config_overrides: Any ClientConfig field.

        Raises:
            InvalidTokenError: If ``token_file`` holds no token.
            AuthenticationFailedError: If username/password login is rejected.

        """
        if config is None:
            self._config = ClientConfig(**config_overrides)
        elif config_overrides:
            self._config = config.with_overrides(**config_overrides)
        else:
            self._config = config

        self._log = logger or logging.getLogger(__name__)
        self._context = context or ClientContext.default()
        self._token_source = (
            token_store if token_store is not None else FileTokenStore(self._config.token_file)
        )

        self._credentials = CredentialStore(
            self._token_source if self._config.persist_token else None
        )
        self._http = HTTPClient(self._config, self._credentials, transport)
        self._rate_limits = RateLimitTracker(
            self._http, self._context, ttl=self._config.rate_limit_ttl
        )
        self._executor = SingleResourceExecutor(
            self._http,
            self._credentials,
            self._context,
            rate_limits=self._rate_limits,
            gate=self._config.rate_limit_gate,
        )
        self._fetcher = PaginatedFetcher(
            self._executor,
            self._context,
            default_limit=self._config.page_limit,
            default_delay=self._config.page_delay,
        )
        self._authorizations = AuthorizationService(
            self._executor, self._context.clock, self._fetcher
        )
        self._identity = IdentityStateMachine(
            self._credentials,
            self._executor,
            self._authorizations,
            self._rate_limits,
            persist_tokens=self._config.persist_token,
        )

        self._labels = LabelsEndpoint(self._executor, self._fetcher, self._config)
        self._issues = IssuesEndpoint(self._executor, self._fetcher, self._config)
        self._repos = ReposEndpoint(self._executor, self._fetcher, self._config)
        self._users = UsersEndpoint(self._executor, self._fetcher, self._config)
        self._authenticated: AuthenticatedAPI | None = None

        try:
            self._bootstrap(token, username, password, token_file, auto_create_token, otp)
        except Exception:
            self._http.close()
            raise

    def _bootstrap(
        self,
        token: str | None,
        username: str | None,
        password: str | None,
        token_file: str | None,
        auto_create_token: bool,
        otp: str | None,
    ) -> None:
        if token is not None:
            self._identity.adopt_token(token)
            self._log.debug("Started with an explicit token")
        elif self._config.is_authenticated:
            self._identity.adopt_token(self._config.token, persist=False)
            self._log.debug("Started with the configured token")
        elif token_file is not None:
            store = FileTokenStore(token_file)
            stored = store.load()
            if not stored:
                raise InvalidTokenError(f"No token found in {store.path}")
            self._identity.adopt_token(stored, persist=False)
            self._log.debug("Started with the token in %s", store.path)
        elif username is not None or password is not None:
            self._identity.login(username or "", password or "", auto_create_token, otp)
        else:
            try:
                if self._credentials.load_from_store(self._token_source):
                    self._log.debug("Started with the stored token")
            except OSError as e:
                self._log.warning("Could not read stored token: %s", e)

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def context(self) -> ClientContext:
        return self._context

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def identity(self) -> Identity:
        """The current identity variant."""
        return self._identity.identity

    @property
    def state(self) -> IdentityState:
        return self._identity.state

    @property
    def is_authenticated(self) -> bool:
        """Check whether the client holds credentials or a token."""
        return self.identity.has_credentials

    def login(
        self,
        username: str,
        password: str,
        auto_create_token: bool = True,
        otp: str | None = None,
    ) -> Identity:
        """Log in; see ``IdentityStateMachine.login``."""
        identity = self._identity.login(username, password, auto_create_token, otp)
        self._authenticated = None
        return identity

    def adopt_token(
        self,
        token: str,
        scopes: Iterable[str] | None = None,
        persist: bool | None = None,
    ) -> Identity:
        """Adopt an existing token; see ``IdentityStateMachine.adopt_token``."""
        identity = self._identity.adopt_token(token, scopes, persist)
        self._authenticated = None
        return identity

    def verify_token(self) -> str:
        """Confirm the held token and learn its owner and scopes."""
        return self._identity.verify_token()

    def check_authenticated(self) -> bool:
        """Check that credentials are held and the quota is the authenticated one.

        Raises:
            GitHubError: If the rate-limit snapshot cannot be fetched.

        """
        if not self.identity.has_credentials:
            return False
        return self._rate_limits.is_authenticated_quota()

    # =========================================================================
    # Request Core
    # =========================================================================

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
        """Perform one request; see ``SingleResourceExecutor.execute``."""
        return self._executor.execute(
            verb,
            url,
            json_data=json_data,
            expected_statuses=expected_statuses,
            required_scopes=required_scopes,
            headers=headers,
        )

    def get(self, url: str, **kwargs: Any) -> Result:
        return self._executor.get(url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Result:
        return self._executor.post(url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Result:
        return self._executor.put(url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Result:
        return self._executor.patch(url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Result:
        return self._executor.delete(url, **kwargs)

    def fetch_pages(
        self,
        initial_url: str,
        item_transform: Callable[[Any], Any] | None = None,
        page_limit: int | None = None,
        inter_page_delay: float | None = None,
    ) -> PageResult[Any]:
        """Collect a paginated listing; see ``PaginatedFetcher.fetch_pages``."""
        return self._fetcher.fetch_pages(initial_url, item_transform, page_limit, inter_page_delay)

    @property
    def rate_limits(self) -> RateLimitTracker:
        return self._rate_limits

    @property
    def query_count(self) -> int:
        """Requests sent through this client's context."""
        return self._context.query_count

    # =========================================================================
    # Endpoint Properties
    # =========================================================================

    @property
    def labels(self) -> LabelsEndpoint:
        return self._labels

    @property
    def issues(self) -> IssuesEndpoint:
        return self._issues

    @property
    def repos(self) -> ReposEndpoint:
        return self._repos

    @property
    def users(self) -> UsersEndpoint:
        return self._users

    @property
    def authenticated(self) -> AuthenticatedAPI:
        """Endpoint groups that need credentials.

        Raises:
            NotAuthenticatedError: If the identity is anonymous.

        """
        if not self.identity.has_credentials:
            raise NotAuthenticatedError()
        if self._authenticated is None:
            self._authenticated = AuthenticatedAPI(
                self._executor, self._fetcher, self._config, self._authorizations
            )
        return self._authenticated

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GitHubClient(state={self.state.value}, base_url={self._config.base_url!r})"
