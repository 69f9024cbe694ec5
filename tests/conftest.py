"""Test configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
import respx
from ghrest import ClientConfig, ClientContext, GitHubClient, MemoryTokenStore
from ghrest.auth.authorizations import AuthorizationService
from ghrest.auth.credentials import CredentialStore
from ghrest.auth.identity import IdentityStateMachine
from ghrest.executor import SingleResourceExecutor
from ghrest.utils.http import HTTPClient
from ghrest.utils.pagination import PaginatedFetcher
from ghrest.utils.rate_limiter import RateLimitTracker

BASE_URL = "https://api.github.com"

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_DEV_TOKEN",
    "GITHUB_BASE_URL",
    "GITHUB_TIMEOUT",
    "GHREST_PAGE_LIMIT",
    "GHREST_PAGE_DELAY",
    "GHREST_LOG_LEVEL",
)


# =============================================================================
# Environment and Time
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test in an empty directory with no ghrest env vars."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Records requested sleeps instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def context(clock: FakeClock, sleeps: SleepRecorder) -> ClientContext:
    """A fresh context so counters and caches never leak between tests."""
    return ClientContext(clock=clock, sleep=sleeps)


# =============================================================================
# Core Components
# =============================================================================


@pytest.fixture
def token_path(tmp_path):
    return tmp_path / "tokens" / ".github_token"


@pytest.fixture
def config(token_path) -> ClientConfig:
    return ClientConfig(token_file=str(token_path), page_delay=3.0)


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def credentials(token_store: MemoryTokenStore) -> CredentialStore:
    return CredentialStore(token_store)


@pytest.fixture
def http(config: ClientConfig, credentials: CredentialStore) -> Iterator[HTTPClient]:
    client = HTTPClient(config, credentials)
    yield client
    client.close()


@pytest.fixture
def tracker(http: HTTPClient, context: ClientContext) -> RateLimitTracker:
    return RateLimitTracker(http, context, ttl=60)


@pytest.fixture
def executor(
    http: HTTPClient, credentials: CredentialStore, context: ClientContext
) -> SingleResourceExecutor:
    return SingleResourceExecutor(http, credentials, context)


@pytest.fixture
def fetcher(executor: SingleResourceExecutor, context: ClientContext) -> PaginatedFetcher:
    return PaginatedFetcher(executor, context, default_limit=1000, default_delay=3.0)


@pytest.fixture
def authorizations(
    executor: SingleResourceExecutor, context: ClientContext, fetcher: PaginatedFetcher
) -> AuthorizationService:
    return AuthorizationService(executor, context.clock, fetcher)


@pytest.fixture
def machine(
    credentials: CredentialStore,
    executor: SingleResourceExecutor,
    authorizations: AuthorizationService,
    tracker: RateLimitTracker,
) -> IdentityStateMachine:
    return IdentityStateMachine(credentials, executor, authorizations, tracker)


@pytest.fixture
def api() -> Iterator[respx.MockRouter]:
    """respx router for the GitHub API base URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def make_client(
    config: ClientConfig, context: ClientContext, token_store: MemoryTokenStore
) -> Iterator[Callable[..., GitHubClient]]:
    """Factory for clients wired to the test context and token store."""
    created: list[GitHubClient] = []

    def factory(**kwargs: Any) -> GitHubClient:
        kwargs.setdefault("config", config)
        kwargs.setdefault("context", context)
        kwargs.setdefault("token_store", token_store)
        client = GitHubClient(**kwargs)
        created.append(client)
        return client

    yield factory
    for client in created:
        client.close()


# =============================================================================
# Sample API Responses
# =============================================================================


@pytest.fixture
def rate_limit_body() -> Callable[..., dict[str, Any]]:
    """Build a ``GET /rate_limit`` body."""

    def build(
        core_limit: int = 5000,
        core_remaining: int = 4999,
        core_reset: int = 1_003_600,
        search_limit: int = 30,
        search_remaining: int = 30,
        search_reset: int = 1_000_060,
    ) -> dict[str, Any]:
        core = {
            "limit": core_limit,
            "remaining": core_remaining,
            "reset": core_reset,
            "used": core_limit - core_remaining,
        }
        search = {
            "limit": search_limit,
            "remaining": search_remaining,
            "reset": search_reset,
            "used": search_limit - search_remaining,
        }
        return {"resources": {"core": core, "search": search}, "rate": core}

    return build


@pytest.fixture
def sample_user_response() -> dict[str, Any]:
    """Sample GitHub user API response."""
    return {
        "login": "octocat",
        "id": 1,
        "avatar_url": "https://github.com/images/error/octocat_happy.gif",
        "html_url": "https://github.com/octocat",
        "type": "User",
        "name": "The Octocat",
        "company": "@github",
        "location": "San Francisco",
        "public_repos": 8,
        "followers": 20,
        "following": 0,
        "created_at": "2008-01-14T04:33:35Z",
    }


@pytest.fixture
def sample_repo_response(sample_user_response: dict[str, Any]) -> dict[str, Any]:
    """Sample GitHub repository API response."""
    return {
        "id": 1296269,
        "name": "Hello-World",
        "full_name": "octocat/Hello-World",
        "owner": sample_user_response,
        "private": False,
        "html_url": "https://github.com/octocat/Hello-World",
        "description": "This your first repo!",
        "fork": False,
        "language": "Python",
        "default_branch": "main",
        "stargazers_count": 80,
        "forks_count": 9,
        "open_issues_count": 0,
        "created_at": "2011-01-26T19:01:12Z",
        "updated_at": "2011-01-26T19:14:43Z",
    }


@pytest.fixture
def sample_label_response() -> dict[str, Any]:
    """Sample GitHub label API response."""
    return {
        "id": 208045946,
        "url": "https://api.github.com/repos/octocat/Hello-World/labels/bug",
        "name": "bug",
        "color": "f29513",
        "description": "Something isn't working",
        "default": True,
    }


@pytest.fixture
def sample_issue_response(
    sample_user_response: dict[str, Any], sample_label_response: dict[str, Any]
) -> dict[str, Any]:
    """Sample GitHub issue API response."""
    return {
        "id": 1,
        "number": 1347,
        "title": "Found a bug",
        "state": "open",
        "user": sample_user_response,
        "labels": [sample_label_response],
        "body": "I'm having a problem with this.",
        "comments": 0,
        "html_url": "https://github.com/octocat/Hello-World/issues/1347",
        "created_at": "2011-04-22T13:33:48Z",
        "closed_at": None,
    }
