"""Pydantic models for GitHub API responses.

Models keep the fields this client reads and ignore everything else, so
new fields added by GitHub never break parsing.

Example:
    >>> from ghrest.models import Label
    >>> label = Label.model_validate(api_response)
    >>> print(label.name, label.color)

"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GitHubModel(BaseModel):
    """Base model for all GitHub API responses."""

    model_config = ConfigDict(
        extra="ignore",  # Ignore unknown fields from API
        validate_assignment=True,
        use_enum_values=True,
        populate_by_name=True,
    )


# =============================================================================
# Rate Limit Models
# =============================================================================


class RateBucket(GitHubModel):
    """Quota for one resource class.

    Attributes:
        limit: Requests allowed per window.
        remaining: Requests left in the current window.
        reset: Unix timestamp when the window resets.
        used: Requests consumed in the current window.

    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    limit: int
    remaining: int
    reset: int
    used: int | None = None

    @property
    def percent_used(self) -> int:
        """Integer percentage of the quota consumed (100 when limit is 0)."""
        if self.limit <= 0:
            return 100
        return 100 * (self.limit - self.remaining) // self.limit


class RateLimitSnapshot(GitHubModel):
    """Immutable view of ``GET /rate_limit`` taken at ``fetched_at``.

    Attributes:
        core: The general REST quota.
        search: The search API quota.
        resources: Every bucket reported by the service, keyed by name.
        fetched_at: Clock time when the snapshot was taken.

    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    core: RateBucket
    search: RateBucket
    resources: dict[str, RateBucket] = Field(default_factory=dict)
    fetched_at: float

    @classmethod
    def from_payload(cls, payload: dict[str, Any], fetched_at: float) -> RateLimitSnapshot:
        """Build a snapshot from a ``/rate_limit`` body.

        The legacy top-level ``rate`` field duplicates ``resources.core``
        and is discarded.

        Args:
            payload: Decoded JSON body.
            fetched_at: Clock time of the fetch.

        Returns:
            The snapshot.

        """
        body = dict(payload)
        body.pop("rate", None)
        resources = body.get("resources", {})
        return cls(
            core=resources["core"],
            search=resources["search"],
            resources=resources,
            fetched_at=fetched_at,
        )


# =============================================================================
# Authorization Models
# =============================================================================


class Authorization(GitHubModel):
    """A token minted through ``POST /authorizations``."""

    id: int
    url: str | None = None
    token: str | None = None
    hashed_token: str | None = None
    token_last_eight: str | None = None
    note: str | None = None
    scopes: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


# =============================================================================
# User Models
# =============================================================================


class SimpleUser(GitHubModel):
    """Minimal user reference embedded in other resources."""

    login: str
    id: int
    avatar_url: str | None = None
    html_url: str | None = None
    type: str = "User"


class User(SimpleUser):
    """A user's profile.

    Private fields are only present for the authenticated user.

    """

    name: str | None = None
    company: str | None = None
    blog: str | None = None
    location: str | None = None
    email: str | None = None
    bio: str | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    total_private_repos: int | None = None
    created_at: datetime | None = None


# =============================================================================
# Repository Models
# =============================================================================


class Label(GitHubModel):
    """Repository label.

    Attributes:
        name: Label name.
        color: Hex color without the leading ``#``.
        description: Optional description.

    """

    id: int | None = None
    url: str | None = None
    name: str
    color: str
    description: str | None = None
    default: bool = False


class Repository(GitHubModel):
    """Repository summary."""

    id: int
    name: str
    full_name: str
    owner: SimpleUser
    private: bool = False
    html_url: str | None = None
    description: str | None = None
    fork: bool = False
    language: str | None = None
    default_branch: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Issue(GitHubModel):
    """Issue (or pull request, which GitHub lists alongside issues)."""

    id: int
    number: int
    title: str
    state: str
    user: SimpleUser | None = None
    labels: list[Label] = Field(default_factory=list)
    body: str | None = None
    comments: int = 0
    html_url: str | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    pull_request: dict[str, Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        """Check whether this issue is actually a pull request."""
        return self.pull_request is not None
