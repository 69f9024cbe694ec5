"""Repositories endpoint implementation.

API Reference: https://docs.github.com/en/rest/repos/repos

"""

from __future__ import annotations

from ghrest.endpoints.base import BaseEndpoint, segment
from ghrest.models import Repository
from ghrest.results import PageResult


class ReposEndpoint(BaseEndpoint):
    """Read access to repositories."""

    def get(self, owner: str, repo: str) -> Repository:
        """Get one repository.

        Raises:
            NotFoundError: If the repository does not exist or is private.

        """
        data = self._single("GET", f"/repos/{segment(owner)}/{segment(repo)}")
        return self._parse(data, Repository)

    def list_for_user(self, username: str, limit: int | None = None) -> PageResult[Repository]:
        """List a user's public repositories."""
        return self._paged(f"/users/{segment(username)}/repos", Repository, limit)

    def list_public(
        self, since: int | None = None, limit: int | None = None
    ) -> PageResult[Repository]:
        """List every public repository, in creation order.

        Args:
            since: Only repositories with an ID greater than this.
            limit: Item ceiling; defaults to the configured page limit.

        """
        return self._paged("/repositories", Repository, limit, params={"since": since})


class AuthenticatedReposEndpoint(ReposEndpoint):
    """Repository reads plus operations on the caller's own account."""

    def list_mine(
        self,
        visibility: str | None = None,
        affiliation: str | None = None,
        type_: str | None = None,
        limit: int | None = None,
    ) -> PageResult[Repository]:
        """List repositories the caller can access."""
        return self._paged(
            "/user/repos",
            Repository,
            limit,
            params={"visibility": visibility, "affiliation": affiliation, "type": type_},
        )

    def delete(self, owner: str, repo: str) -> None:
        """Delete a repository.

        Raises:
            InsufficientScopeError: If the token is known to lack delete_repo.

        """
        self._single(
            "DELETE",
            f"/repos/{segment(owner)}/{segment(repo)}",
            required_scopes=["delete_repo"],
        )
