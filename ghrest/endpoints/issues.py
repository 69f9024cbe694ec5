"""Issues endpoint implementation.

API Reference: https://docs.github.com/en/rest/issues/issues

"""

from __future__ import annotations

from typing import Literal

from ghrest.endpoints.base import BaseEndpoint, segment
from ghrest.models import Issue
from ghrest.results import PageResult

IssueState = Literal["open", "closed", "all"]


class IssuesEndpoint(BaseEndpoint):
    """Read access to repository issues.

    Example:
        >>> issues = client.issues.list("octocat", "hello-world", state="all", limit=50)
        >>> print(len(issues), issues.complete)

    """

    def list(
        self,
        owner: str,
        repo: str,
        state: IssueState = "open",
        limit: int | None = None,
    ) -> PageResult[Issue]:
        """List a repository's issues (pull requests included).

        Args:
            owner: Repository owner.
            repo: Repository name.
            state: Filter by state.
            limit: Item ceiling; defaults to the configured page limit.

        Returns:
            PageResult of issues.

        """
        return self._paged(
            f"/repos/{segment(owner)}/{segment(repo)}/issues",
            Issue,
            limit,
            params={"state": state},
        )

    def get(self, owner: str, repo: str, number: int) -> Issue:
        """Get one issue.

        Raises:
            NotFoundError: If the issue does not exist.

        """
        data = self._single("GET", f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}")
        return self._parse(data, Issue)
