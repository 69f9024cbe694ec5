"""Labels endpoint implementation.

API Reference: https://docs.github.com/en/rest/issues/labels

"""

from __future__ import annotations

from ghrest.endpoints.base import BaseEndpoint, segment
from ghrest.models import Label
from ghrest.results import PageResult

DEFAULT_LABEL_COLOR = "FF0000"


def normalize_color(color: str) -> str:
    """Strip a leading ``#`` from a hex color."""
    return color.lstrip("#")


class LabelsEndpoint(BaseEndpoint):
    """Read access to repository and issue labels.

    Example:
        >>> for label in client.labels.list("octocat", "hello-world"):
        ...     print(label.name, label.color)

    """

    def list(self, owner: str, repo: str, limit: int | None = None) -> PageResult[Label]:
        """List every label in a repository."""
        return self._paged(f"/repos/{segment(owner)}/{segment(repo)}/labels", Label, limit)

    def get(self, owner: str, repo: str, name: str) -> Label:
        """Get one label by name.

        Raises:
            NotFoundError: If the label does not exist.

        """
        data = self._single("GET", f"/repos/{segment(owner)}/{segment(repo)}/labels/{segment(name)}")
        return self._parse(data, Label)

    def for_issue(
        self, owner: str, repo: str, number: int, limit: int | None = None
    ) -> PageResult[Label]:
        """List the labels on an issue."""
        return self._paged(
            f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}/labels", Label, limit
        )


class AuthenticatedLabelsEndpoint(LabelsEndpoint):
    """Label reads plus writes, which need credentials."""

    def create(
        self,
        owner: str,
        repo: str,
        name: str,
        color: str = DEFAULT_LABEL_COLOR,
        description: str | None = None,
    ) -> Label:
        """Create a label.

        Args:
            owner: Repository owner.
            repo: Repository name.
            name: Label name.
            color: Hex color, with or without a leading ``#``.
            description: Optional description.

        Returns:
            The created label.

        Raises:
            ClientError: If the label already exists (422).

        """
        body: dict[str, str] = {"name": name, "color": normalize_color(color)}
        if description is not None:
            body["description"] = description
        data = self._single(
            "POST", f"/repos/{segment(owner)}/{segment(repo)}/labels", json_data=body
        )
        return self._parse(data, Label)

    def update(
        self,
        owner: str,
        repo: str,
        name: str,
        *,
        new_name: str | None = None,
        color: str | None = None,
        description: str | None = None,
    ) -> Label:
        """Rename or recolor a label."""
        body: dict[str, str] = {}
        if new_name is not None:
            body["new_name"] = new_name
        if color is not None:
            body["color"] = normalize_color(color)
        if description is not None:
            body["description"] = description
        data = self._single(
            "PATCH",
            f"/repos/{segment(owner)}/{segment(repo)}/labels/{segment(name)}",
            json_data=body,
        )
        return self._parse(data, Label)

    def delete(self, owner: str, repo: str, name: str) -> None:
        """Delete a label."""
        self._single("DELETE", f"/repos/{segment(owner)}/{segment(repo)}/labels/{segment(name)}")

    def add_to_issue(self, owner: str, repo: str, number: int, labels: list[str]) -> list[Label]:
        """Add labels to an issue, returning the issue's full label list."""
        data = self._single(
            "POST",
            f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}/labels",
            json_data={"labels": labels},
            expected_statuses=200,
        )
        return [self._parse(item, Label) for item in data or []]

    def replace_for_issue(
        self, owner: str, repo: str, number: int, labels: list[str]
    ) -> list[Label]:
        """Replace every label on an issue."""
        data = self._single(
            "PUT",
            f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}/labels",
            json_data={"labels": labels},
        )
        return [self._parse(item, Label) for item in data or []]

    def remove_from_issue(self, owner: str, repo: str, number: int, name: str) -> list[Label]:
        """Remove one label from an issue, returning the labels left."""
        data = self._single(
            "DELETE",
            f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}/labels/{segment(name)}",
            expected_statuses=200,
        )
        return [self._parse(item, Label) for item in data or []]

    def remove_all_from_issue(self, owner: str, repo: str, number: int) -> None:
        """Remove every label from an issue."""
        self._single("DELETE", f"/repos/{segment(owner)}/{segment(repo)}/issues/{number}/labels")
