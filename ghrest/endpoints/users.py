"""Users endpoint implementation.

API Reference: https://docs.github.com/en/rest/users

"""

from __future__ import annotations

from ghrest.endpoints.base import BaseEndpoint, segment
from ghrest.models import User


class UsersEndpoint(BaseEndpoint):
    """Read access to public user profiles.

    Example:
        >>> user = client.users.get("octocat")
        >>> print(user.login, user.public_repos)

    """

    def get(self, username: str) -> User:
        """Get a user's public profile.

        Raises:
            NotFoundError: If the user doesn't exist.

        """
        data = self._single("GET", f"/users/{segment(username)}")
        return self._parse(data, User)


class AuthenticatedUsersEndpoint(UsersEndpoint):
    """User reads plus the caller's own profile."""

    def me(self) -> User:
        """Get the authenticated user's profile."""
        data = self._single("GET", "/user")
        return self._parse(data, User)
