"""Endpoint groups built on the request core.

Public groups work for any identity. The ``Authenticated*`` subclasses add
write operations and are only handed out by ``GitHubClient.authenticated``.

"""

from ghrest.endpoints.issues import IssuesEndpoint
from ghrest.endpoints.labels import AuthenticatedLabelsEndpoint, LabelsEndpoint
from ghrest.endpoints.repos import AuthenticatedReposEndpoint, ReposEndpoint
from ghrest.endpoints.users import AuthenticatedUsersEndpoint, UsersEndpoint

__all__ = [
    "AuthenticatedLabelsEndpoint",
    "AuthenticatedReposEndpoint",
    "AuthenticatedUsersEndpoint",
    "IssuesEndpoint",
    "LabelsEndpoint",
    "ReposEndpoint",
    "UsersEndpoint",
]
