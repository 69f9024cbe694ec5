"""Identity, credentials, token persistence and token minting.

Example:
    >>> from ghrest.auth import CredentialStore, FileTokenStore
    >>> store = CredentialStore(FileTokenStore(".github_token"))
    >>> store.load_from_store()

"""

from ghrest.auth.authorizations import (
    DEFAULT_SCOPES,
    VALID_SCOPES,
    AuthorizationService,
    is_valid_scope,
)
from ghrest.auth.credentials import CredentialStore
from ghrest.auth.identity import (
    Anonymous,
    BasicCredentialed,
    Identity,
    IdentityState,
    IdentityStateMachine,
    TokenAuthenticated,
)
from ghrest.auth.token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "DEFAULT_SCOPES",
    "VALID_SCOPES",
    "Anonymous",
    "AuthorizationService",
    "BasicCredentialed",
    "CredentialStore",
    "FileTokenStore",
    "Identity",
    "IdentityState",
    "IdentityStateMachine",
    "MemoryTokenStore",
    "TokenAuthenticated",
    "TokenStore",
    "is_valid_scope",
]
