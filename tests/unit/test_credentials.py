"""Unit tests for the credential store and token persistence."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest
from ghrest.auth.credentials import CredentialStore
from ghrest.auth.identity import Anonymous, BasicCredentialed, IdentityState, TokenAuthenticated
from ghrest.auth.token_store import FileTokenStore, MemoryTokenStore, default_token_path
from ghrest.exceptions import (
    IdentityTransitionError,
    InvalidCredentialsError,
    InvalidTokenError,
)


class TestSetToken:
    """Tests for adopting tokens."""

    @pytest.mark.parametrize("token", ["", "   ", "\n\t"])
    def test_rejects_blank_token(self, credentials: CredentialStore, token: str):
        """Empty or whitespace-only tokens are rejected without a state change."""
        with pytest.raises(InvalidTokenError):
            credentials.set_token(token)

        assert credentials.identity == Anonymous()
        assert credentials.token_store.token is None

    def test_trims_whitespace(self, credentials: CredentialStore):
        """Surrounding whitespace is trimmed before storing."""
        credentials.set_token(" abc ")

        assert credentials.token == "abc"
        assert credentials.authorization_header_value() == "token abc"

    def test_persists_through_token_store(self, token_store: MemoryTokenStore):
        """The trimmed token is saved once."""
        store = CredentialStore(token_store)
        store.set_token("abc\n")

        assert token_store.token == "abc"
        assert token_store.saves == 1

    def test_persist_false_skips_save(self, token_store: MemoryTokenStore):
        """persist=False keeps the token in memory only."""
        store = CredentialStore(token_store)
        store.set_token("abc", persist=False)

        assert token_store.saves == 0
        assert store.state is IdentityState.TOKEN

    def test_save_failure_is_not_fatal(self, tmp_path: Path):
        """An unwritable token file is logged and the token is still adopted."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = CredentialStore(FileTokenStore(blocker / ".github_token"))

        store.set_token("abc")

        assert store.token == "abc"

    def test_token_discards_password(self, credentials: CredentialStore):
        """Promotion to a token drops any stored password."""
        credentials.set_basic_credentials("octocat", "s3cret")
        credentials.set_token("abc", ["repo"])

        assert credentials.password is None
        assert credentials.username == "octocat"
        assert credentials.identity == TokenAuthenticated("abc", "octocat", frozenset({"repo"}))

    def test_new_token_forgets_previous_scopes(self, credentials: CredentialStore):
        credentials.set_token("tokenA", ["public_repo"], persist=False)
        credentials.set_token("tokenB", persist=False)

        assert credentials.scopes is None

    def test_same_token_keeps_scopes(self, credentials: CredentialStore):
        credentials.set_token("tokenA", ["repo"], persist=False)
        credentials.set_token(" tokenA ", persist=False)

        assert credentials.scopes == frozenset({"repo"})


class TestBasicCredentials:
    """Tests for username/password storage."""

    @pytest.mark.parametrize("username,password", [("", "pw"), ("user", ""), ("", "")])
    def test_rejects_empty_values(self, credentials: CredentialStore, username, password):
        with pytest.raises(InvalidCredentialsError):
            credentials.set_basic_credentials(username, password)

        assert credentials.state is IdentityState.ANONYMOUS

    def test_basic_header(self, credentials: CredentialStore):
        """Basic header is base64 of username:password."""
        credentials.set_basic_credentials("octocat", "s3cret")

        expected = "Basic " + base64.b64encode(b"octocat:s3cret").decode()
        assert credentials.authorization_header_value() == expected
        assert credentials.identity == BasicCredentialed("octocat", "s3cret")

    def test_cannot_fall_back_from_token(self, credentials: CredentialStore):
        """Basic credentials cannot replace a held token."""
        credentials.set_token("abc")

        with pytest.raises(IdentityTransitionError):
            credentials.set_basic_credentials("octocat", "s3cret")

        assert credentials.state is IdentityState.TOKEN

    def test_clear_password_requires_token(self, credentials: CredentialStore):
        """Dropping the password without a token would move backwards."""
        credentials.set_basic_credentials("octocat", "s3cret")

        with pytest.raises(IdentityTransitionError):
            credentials.clear_password()

    def test_anonymous_has_no_header(self, credentials: CredentialStore):
        assert credentials.authorization_header_value() is None


class TestFileTokenStore:
    """Tests for the file-backed token store."""

    def test_round_trip_strips_trailing_whitespace(self, tmp_path: Path):
        path = tmp_path / ".github_token"
        path.write_text("ghp_abc\n\n")

        assert FileTokenStore(path).load() == "ghp_abc"

    def test_missing_file_loads_none(self, tmp_path: Path):
        assert FileTokenStore(tmp_path / "missing").load() is None

    def test_save_creates_parent_dirs(self, tmp_path: Path):
        store = FileTokenStore(tmp_path / "a" / "b" / "token")
        store.save("xyz")

        assert (tmp_path / "a" / "b" / "token").read_text() == "xyz"

    def test_default_path_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_DEV_TOKEN", "/tmp/custom_token")
        assert default_token_path() == Path("/tmp/custom_token")

    def test_default_path_fallback(self):
        assert default_token_path() == Path(".github_token")

    def test_load_from_store_does_not_resave(self, token_store: MemoryTokenStore):
        token_store.token = "stored"
        store = CredentialStore(token_store)

        assert store.load_from_store() is True
        assert store.token == "stored"
        assert token_store.saves == 0
