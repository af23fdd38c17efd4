"""Tests for GitHub token validation and storage."""

from unittest.mock import MagicMock, patch

import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from debapps.core.auth import (
    GitHubAuth,
    KeyringTokenStore,
    validate_github_token,
)

CLASSIC = "a" * 40
FINE_GRAINED = "ghp_" + "A1b2" * 9


class TestValidateToken:
    """Test token format validation."""

    @pytest.mark.parametrize("token", [CLASSIC, FINE_GRAINED, f" {CLASSIC} "])
    def test_valid(self, token):
        assert validate_github_token(token)

    @pytest.mark.parametrize(
        "token", [None, "", "   ", "ghp_short", "x" * 300, "A" * 40]
    )
    def test_invalid(self, token):
        assert not validate_github_token(token)


class TestKeyringTokenStore:
    """Test keyring access."""

    @patch("debapps.core.auth.keyring")
    def test_get_returns_none_when_unavailable(self, mock_keyring):
        mock_keyring.get_password.side_effect = KeyringError()
        assert KeyringTokenStore().get() is None

    @patch("debapps.core.auth.keyring")
    def test_set_and_delete(self, mock_keyring):
        store = KeyringTokenStore()
        store.set(CLASSIC)
        mock_keyring.set_password.assert_called_once_with(
            "debapps-github-token", "token", CLASSIC
        )
        assert store.delete() is True

    @patch("debapps.core.auth.keyring")
    def test_delete_missing(self, mock_keyring):
        mock_keyring.delete_password.side_effect = PasswordDeleteError()
        assert KeyringTokenStore().delete() is False


class TestGitHubAuth:
    """Test header injection and token precedence."""

    def test_env_token_wins(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        store = MagicMock()
        store.get.return_value = "keyring-token"
        auth = GitHubAuth(store)

        assert auth.get_token() == "env-token"
        assert auth.token_source() == "env"
        assert auth.apply_auth({}) == {"Authorization": "Bearer env-token"}

    def test_keyring_token(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        store = MagicMock()
        store.get.return_value = "keyring-token"

        assert GitHubAuth(store).token_source() == "keyring"

    def test_no_token_leaves_headers(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        store = MagicMock()
        store.get.return_value = None
        auth = GitHubAuth(store)

        assert auth.apply_auth({"Accept": "x"}) == {"Accept": "x"}
        assert auth.token_source() is None
