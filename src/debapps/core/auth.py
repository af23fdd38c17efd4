"""GitHub token storage and request authentication.

The token is read from the GITHUB_TOKEN environment variable when set,
otherwise from the system keyring. Only GitHub API requests carry it.
"""

import os
import re

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from debapps.logger import get_logger

logger = get_logger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"
KEYRING_SERVICE = "debapps-github-token"
KEYRING_USERNAME = "token"
MAX_TOKEN_LENGTH = 255

_TOKEN_PATTERNS = (
    r"^[a-f0-9]{40}$",
    r"^ghp_[A-Za-z0-9_]{36,251}$",
    r"^gho_[A-Za-z0-9_]{36,251}$",
    r"^ghu_[A-Za-z0-9_]{36,251}$",
    r"^ghs_[A-Za-z0-9_]{36,251}$",
    r"^ghr_[A-Za-z0-9_]{36,251}$",
    r"^github_pat_[A-Za-z0-9_]{36,243}$",
)


def validate_github_token(token: str | None) -> bool:
    """Validate GitHub token format.

    Accepts classic 40-character hex tokens and the prefixed formats
    (ghp_, gho_, ghu_, ghs_, ghr_, github_pat_).

    Args:
        token: Token to validate

    Returns:
        True if the token looks like a GitHub token

    """
    if not token or not isinstance(token, str):
        return False

    token = token.strip()
    if not token or len(token) > MAX_TOKEN_LENGTH:
        return False

    return any(re.match(pattern, token) for pattern in _TOKEN_PATTERNS)


class KeyringTokenStore:
    """Token storage backed by the system keyring."""

    def __init__(
        self, service: str = KEYRING_SERVICE, username: str = KEYRING_USERNAME
    ) -> None:
        self.service = service
        self.username = username

    def get(self) -> str | None:
        """Return the stored token, or None if missing or unavailable."""
        try:
            token = keyring.get_password(self.service, self.username)
        except KeyringError:
            logger.debug("Keyring unavailable")
            return None
        if token:
            logger.debug("GitHub token retrieved from keyring (value hidden)")
        return token or None

    def set(self, token: str) -> None:
        """Store a token.

        Raises:
            keyring.errors.KeyringError: If the keyring cannot store it

        """
        keyring.set_password(self.service, self.username, token)
        logger.debug("Token saved to keyring")

    def delete(self) -> bool:
        """Remove the stored token.

        Returns:
            False if no token was stored

        """
        try:
            keyring.delete_password(self.service, self.username)
        except PasswordDeleteError:
            logger.debug("No token found in keyring to delete")
            return False
        logger.debug("Token removed from keyring")
        return True


class GitHubAuth:
    """Apply GitHub authentication to API request headers."""

    def __init__(self, token_store: KeyringTokenStore | None = None) -> None:
        self.token_store = (
            token_store if token_store is not None else KeyringTokenStore()
        )
        self._user_notified = False

    def get_token(self) -> str | None:
        """Return the environment token, falling back to the keyring."""
        env_token = os.environ.get(TOKEN_ENV_VAR, "").strip()
        if env_token:
            return env_token
        return self.token_store.get()

    def token_source(self) -> str | None:
        """Describe where the active token comes from ("env"/"keyring")."""
        if os.environ.get(TOKEN_ENV_VAR, "").strip():
            return "env"
        if self.token_store.get():
            return "keyring"
        return None

    def apply_auth(self, headers: dict[str, str]) -> dict[str, str]:
        """Set the Authorization header when a token is available.

        Args:
            headers: HTTP headers to update

        Returns:
            The same headers dict

        """
        token = self.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif not self._user_notified:
            self._user_notified = True
            logger.debug(
                "No GitHub token configured; unauthenticated rate limits apply"
            )
        return headers
