"""Auth command handler for the GitHub API token."""

import getpass
from argparse import Namespace

from keyring.errors import KeyringError

from debapps.core.auth import TOKEN_ENV_VAR, validate_github_token
from debapps.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class AuthHandler(BaseCommandHandler):
    """Handler for the auth command."""

    async def execute(self, args: Namespace) -> int:
        if args.save_token:
            return self._save_token()
        if args.remove_token:
            return self._remove_token()
        return self._show_status()

    def _save_token(self) -> int:
        token = getpass.getpass("Enter your GitHub token (input hidden): ")
        if not validate_github_token(token):
            logger.info("❌ That does not look like a GitHub token")
            return 1
        try:
            self.ctx.auth.token_store.set(token.strip())
        except KeyringError as e:
            logger.info("❌ Could not save token to keyring: %s", e)
            return 1
        logger.info("✅ GitHub token saved to keyring")
        return 0

    def _remove_token(self) -> int:
        if self.ctx.auth.token_store.delete():
            logger.info("✅ GitHub token removed from keyring")
        else:
            logger.info("No GitHub token stored in keyring")
        return 0

    def _show_status(self) -> int:
        source = self.ctx.auth.token_source()
        if source == "env":
            logger.info("✅ GitHub token is set by %s", TOKEN_ENV_VAR)
        elif source == "keyring":
            logger.info("✅ GitHub token is stored in the keyring")
        else:
            logger.info("❌ No GitHub token configured")
            logger.info("Use 'debapps auth --save-token' to set a token")
        return 0
