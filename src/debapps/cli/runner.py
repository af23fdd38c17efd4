"""CLI runner for debapps.

Orchestrates the execution of CLI commands by routing parsed
arguments to the appropriate command handlers.
"""

from argparse import Namespace

from debapps import __version__
from debapps.config import CatalogLoader, Paths, SettingsManager
from debapps.core.context import AppContext, always_yes
from debapps.core.http_session import create_http_session
from debapps.exceptions import DebappsError
from debapps.logger import get_logger, get_state, set_console_level
from debapps.logger.config import apply_levels

from .commands import (
    AuthHandler,
    BaseCommandHandler,
    CacheHandler,
    CatalogHandler,
    InstallHandler,
    LedgerHandler,
    ReinstallHandler,
    RemoveHandler,
    StatusHandler,
    UpgradeHandler,
)
from .commands.helpers import confirm_prompt
from .parser import CLIParser

logger = get_logger(__name__)

COMMAND_HANDLERS: dict[str, type[BaseCommandHandler]] = {
    "install": InstallHandler,
    "remove": RemoveHandler,
    "reinstall": ReinstallHandler,
    "upgrade": UpgradeHandler,
    "status": StatusHandler,
    "catalog": CatalogHandler,
    "cache": CacheHandler,
    "ledger": LedgerHandler,
    "auth": AuthHandler,
}


class CLIRunner:
    """CLI command runner and orchestrator."""

    def __init__(
        self,
        settings_manager: SettingsManager | None = None,
        argv: list[str] | None = None,
    ) -> None:
        """Initialize CLI runner.

        Args:
            settings_manager: Settings source; defaults to settings.conf
            argv: Arguments to parse instead of sys.argv

        """
        self.settings_manager = settings_manager or SettingsManager()
        self.argv = argv

    async def run(self) -> int:
        """Run the CLI application.

        Returns:
            Process exit status

        """
        try:
            args = CLIParser().parse_args(self.argv)

            if args.version:
                print(__version__)
                return 0

            if not args.command:
                print("❌ No command specified. Use --help.")
                return 1

            return await self._execute_command(args)

        except KeyboardInterrupt:
            print("\n⏹️  Operation cancelled by user")
            return 1
        except Exception as e:
            logger.exception("Unexpected error")
            print(f"❌ Unexpected error: {e}")
            return 1

    async def _execute_command(self, args: Namespace) -> int:
        """Build the context and run the selected command's handler."""
        settings = self.settings_manager.load()
        apply_levels(get_state(), settings.console_log_level, settings.log_level)
        if getattr(args, "verbose", False):
            set_console_level("DEBUG")

        try:
            catalog = CatalogLoader(args.catalog_file).load()
        except DebappsError as e:
            print(f"❌ {e}")
            return 1

        directory = settings.directory
        Paths.ensure_directories(directory.cache, directory.data, directory.tmp)

        confirm = always_yes if args.yes or settings.assume_yes else confirm_prompt
        handler_cls = COMMAND_HANDLERS[args.command]

        async with create_http_session(settings.network) as session:
            ctx = AppContext(settings, catalog, session, confirm=confirm)
            try:
                return await handler_cls(ctx).execute(args)
            except DebappsError as e:
                logger.debug("Command %s failed", args.command, exc_info=True)
                print(f"❌ {e}")
                return 1
