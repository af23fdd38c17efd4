"""CLI argument parser for debapps.

Handles parsing of command-line arguments and provides a clean
interface for defining CLI commands and their options.
"""

import argparse
from argparse import Namespace
from pathlib import Path


class CLIParser:
    """Command-line argument parser for debapps."""

    def parse_args(self, argv: list[str] | None = None) -> Namespace:
        """Parse command-line arguments.

        Args:
            argv: Arguments to parse; defaults to sys.argv[1:]

        Returns:
            Namespace: Parsed arguments namespace.

        """
        parser = self._create_main_parser()
        self._add_global_options(parser)
        self._add_subcommands(parser)
        return parser.parse_args(argv)

    def _create_main_parser(self) -> argparse.ArgumentParser:
        return argparse.ArgumentParser(
            prog="debapps",
            description="Install and track desktop applications on Debian",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Install from the catalog (comma-separated or space-separated)
  %(prog)s install obsidian,signal
  %(prog)s install obsidian signal

  # Check what is installed and what can be upgraded
  %(prog)s status
  %(prog)s status obsidian

  # Upgrade, reinstall or remove
  %(prog)s upgrade obsidian
  %(prog)s reinstall libreoffice
  %(prog)s remove tor-browser

  # Browse the catalog
  %(prog)s catalog
  %(prog)s catalog --category development
  %(prog)s catalog --info obsidian

  # Maintenance
  %(prog)s cache --clear
  %(prog)s ledger --sync
  %(prog)s auth --save-token
            """,
        )

    def _add_global_options(self, parser: argparse.ArgumentParser) -> None:
        """Add --version, --catalog and -y/--yes."""
        parser.add_argument(
            "--version",
            action="store_true",
            help="Show debapps version and exit",
        )
        parser.add_argument(
            "--catalog",
            dest="catalog_file",
            type=Path,
            default=None,
            metavar="PATH",
            help="Use a custom catalog JSON file",
        )
        parser.add_argument(
            "-y",
            "--yes",
            action="store_true",
            help="Answer yes to every confirmation prompt",
        )

    def _add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands"
        )

        self._add_lifecycle_command(
            subparsers, "install", "Install applications from the catalog"
        )
        self._add_lifecycle_command(
            subparsers, "remove", "Remove installed applications"
        )
        self._add_lifecycle_command(
            subparsers, "reinstall", "Remove and install applications again"
        )
        self._add_upgrade_command(subparsers)
        self._add_status_command(subparsers)
        self._add_catalog_command(subparsers)
        self._add_cache_command(subparsers)
        self._add_ledger_command(subparsers)
        self._add_auth_command(subparsers)

    def _add_lifecycle_command(self, subparsers, name: str, help_text: str) -> None:
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "targets",
            nargs="+",
            help="Catalog app ids (comma-separated or space-separated)",
        )
        command_parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed logging",
        )

    def _add_upgrade_command(self, subparsers) -> None:
        upgrade_parser = subparsers.add_parser(
            "upgrade",
            help="Upgrade applications",
            epilog="""
Examples:
  %(prog)s                  # Upgrade every app with a newer version
  %(prog)s obsidian signal  # Upgrade specific apps
            """,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        upgrade_parser.add_argument(
            "targets",
            nargs="*",
            help="Catalog app ids; defaults to every upgradeable app",
        )
        upgrade_parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed logging",
        )

    def _add_status_command(self, subparsers) -> None:
        status_parser = subparsers.add_parser(
            "status",
            help="Show installation status and available upgrades",
        )
        status_parser.add_argument(
            "targets",
            nargs="*",
            help="Catalog app ids; defaults to every installed app",
        )
        status_parser.add_argument(
            "--no-check",
            action="store_true",
            help="Do not look up the latest versions",
        )

    def _add_catalog_command(self, subparsers) -> None:
        catalog_parser = subparsers.add_parser(
            "catalog",
            help="Browse the application catalog",
        )
        group = catalog_parser.add_mutually_exclusive_group()
        group.add_argument(
            "--category",
            metavar="ID",
            help="List the apps of one category",
        )
        group.add_argument(
            "--search",
            metavar="KEYWORD",
            help="Search app names",
        )
        group.add_argument(
            "--info",
            metavar="APP",
            help="Show details of one app",
        )

    def _add_cache_command(self, subparsers) -> None:
        cache_parser = subparsers.add_parser(
            "cache",
            help="Manage the version cache",
        )
        group = cache_parser.add_mutually_exclusive_group(required=True)
        group.add_argument(
            "--clear",
            nargs="?",
            const="",
            metavar="APP",
            help="Clear the cache of one app, or all entries",
        )
        group.add_argument(
            "--stats",
            action="store_true",
            help="Show cache statistics",
        )

    def _add_ledger_command(self, subparsers) -> None:
        ledger_parser = subparsers.add_parser(
            "ledger",
            help="Inspect and maintain the install ledger",
        )
        group = ledger_parser.add_mutually_exclusive_group(required=True)
        group.add_argument(
            "--list",
            action="store_true",
            help="List recorded installations",
        )
        group.add_argument(
            "--stats",
            action="store_true",
            help="Count installations per method",
        )
        group.add_argument(
            "--export",
            type=Path,
            metavar="PATH",
            help="Export the ledger as JSON",
        )
        group.add_argument(
            "--sync",
            action="store_true",
            help="Refresh package versions from dpkg",
        )
        group.add_argument(
            "--vacuum",
            action="store_true",
            help="Compact the ledger database",
        )

    def _add_auth_command(self, subparsers) -> None:
        auth_parser = subparsers.add_parser(
            "auth",
            help="Manage the GitHub API token",
        )
        group = auth_parser.add_mutually_exclusive_group(required=True)
        group.add_argument(
            "--save-token",
            action="store_true",
            help="Save a GitHub token to the keyring",
        )
        group.add_argument(
            "--remove-token",
            action="store_true",
            help="Remove the GitHub token from the keyring",
        )
        group.add_argument(
            "--status",
            action="store_true",
            help="Show where the GitHub token comes from",
        )
