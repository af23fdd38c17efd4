"""Ledger command handler: list, export and maintain installations."""

from argparse import Namespace
from datetime import datetime

from debapps.exceptions import LedgerError
from debapps.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class LedgerHandler(BaseCommandHandler):
    """Handler for the ledger command."""

    async def execute(self, args: Namespace) -> int:
        ledger = self.ctx.ledger
        try:
            if args.list:
                self._list()
            elif args.stats:
                stats = ledger.stats()
                logger.info("📊 Installed apps: %d", sum(stats.values()))
                for method, count in stats.items():
                    logger.info("   %-12s %d", method, count)
            elif args.export:
                count = ledger.export_json(args.export)
                logger.info("✅ Exported %d apps to %s", count, args.export)
            elif args.sync:
                changes = await ledger.sync_versions(self.ctx.apt)
                logger.info("✅ Updated %d version(s)", len(changes))
            elif args.vacuum:
                ledger.vacuum()
                logger.info("✅ Ledger compacted")
        except (LedgerError, OSError) as e:
            logger.info("❌ %s", e)
            return 1
        return 0

    def _list(self) -> None:
        entries = self.ctx.ledger.list_installed()
        if not entries:
            logger.info("No installations recorded")
            return
        for entry in entries:
            installed_on = (
                datetime.fromtimestamp(entry.install_date).strftime("%Y-%m-%d")
                if entry.install_date
                else "-"
            )
            logger.info(
                "  %-24s %-16s %-12s %s",
                entry.app_id,
                entry.version or "?",
                entry.install_method,
                installed_on,
            )
