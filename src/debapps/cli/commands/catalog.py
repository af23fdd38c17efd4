"""Catalog command handler for browsing available applications."""

from argparse import Namespace

from debapps.domain.types import CatalogEntry
from debapps.exceptions import ConfigError
from debapps.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class CatalogHandler(BaseCommandHandler):
    """Handler for the catalog command."""

    async def execute(self, args: Namespace) -> int:
        try:
            if args.info:
                self._show_info(self.ctx.catalog.get(args.info))
            elif args.category:
                category = self.ctx.catalog.get_category(args.category)
                logger.info("%s:", category.name)
                self._list(self.ctx.catalog.apps_in_category(category.id))
            elif args.search:
                matches = self.ctx.catalog.search(args.search)
                if not matches:
                    logger.info("No apps match '%s'", args.search)
                self._list(matches)
            else:
                self._show_all()
        except ConfigError as e:
            logger.info("❌ %s", e)
            return 1
        return 0

    def _show_all(self) -> None:
        logger.info("📋 Available apps (%d):", len(self.ctx.catalog))
        for category in self.ctx.catalog.categories:
            logger.info("")
            logger.info("%s:", category.name)
            self._list(self.ctx.catalog.apps_in_category(category.id))

    @staticmethod
    def _list(entries: list[CatalogEntry]) -> None:
        for entry in entries:
            logger.info(
                "  %-24s %-12s %s",
                entry.id,
                entry.install_method.value,
                entry.description,
            )

    @staticmethod
    def _show_info(entry: CatalogEntry) -> None:
        logger.info("📦 %s (%s)", entry.name, entry.id)
        if entry.description:
            logger.info("   %s", entry.description)
        logger.info("   Category: %s", entry.category or "-")
        logger.info("   Method:   %s", entry.install_method.value)
        if entry.source is not None:
            logger.info("   Source:   %s", entry.source.type.value)
        if entry.dependencies:
            logger.info("   Depends:  %s", ", ".join(entry.dependencies))
        for warning in entry.warnings:
            logger.info("   ⚠️  %s", warning)
