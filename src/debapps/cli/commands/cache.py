"""Cache command handler for the version cache."""

from argparse import Namespace

from debapps.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class CacheHandler(BaseCommandHandler):
    """Handler for the cache command."""

    async def execute(self, args: Namespace) -> int:
        if args.stats:
            stats = self.ctx.resolver.cache_stats()
            logger.info("📁 Cache directory: %s", stats["cache_directory"])
            logger.info("   Entries: %s", stats["total_entries"])
            logger.info("   Fresh:   %s", stats["fresh_entries"])
            logger.info("   Expired: %s", stats["expired_entries"])
            logger.info("   TTL:     %ss", stats["ttl_seconds"])
            return 0

        app_id = args.clear or None
        removed = self.ctx.resolver.clear_cache(app_id)
        if app_id:
            logger.info("✅ Cleared cache for %s", app_id)
        else:
            logger.info("✅ Cleared %d cache entries", removed)
        return 0
