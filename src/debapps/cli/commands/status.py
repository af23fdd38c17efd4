"""Status command handler: print detection results."""

from argparse import Namespace

from debapps.exceptions import ConfigError
from debapps.logger import get_logger

from .base import BaseCommandHandler
from .helpers import parse_targets

logger = get_logger(__name__)


class StatusHandler(BaseCommandHandler):
    """Handler for the status command."""

    async def execute(self, args: Namespace) -> int:
        targets = parse_targets(args.targets)
        check_latest = not args.no_check

        if not targets:
            installed = await self.ctx.detector.list_all_installed()
            if not installed:
                logger.info("No catalog apps are installed")
                return 0
            targets = [str(item["app_id"]) for item in installed]

        status = 0
        for app_id in targets:
            try:
                result = await self.ctx.detector.detect(
                    app_id, check_latest=check_latest
                )
            except ConfigError as e:
                logger.info("❌ %s", e)
                status = 1
                continue
            logger.info("%s", self._format_line(app_id, result))
        return status

    @staticmethod
    def _format_line(app_id: str, result: dict) -> str:
        if not result["installed"]:
            return f"  {app_id:<24} not installed"

        line = (
            f"✅ {app_id:<24} {result['version'] or '?':<16} "
            f"[{result['method']}, {result['location']}]"
        )
        if result["upgradeable"]:
            line += f"  → {result['latest_version']} available"
        return line
