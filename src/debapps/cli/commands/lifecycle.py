"""Install, remove, reinstall and upgrade command handlers.

Apps are processed one at a time; a failure is reported and the next
app is still attempted.
"""

from argparse import Namespace

from debapps.core.installers import get_installer
from debapps.domain.types import OperationResult
from debapps.exceptions import ConfigError
from debapps.logger import get_logger

from .base import BaseCommandHandler
from .helpers import parse_targets, summarize

logger = get_logger(__name__)


class LifecycleHandler(BaseCommandHandler):
    """Run one installer lifecycle operation over the given apps."""

    operation = ""
    action = ""

    async def run_operation(self, app_id: str) -> OperationResult:
        try:
            installer = get_installer(self.ctx, app_id)
        except ConfigError as e:
            return OperationResult(success=False, app_id=app_id, error=str(e))
        return await getattr(installer, self.operation)(app_id)

    async def select_targets(self, args: Namespace) -> list[str]:
        return parse_targets(args.targets)

    async def execute(self, args: Namespace) -> int:
        targets = await self.select_targets(args)
        if not targets:
            logger.info("Nothing to %s", self.operation)
            return 0

        results = []
        for app_id in targets:
            results.append(await self.run_operation(app_id))
        return summarize(results, self.action)


class InstallHandler(LifecycleHandler):
    """Handler for the install command."""

    operation = "install"
    action = "Install"


class RemoveHandler(LifecycleHandler):
    """Handler for the remove command."""

    operation = "remove"
    action = "Remove"


class ReinstallHandler(LifecycleHandler):
    """Handler for the reinstall command."""

    operation = "reinstall"
    action = "Reinstall"


class UpgradeHandler(LifecycleHandler):
    """Handler for the upgrade command.

    Without targets, every ledger app with a newer version is upgraded.
    """

    operation = "upgrade"
    action = "Upgrade"

    async def select_targets(self, args: Namespace) -> list[str]:
        targets = parse_targets(args.targets)
        if targets:
            return targets

        logger.info("Checking installed apps for upgrades...")
        upgradeable = []
        for record in self.ctx.ledger.list_installed():
            if record.app_id not in self.ctx.catalog:
                logger.debug("Skipping %s: not in catalog", record.app_id)
                continue
            if await self.ctx.detector.is_upgradeable(record.app_id):
                upgradeable.append(record.app_id)
        if not upgradeable:
            logger.info("✅ All installed apps are up to date")
        return upgradeable
