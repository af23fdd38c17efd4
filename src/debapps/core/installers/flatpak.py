"""Flatpak installer backed by the Flathub remote."""

from debapps.constants import FLATHUB_REMOTE
from debapps.core.installers.base import BaseInstaller, InstallRecord, failure
from debapps.domain.types import (
    CatalogEntry,
    InstallMethod,
    LedgerEntry,
    OperationResult,
    VersionInfo,
)
from debapps.exceptions import (
    ConfigError,
    DebappsError,
    InstallVerificationError,
)
from debapps.logger import get_logger

logger = get_logger(__name__)


def flatpak_id_of(entry: CatalogEntry, record: LedgerEntry | None = None) -> str:
    """Flatpak application id from the ledger, the entry or its detection.

    Raises:
        ConfigError: If no id is configured

    """
    if record and record.metadata.get("flatpak_id"):
        return str(record.metadata["flatpak_id"])
    if entry.flatpak_id:
        return entry.flatpak_id
    if entry.detection.flatpak_packages:
        return entry.detection.flatpak_packages[0]
    msg = "No flatpak_id configured"
    raise ConfigError(msg, target=entry.id)


class FlatpakInstaller(BaseInstaller):
    """Install, update and uninstall Flathub applications."""

    method = InstallMethod.FLATPAK

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        flatpak_id = flatpak_id_of(entry)
        flatpak = self.ctx.flatpak
        if not flatpak.available():
            msg = "flatpak is not installed"
            raise InstallVerificationError(msg, target=entry.id)
        if not await flatpak.has_remote(FLATHUB_REMOTE):
            msg = f"The {FLATHUB_REMOTE} remote is not configured"
            raise InstallVerificationError(msg, target=entry.id)

        logger.info("Installing %s from %s...", flatpak_id, FLATHUB_REMOTE)
        await flatpak.install(flatpak_id, FLATHUB_REMOTE)
        if not await flatpak.is_installed(flatpak_id):
            msg = f"{flatpak_id} is not listed after installation"
            raise InstallVerificationError(msg, target=entry.id)

        return InstallRecord(
            version=await flatpak.get_version(flatpak_id),
            install_location="flatpak",
            metadata={"flatpak_id": flatpak_id},
        )

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        flatpak_id = flatpak_id_of(entry, record)
        if not await self.ctx.flatpak.is_installed(flatpak_id):
            logger.info("%s is not installed", flatpak_id)
            return
        await self.ctx.flatpak.uninstall(flatpak_id)

    async def upgrade(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Run ``flatpak update`` and refresh the ledger version."""
        try:
            entry = self.ctx.catalog.get(app_id)
            flatpak_id = flatpak_id_of(entry, self.ctx.ledger.get(app_id))
            logger.info("Upgrading %s...", entry.name)
            await self.ctx.flatpak.update(flatpak_id)
            version = await self.ctx.flatpak.get_version(flatpak_id)
        except DebappsError as e:
            logger.error("❌ Failed to upgrade %s: %s", app_id, e)
            return failure(app_id, str(e))
        return self.refresh_version(app_id, version)
