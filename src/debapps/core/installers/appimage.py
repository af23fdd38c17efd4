"""AppImage installer."""

from pathlib import Path

from debapps.constants import APPIMAGE_EXTENSION
from debapps.core.installers.base import BaseInstaller, InstallRecord
from debapps.domain.types import (
    CatalogEntry,
    InstallMethod,
    LedgerEntry,
    VersionInfo,
)
from debapps.exceptions import InstallVerificationError
from debapps.logger import get_logger

logger = get_logger(__name__)


class AppImageInstaller(BaseInstaller):
    """Download an AppImage and hand it to the integration engine."""

    method = InstallMethod.APPIMAGE

    def install_dir(self, entry: CatalogEntry) -> Path:
        """``<opt>/<name>``, where name comes from install_location or the id."""
        name = Path(entry.install_location).name if entry.install_location else ""
        return self.ctx.settings.system.opt / (name or entry.id)

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        info = self.require_info(entry, info)
        appimage = await self.download(
            entry, info["download_url"], APPIMAGE_EXTENSION
        )

        install_dir = self.install_dir(entry)
        lines = await self.ctx.appimage.setup(appimage, install_dir, entry.name)
        if not lines or not Path(lines[0]).is_file():
            msg = "AppImage missing after integration"
            raise InstallVerificationError(msg, target=entry.id)

        return InstallRecord(
            version=info["version"],
            install_location=str(install_dir),
            metadata={"appimage": True},
            files=[
                (line, self.ctx.appimage.classify(line, index))
                for index, line in enumerate(lines)
            ],
        )

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        install_dir = (
            Path(record.install_location)
            if record and record.install_location
            else self.install_dir(entry)
        )
        if not install_dir.exists():
            logger.warning(
                "⚠️  %s not found at %s, nothing to remove", entry.name, install_dir
            )
            return
        await self.ctx.appimage.remove(install_dir)
