"""Installers for standalone .deb files and tarballs of .deb files."""

from pathlib import Path

from debapps.core.installers.base import BaseInstaller, InstallRecord
from debapps.domain.types import (
    CatalogEntry,
    InstallMethod,
    LedgerEntry,
    VersionInfo,
)
from debapps.exceptions import InstallVerificationError
from debapps.infrastructure.archive import extract_tarball, tarball_suffix
from debapps.logger import get_logger

logger = get_logger(__name__)

DEBS_DIR_NAME = "DEBS"


class DebInstaller(BaseInstaller):
    """Install a downloaded .deb with dpkg, then repair dependencies."""

    method = InstallMethod.DEB

    async def install_debs(
        self, entry: CatalogEntry, debs: list[Path], package: str
    ) -> str:
        """dpkg -i the files, always fix dependencies, verify the package.

        Returns:
            Installed version of package

        Raises:
            InstallVerificationError: If dpkg does not report package as
                installed afterwards

        """
        logger.info("Installing %d package(s) for %s...", len(debs), entry.name)
        await self.ctx.apt.install_debs(*debs)
        await self.ctx.apt.fix_broken()

        version = await self.ctx.apt.get_version(package) if package else ""
        if not version:
            msg = f"Package {package or '<unknown>'} is not installed after dpkg"
            raise InstallVerificationError(msg, target=entry.id)
        return version

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        info = self.require_info(entry, info)
        deb = await self.download(entry, info["download_url"], ".deb")
        package = entry.primary_package or await self.ctx.apt.deb_package_name(
            deb
        )
        version = await self.install_debs(entry, [deb], package)
        return InstallRecord(
            version=version,
            install_location="system",
            metadata={"package": package},
        )

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        package = (record.metadata.get("package") if record else "") or (
            entry.primary_package
        )
        if not package:
            logger.warning("⚠️  No package name known for %s", entry.name)
            return
        if not await self.ctx.apt.remove(package):
            logger.info("%s was not installed", package)

    async def _cleanup(self) -> None:
        await self.ctx.apt.cleanup()


def removal_pattern(entry: CatalogEntry) -> str:
    """remove_pattern, or ``<base>*`` with base cut at the first dash."""
    if entry.remove_pattern:
        return entry.remove_pattern
    base = entry.primary_package.split("-")[0]
    return f"{base}*" if base else ""


def find_debs(extract_dir: Path) -> list[Path]:
    """.deb files from the first DEBS directory, else from the root."""
    debs_dirs = sorted(p for p in extract_dir.rglob(DEBS_DIR_NAME) if p.is_dir())
    search_dir = debs_dirs[0] if debs_dirs else extract_dir
    return sorted(search_dir.glob("*.deb"))


class DebTarballInstaller(DebInstaller):
    """Install every .deb shipped in a tarball (LibreOffice style)."""

    method = InstallMethod.DEB_TARBALL

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        info = self.require_info(entry, info)
        url = info["download_url"]
        tarball = await self.download(entry, url, tarball_suffix(url))

        extract_dir = self.temp_dir(entry, "extract")
        await extract_tarball(self.ctx.runner, tarball, extract_dir)
        debs = find_debs(extract_dir)
        if not debs:
            msg = "No .deb files found in the downloaded archive"
            raise InstallVerificationError(msg, target=entry.id)

        version = await self.install_debs(entry, debs, entry.primary_package)
        return InstallRecord(
            version=version,
            install_location="system",
            metadata={
                "package": entry.primary_package,
                "remove_pattern": removal_pattern(entry),
            },
        )

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        pattern = (record.metadata.get("remove_pattern") if record else "") or (
            removal_pattern(entry)
        )
        if not pattern:
            logger.warning("⚠️  No removal pattern known for %s", entry.name)
            return
        removed = await self.ctx.apt.remove_matching(pattern)
        logger.info("Removed %d package(s) matching %s", len(removed), pattern)
