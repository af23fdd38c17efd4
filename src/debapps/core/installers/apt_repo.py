"""APT installer for third-party repositories and distribution packages.

An ``apt_repository`` source adds the vendor's signing key, sources.list.d
entry and optional pin before installing. An ``apt_package`` source
installs straight from the configured archives and is recorded in the
ledger with method "apt".
"""

import contextlib
from pathlib import Path

from debapps.core.installers.base import (
    BaseInstaller,
    InstallRecord,
    failure,
)
from debapps.domain.types import (
    AptPackageSource,
    AptRepositorySource,
    CatalogEntry,
    InstallMethod,
    LedgerEntry,
    OperationResult,
    VersionInfo,
)
from debapps.exceptions import (
    CommandError,
    ConfigError,
    DebappsError,
    InstallVerificationError,
)
from debapps.logger import get_logger

logger = get_logger(__name__)

APT_PACKAGE_METHOD = "apt"


def _source_of(entry: CatalogEntry) -> AptRepositorySource | AptPackageSource:
    if isinstance(entry.source, AptRepositorySource | AptPackageSource):
        return entry.source
    msg = "apt_repo entries need an apt_repository or apt_package source"
    raise ConfigError(msg, target=entry.id)


class AptRepoInstaller(BaseInstaller):
    """Install packages through apt-get."""

    method = InstallMethod.APT_REPO

    async def _add_repository(
        self, entry: CatalogEntry, source: AptRepositorySource
    ) -> None:
        system = self.ctx.settings.system
        logger.info("Adding APT repository for %s...", entry.name)

        key_data = await self.ctx.downloads.fetch_bytes(source.key_url)
        await self.ctx.apt.install_signing_key(
            key_data, source.key_name, system.apt_keyrings
        )
        repo_line = self.ctx.apt.render_repo_line(source.repo_line)
        self.ctx.apt.write_source(repo_line, source.repo_file, system.apt_sources)
        if source.preferences_file and source.preferences_content:
            self.ctx.apt.write_preferences(
                source.preferences_file, source.preferences_content
            )
        await self.ctx.apt.update()

    async def _remove_conflicts(self, entry: CatalogEntry) -> None:
        for package in entry.remove_conflicts:
            if await self.ctx.apt.is_installed(package):
                logger.info("Removing conflicting package %s...", package)
                await self.ctx.apt.remove(package)

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        source = _source_of(entry)
        packages = source.package_name.split()

        if isinstance(source, AptRepositorySource):
            await self._add_repository(entry, source)
        await self._remove_conflicts(entry)
        await self.ctx.apt.install(*packages)

        version = await self.ctx.apt.get_version(packages[0])
        if not version:
            msg = f"Package {packages[0]} is not installed after apt-get"
            raise InstallVerificationError(msg, target=entry.id)

        metadata = {"package": source.package_name}
        if isinstance(source, AptRepositorySource):
            metadata["repo"] = source.repo_file
            method = self.method.value
        else:
            method = APT_PACKAGE_METHOD
        return InstallRecord(
            version=version,
            install_location="system",
            metadata=metadata,
            method=method,
        )

    def _remove_repository(
        self, entry: CatalogEntry, source: AptRepositorySource
    ) -> bool:
        if not self.ctx.confirm(f"Remove the APT repository for {entry.name}?"):
            return False

        system = self.ctx.settings.system
        paths = [
            system.apt_sources / source.repo_file,
            system.apt_keyrings / f"{source.key_name}.gpg",
        ]
        if source.preferences_file:
            paths.append(Path(source.preferences_file))
        for path in paths:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
                logger.debug("Removed %s", path)
        logger.info("Repository for %s removed", entry.name)
        return True

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        source = _source_of(entry)
        for package in source.package_name.split():
            await self.ctx.apt.remove(package)

        if isinstance(source, AptRepositorySource) and self._remove_repository(
            entry, source
        ):
            try:
                await self.ctx.apt.update()
            except CommandError as e:
                logger.warning("⚠️  apt-get update failed: %s", e)

    async def _cleanup(self) -> None:
        await self.ctx.apt.cleanup()

    async def upgrade(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Upgrade in place with ``apt-get install --only-upgrade``."""
        try:
            entry = self.ctx.catalog.get(app_id)
            packages = _source_of(entry).package_name.split()
            await self.ctx.apt.update()
            logger.info("Upgrading %s...", entry.name)
            await self.ctx.apt.upgrade(*packages)
            version = await self.ctx.apt.get_version(packages[0])
        except DebappsError as e:
            logger.error("❌ Failed to upgrade %s: %s", app_id, e)
            return failure(app_id, str(e))

        if not version:
            return failure(app_id, f"Package {packages[0]} is not installed")
        return self.refresh_version(app_id, version)
