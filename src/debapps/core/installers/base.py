"""Template lifecycle shared by every installer strategy.

Subclasses implement only the mechanism-specific steps:

- ``_install`` performs the install and returns an InstallRecord once the
  detection signal confirms it,
- ``_teardown`` undoes the install,
- ``_cleanup`` runs after removal (package managers use it for
  autoremove/autoclean).

Everything else (warnings, confirmation, dependency checks, version
resolution, temporary files, ledger bookkeeping) lives here.
"""

import contextlib
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from debapps.core.context import AppContext
from debapps.domain.types import (
    CatalogEntry,
    FileType,
    InstallMethod,
    LedgerEntry,
    OperationResult,
    VersionInfo,
)
from debapps.exceptions import CommandError, DebappsError, ResolutionError
from debapps.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InstallRecord:
    """What a finished install writes to the ledger."""

    version: str
    install_location: str
    metadata: dict[str, Any] = field(default_factory=dict)
    files: list[tuple[str, FileType]] = field(default_factory=list)
    method: str = ""


def success(app_id: str, version: str = "") -> OperationResult:
    result = OperationResult(success=True, app_id=app_id)
    if version:
        result["version"] = version
    return result


def failure(app_id: str, error: str) -> OperationResult:
    return OperationResult(success=False, app_id=app_id, error=error)


def cancelled(app_id: str) -> OperationResult:
    return OperationResult(success=False, app_id=app_id, cancelled=True)


class BaseInstaller(ABC):
    """Install, remove, reinstall and upgrade apps of one InstallMethod."""

    method: ClassVar[InstallMethod]

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self._temp_paths: list[Path] = []

    # --- lifecycle -------------------------------------------------------

    async def install(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Install an app from the catalog.

        Args:
            app_id: Catalog id
            confirm: Ask the user before installing

        Returns:
            Operation result; the ledger is only written on success

        """
        try:
            entry = self.ctx.catalog.get(app_id)
        except DebappsError as e:
            return failure(app_id, str(e))

        self._show_warnings(entry)
        if confirm and not self.ctx.confirm(f"Install {entry.name}?"):
            logger.info("Installation of %s cancelled", entry.name)
            return cancelled(app_id)

        if self.ctx.ledger.is_installed(app_id):
            logger.info("%s is already installed, removing it first", entry.name)
            await self.remove(app_id, confirm=False)
        elif not await self._accept_existing(entry, confirm):
            logger.info("Installation of %s cancelled", entry.name)
            return cancelled(app_id)

        logger.info("Installing %s...", entry.name)
        try:
            await self.ensure_dependencies(entry)
            info = await self.resolve(entry)
            record = await self._install(entry, info)
        except (DebappsError, OSError) as e:
            logger.error("❌ Failed to install %s: %s", entry.name, e)
            return failure(app_id, str(e))
        finally:
            self._remove_temp_paths()

        try:
            self._record(entry, record)
        except DebappsError as e:
            logger.error("❌ Installed %s but could not record it: %s", entry.name, e)
            return failure(app_id, str(e))
        logger.info("✅ %s %s installed", entry.name, record.version)
        return success(app_id, record.version)

    async def remove(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Remove an installed app.

        The ledger row is dropped even when teardown fails, so a broken
        install can always be cleared.

        Args:
            app_id: Catalog id
            confirm: Ask the user before removing

        """
        try:
            entry = self.ctx.catalog.get(app_id)
        except DebappsError as e:
            return failure(app_id, str(e))

        if confirm and not self.ctx.confirm(f"Remove {entry.name}?"):
            logger.info("Removal of %s cancelled", entry.name)
            return cancelled(app_id)

        record = self.ctx.ledger.get(app_id)
        location = (
            record.install_location
            if record and record.install_location
            else entry.install_location
        )

        logger.info("Removing %s...", entry.name)
        error = ""
        try:
            try:
                await self._teardown(entry, record, location)
            except (DebappsError, OSError) as e:
                logger.error("❌ Failed to remove %s: %s", entry.name, e)
                error = str(e)
            finally:
                self.ctx.ledger.remove(app_id)
        finally:
            await self._cleanup()
        if error:
            return failure(app_id, error)
        logger.info("✅ %s removed", entry.name)
        return success(app_id)

    async def reinstall(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Remove then install; a failed removal is only a warning."""
        try:
            entry = self.ctx.catalog.get(app_id)
        except DebappsError as e:
            return failure(app_id, str(e))

        if confirm and not self.ctx.confirm(f"Reinstall {entry.name}?"):
            return cancelled(app_id)

        removed = await self.remove(app_id, confirm=False)
        if not removed.get("success"):
            logger.warning(
                "⚠️  Removal failed, continuing with installation: %s",
                removed.get("error", ""),
            )
        return await self.install(app_id, confirm=False)

    async def upgrade(self, app_id: str, confirm: bool = True) -> OperationResult:
        """Upgrade an app; mechanisms without an in-place path reinstall."""
        return await self.reinstall(app_id, confirm=confirm)

    # --- shared steps ----------------------------------------------------

    def _show_warnings(self, entry: CatalogEntry) -> None:
        for warning in entry.warnings:
            logger.warning("⚠️  %s: %s", entry.name, warning)

    async def _accept_existing(self, entry: CatalogEntry, confirm: bool) -> bool:
        """Warn about a copy installed outside debapps; False if declined."""
        try:
            found = await self.ctx.detector.detect(entry.id, check_latest=False)
        except DebappsError as e:
            logger.debug("Pre-install detection failed for %s: %s", entry.id, e)
            return True
        if not found["installed"]:
            return True

        logger.warning(
            "⚠️  %s is already installed (%s, %s)",
            entry.name,
            found["method"],
            found["location"] or found["version"] or "unknown",
        )
        if not confirm:
            return True
        return self.ctx.confirm(
            f"{entry.name} is already installed via {found['method']}. "
            "Install anyway?"
        )

    async def ensure_dependencies(self, entry: CatalogEntry) -> None:
        """Install missing apt dependencies; failures are only warnings."""
        for dependency in entry.dependencies:
            if await self.ctx.apt.dependency_present(dependency):
                logger.debug("Dependency %s already present", dependency)
                continue
            logger.info("Installing dependency %s...", dependency)
            try:
                await self.ctx.apt.install(dependency)
            except CommandError as e:
                logger.warning(
                    "⚠️  Could not install dependency %s: %s", dependency, e
                )

    async def resolve(self, entry: CatalogEntry) -> VersionInfo | None:
        """Resolve version and URL; entries without a source get None.

        Raises:
            ResolutionError: If the resolver reports an error

        """
        if entry.source is None:
            return None
        info = await self.ctx.resolver.resolve(entry.id)
        if "error" in info:
            raise ResolutionError(info["error"], target=entry.id)
        logger.debug("Resolved %s %s", entry.id, info["version"])
        return info

    @staticmethod
    def require_info(entry: CatalogEntry, info: VersionInfo | None) -> VersionInfo:
        """Return info, or raise when the entry has no source.

        Raises:
            ResolutionError: If info is None

        """
        if info is None:
            msg = "Catalog entry has no download source"
            raise ResolutionError(msg, target=entry.id)
        return info

    async def download(self, entry: CatalogEntry, url: str, suffix: str) -> Path:
        """Download url to ``<tmp>/<app_id><suffix>``; removed after install."""
        tmp_dir = self.ctx.settings.directory.tmp
        tmp_dir.mkdir(parents=True, exist_ok=True)
        dest = tmp_dir / f"{entry.id}{suffix}"
        self._temp_paths.append(dest)
        logger.info("Downloading %s...", entry.name)
        return await self.ctx.downloads.download(url, dest)

    def temp_dir(self, entry: CatalogEntry, name: str) -> Path:
        """Fresh scratch directory under tmp, removed after install."""
        path = self.ctx.settings.directory.tmp / f"{entry.id}-{name}"
        shutil.rmtree(path, ignore_errors=True)
        path.mkdir(parents=True)
        self._temp_paths.append(path)
        return path

    def _remove_temp_paths(self) -> None:
        for path in self._temp_paths:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path, ignore_errors=True)
            else:
                with contextlib.suppress(FileNotFoundError):
                    path.unlink()
        self._temp_paths.clear()

    def _record(self, entry: CatalogEntry, record: InstallRecord) -> None:
        self.ctx.ledger.record(
            LedgerEntry(
                app_id=entry.id,
                app_name=entry.name,
                install_method=record.method or self.method.value,
                version=record.version,
                install_location=record.install_location,
                metadata=record.metadata,
            ),
            record.files,
        )

    def refresh_version(self, app_id: str, version: str) -> OperationResult:
        """Store an upgraded version in the ledger."""
        if not self.ctx.ledger.update_version(app_id, version):
            logger.warning("⚠️  %s is not tracked in the ledger", app_id)
        logger.info("✅ %s upgraded to %s", app_id, version)
        return success(app_id, version)

    # --- mechanism hooks -------------------------------------------------

    @abstractmethod
    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        """Install and verify; raise DebappsError on failure."""

    @abstractmethod
    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        """Undo an install; raise DebappsError on failure."""

    async def _cleanup(self) -> None:
        """Post-removal housekeeping."""
