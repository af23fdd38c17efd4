"""Multi-strategy detection of installed applications.

Probes run in a fixed order and the first hit wins:

    ledger → binary on PATH → dpkg → snap → flatpak → desktop file
"""

from collections.abc import Sequence
from pathlib import Path

from debapps.constants import (
    BINARY_VERSION_TIMEOUT_SECONDS,
    DESKTOP_SEARCH_DIRS,
    GUI_APPS,
    VERSION_UNKNOWN,
)
from debapps.core.ledger import InstallLedger
from debapps.core.resolver import VersionResolver
from debapps.domain.catalog import Catalog
from debapps.domain.types import CatalogEntry, DetectionResult
from debapps.domain.version import extract_version, is_upgradeable
from debapps.infrastructure.apt import AptClient
from debapps.infrastructure.flatpak import FlatpakClient
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)


def not_installed() -> DetectionResult:
    return DetectionResult(
        installed=False,
        method="none",
        version="",
        location="",
        upgradeable=False,
        latest_version="",
    )


def _found(method: str, version: str, location: str) -> DetectionResult:
    result = not_installed()
    result.update(
        installed=True, method=method, version=version, location=location
    )
    return result


class DetectionEngine:
    """Decide whether, how and at which version an app is installed."""

    def __init__(
        self,
        catalog: Catalog,
        ledger: InstallLedger,
        resolver: VersionResolver,
        runner: CommandRunner,
        apt: AptClient,
        flatpak: FlatpakClient,
        desktop_dirs: Sequence[Path] | None = None,
    ) -> None:
        self.catalog = catalog
        self.ledger = ledger
        self.resolver = resolver
        self.runner = runner
        self.apt = apt
        self.flatpak = flatpak
        self.desktop_dirs = (
            list(desktop_dirs)
            if desktop_dirs is not None
            else [Path(d).expanduser() for d in DESKTOP_SEARCH_DIRS]
        )

    # --- probes ----------------------------------------------------------

    def _probe_ledger(self, entry: CatalogEntry) -> DetectionResult | None:
        record = self.ledger.get(entry.id)
        if record is None:
            return None
        return _found(
            record.install_method,
            record.version or VERSION_UNKNOWN,
            record.install_location,
        )

    async def binary_version(self, binary: str) -> str:
        """Version printed by ``--version`` or ``-v``, else "unknown".

        GUI applications are never executed since they would open a window.
        """
        name = Path(binary).name
        if name in GUI_APPS:
            return VERSION_UNKNOWN

        for flag in ("--version", "-v"):
            result = await self.runner.run(
                binary, flag, timeout=BINARY_VERSION_TIMEOUT_SECONDS
            )
            output = (result.stdout or result.stderr).strip()
            first_line = output.splitlines()[0] if output else ""
            version = extract_version(first_line)
            if version != VERSION_UNKNOWN:
                return version
        return VERSION_UNKNOWN

    async def _probe_binary(
        self, entry: CatalogEntry
    ) -> DetectionResult | None:
        for binary in entry.detection.binaries:
            path = self.runner.which(binary)
            if path:
                return _found("binary", await self.binary_version(binary), path)
        return None

    async def _probe_dpkg(
        self, entry: CatalogEntry
    ) -> DetectionResult | None:
        for package in entry.detection.apt_packages:
            version = await self.apt.get_version(package)
            if version:
                return _found("apt", version, "system")
        return None

    async def _probe_snap(
        self, entry: CatalogEntry
    ) -> DetectionResult | None:
        if not entry.detection.snap_packages or not self.runner.which("snap"):
            return None
        for package in entry.detection.snap_packages:
            result = await self.runner.run("snap", "list", package)
            for line in result.stdout.splitlines()[1:]:
                columns = line.split()
                if len(columns) > 1 and columns[0] == package:
                    return _found("snap", columns[1], "snap")
        return None

    async def _probe_flatpak(
        self, entry: CatalogEntry
    ) -> DetectionResult | None:
        if not entry.detection.flatpak_packages or not self.flatpak.available():
            return None
        for package in entry.detection.flatpak_packages:
            if await self.flatpak.is_installed(package):
                version = await self.flatpak.get_version(package)
                return _found("flatpak", version, "flatpak")
        return None

    def _probe_desktop(self, entry: CatalogEntry) -> DetectionResult | None:
        for desktop_file in entry.detection.desktop_files:
            for directory in self.desktop_dirs:
                if (directory / desktop_file).is_file():
                    return _found("desktop", "", "manual")
        return None

    # --- public API ------------------------------------------------------

    async def detect(
        self, app_id: str, check_latest: bool = True
    ) -> DetectionResult:
        """Detect an app and, when installed, its upgradeability.

        Args:
            app_id: Catalog id
            check_latest: Resolve the latest version for installed apps

        Returns:
            Flat detection result

        Raises:
            ConfigError: If app_id is not in the catalog

        """
        entry = self.catalog.get(app_id)

        result = self._probe_ledger(entry)
        if result is None:
            result = await self._probe_binary(entry)
        if result is None:
            result = await self._probe_dpkg(entry)
        if result is None:
            result = await self._probe_snap(entry)
        if result is None:
            result = await self._probe_flatpak(entry)
        if result is None:
            result = self._probe_desktop(entry)
        if result is None:
            return not_installed()

        logger.debug(
            "Detected %s via %s (%s)", app_id, result["method"], result["version"]
        )
        if check_latest:
            latest = await self.resolver.resolve(app_id)
            if "version" in latest:
                result["latest_version"] = latest["version"]
                result["upgradeable"] = is_upgradeable(
                    result["version"], latest["version"]
                )
            else:
                logger.debug("Latest version unavailable for %s", app_id)
        return result

    async def list_all_installed(self) -> list[dict[str, object]]:
        """Detect every catalog app and return the installed ones."""
        installed = []
        for entry in self.catalog:
            result = await self.detect(entry.id, check_latest=False)
            if result["installed"]:
                installed.append(
                    {"app_id": entry.id, "app_name": entry.name, **result}
                )
        return installed

    async def is_app_installed(self, app_id: str) -> bool:
        return (await self.detect(app_id, check_latest=False))["installed"]

    async def get_installed_version(self, app_id: str) -> str:
        return (await self.detect(app_id, check_latest=False))["version"]

    async def is_upgradeable(self, app_id: str) -> bool:
        return (await self.detect(app_id))["upgradeable"]
