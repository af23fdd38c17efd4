"""AppImage desktop integration.

setup() moves an AppImage under /opt/<app>, links it into the bin
directory, installs its desktop file and icons, and logs every created
path to ``install.log``. remove() replays that manifest, refusing to touch
anything outside the directories debapps writes to.
"""

import contextlib
import shutil
from pathlib import Path

from debapps.config.settings import SystemPaths
from debapps.constants import (
    APPIMAGE_EXTENSION,
    APPIMAGE_EXTRACT_DIR,
    APPIMAGE_MANIFEST_NAME,
    ICON_SIZES,
)
from debapps.domain.types import FileType
from debapps.exceptions import InstallVerificationError, RemovalSafetyError
from debapps.infrastructure.desktop_entry import (
    DesktopDatabase,
    patch_desktop_entry,
    read_desktop_key,
)
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)


def _append_manifest(manifest: Path, path: Path | str) -> None:
    with manifest.open("a", encoding="utf-8") as f:
        f.write(f"{path}\n")


def _find_desktop_file(extract_dir: Path) -> Path | None:
    top_level = sorted(extract_dir.glob("*.desktop"))
    if top_level:
        return top_level[0]
    nested = sorted(p for p in extract_dir.rglob("*.desktop") if p.is_file())
    return nested[0] if nested else None


def _find_icon(extract_dir: Path, icon_name: str, size: str = "") -> Path | None:
    """Locate a PNG icon, optionally one stored under a size directory."""
    if size:
        candidates = [
            p for p in extract_dir.rglob(f"{icon_name}.png") if size in p.parts
        ]
    else:
        candidates = [
            p for p in extract_dir.rglob(f"*{icon_name}*.png") if p.is_file()
        ]
    return sorted(candidates)[0] if candidates else None


class AppImageIntegrator:
    """Install and remove AppImages with desktop integration."""

    def __init__(
        self,
        runner: CommandRunner,
        desktop: DesktopDatabase,
        system: SystemPaths,
    ) -> None:
        self.runner = runner
        self.desktop = desktop
        self.system = system

    @property
    def opt_root(self) -> str:
        return f"{str(self.system.opt).rstrip('/')}/"

    def classify(self, path: str, index: int) -> FileType:
        """File type of a manifest line, by position and location."""
        if index == 0:
            return FileType.BINARY
        if path.startswith(f"{str(self.system.bin).rstrip('/')}/"):
            return FileType.SYMLINK
        if path.endswith(".desktop"):
            return FileType.DESKTOP
        return FileType.ICON

    @staticmethod
    def read_manifest(install_dir: Path) -> list[str]:
        """Non-empty lines of install_dir/install.log."""
        manifest = install_dir / APPIMAGE_MANIFEST_NAME
        try:
            content = manifest.read_text(encoding="utf-8")
        except OSError:
            return []
        return [line.strip() for line in content.splitlines() if line.strip()]

    # --- setup -----------------------------------------------------------

    async def setup(
        self, appimage: Path, install_dir: Path, app_name: str
    ) -> list[str]:
        """Integrate an AppImage.

        Args:
            appimage: Downloaded AppImage
            install_dir: Target directory, normally /opt/<app>
            app_name: Display name, used in log messages

        Returns:
            Manifest lines, AppImage first

        Raises:
            InstallVerificationError: If the AppImage cannot be extracted
                or ships no desktop file

        """
        if not appimage.is_file():
            msg = f"AppImage not found: {appimage}"
            raise InstallVerificationError(msg, target=app_name)

        logger.info("Setting up AppImage %s in %s", appimage.name, install_dir)
        install_dir.mkdir(parents=True, exist_ok=True)
        permanent_path = install_dir / appimage.name
        shutil.move(str(appimage), permanent_path)

        manifest = install_dir / APPIMAGE_MANIFEST_NAME
        manifest.write_text(f"{permanent_path}\n", encoding="utf-8")
        permanent_path.chmod(0o755)

        link_name = permanent_path.name.removesuffix(APPIMAGE_EXTENSION).lower()
        self.system.bin.mkdir(parents=True, exist_ok=True)
        link_path = self.system.bin / link_name
        if link_path.is_symlink() or link_path.exists():
            link_path.unlink()
        link_path.symlink_to(permanent_path)
        _append_manifest(manifest, link_path)
        logger.debug("Symlink created: %s", link_path)

        extract_dir = install_dir / APPIMAGE_EXTRACT_DIR
        try:
            await self._integrate_desktop(
                permanent_path, install_dir, extract_dir, manifest, app_name
            )
        finally:
            shutil.rmtree(extract_dir, ignore_errors=True)

        logger.info("✅ %s desktop integration complete", app_name)
        return self.read_manifest(install_dir)

    async def _integrate_desktop(
        self,
        appimage: Path,
        install_dir: Path,
        extract_dir: Path,
        manifest: Path,
        app_name: str,
    ) -> None:
        result = await self.runner.run(
            str(appimage), "--appimage-extract", cwd=install_dir
        )
        if not result.ok or not extract_dir.is_dir():
            msg = "AppImage extraction failed"
            if result.stderr:
                msg += f": {result.stderr}"
            raise InstallVerificationError(msg, target=app_name)

        desktop_source = _find_desktop_file(extract_dir)
        if desktop_source is None:
            msg = "No .desktop file found inside the AppImage"
            raise InstallVerificationError(msg, target=app_name)
        logger.debug("Desktop file found: %s", desktop_source)

        # Extracted desktop files may be symlinks into usr/share
        original = desktop_source.read_text(encoding="utf-8", errors="replace")
        desktop_source.unlink()
        desktop_source.write_text(
            patch_desktop_entry(original, appimage), encoding="utf-8"
        )

        await self.desktop.validate(desktop_source)
        installed_desktop = await self.desktop.install(desktop_source)
        _append_manifest(manifest, installed_desktop)

        icon_name = read_desktop_key(installed_desktop, "Icon")
        generic_icon = (
            _find_icon(extract_dir, icon_name) if icon_name else None
        )
        if generic_icon is None:
            logger.warning(
                "⚠️  No icon image found for %s, skipping icons", app_name
            )
        else:
            await self._install_icons(
                extract_dir, icon_name, generic_icon, manifest
            )

        await self.desktop.refresh()

    async def _install_icons(
        self,
        extract_dir: Path,
        icon_name: str,
        generic_icon: Path,
        manifest: Path,
    ) -> None:
        can_resize = self.runner.which("convert") is not None
        for size in ICON_SIZES:
            source_icon = _find_icon(extract_dir, icon_name, size) or generic_icon
            target_dir = self.system.icons / size / "apps"
            target = target_dir / f"{icon_name}.png"
            _append_manifest(manifest, target)
            target_dir.mkdir(parents=True, exist_ok=True)

            if can_resize:
                result = await self.runner.run(
                    "convert", str(source_icon), "-resize", size, str(target)
                )
                if result.ok:
                    continue
            shutil.copyfile(source_icon, target)
        logger.debug("Installed %d icon sizes for %s", len(ICON_SIZES), icon_name)

    # --- removal ---------------------------------------------------------

    def _check_manifest(self, manifest: Path, lines: list[str]) -> None:
        if (
            manifest.suffix != ".log"
            or ".." in manifest.parts
            or not str(manifest).startswith(self.opt_root)
        ):
            msg = "Manifest must be a .log file under the opt directory"
            raise RemovalSafetyError(msg, target=str(manifest))

        if not lines:
            msg = "Manifest is empty"
            raise RemovalSafetyError(msg, target=str(manifest))

        first = lines[0]
        if (
            not first.endswith(APPIMAGE_EXTENSION)
            or ".." in first
            or not first.startswith(self.opt_root)
        ):
            msg = "First manifest entry must be an AppImage under opt"
            raise RemovalSafetyError(msg, target=first)

    def _is_removable(self, line: str) -> bool:
        """True for paths strictly below a removal root, never the root itself."""
        if ".." in line:
            return False
        normalized = f"{Path(line)}/"
        roots = self.system.removal_roots
        return normalized.startswith(roots) and normalized not in roots

    async def remove(self, install_dir: Path) -> list[str]:
        """Remove every manifest path, then the app directory.

        Args:
            install_dir: App directory holding install.log

        Returns:
            Paths that were removed

        Raises:
            RemovalSafetyError: If the manifest is missing, misplaced or
                does not start with an AppImage under opt

        """
        manifest = install_dir / APPIMAGE_MANIFEST_NAME
        if not manifest.is_file():
            msg = "Installation manifest not found"
            raise RemovalSafetyError(msg, target=str(manifest))

        lines = self.read_manifest(install_dir)
        self._check_manifest(manifest, lines)

        removed: list[str] = []
        seen: set[str] = set()
        for line in lines:
            if line in seen:
                continue
            seen.add(line)
            if not self._is_removable(line):
                logger.warning("⚠️  Skipping invalid or unsafe path: %s", line)
                continue

            path = Path(line)
            if path.is_symlink() or path.is_file():
                path.unlink()
            elif path.is_dir():
                shutil.rmtree(path)
            else:
                continue
            removed.append(line)
            logger.debug("Removed %s", line)

        with contextlib.suppress(FileNotFoundError):
            shutil.rmtree(install_dir)
        await self.desktop.refresh()
        logger.info("✅ Removed %d files from %s", len(removed), install_dir)
        return removed
