"""Desktop entry patching and desktop/icon cache refreshes.

Desktop files shipped inside AppImages are rewritten so that they launch
the installed AppImage and show up in application menus.
"""

import shutil
from pathlib import Path

from debapps.config.settings import SystemPaths
from debapps.constants import DESKTOP_DEFAULT_CATEGORIES
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)

DESKTOP_SECTION_HEADER = "[Desktop Entry]"


def _has_key(lines: list[str], key: str) -> bool:
    return any(line.startswith(f"{key}=") for line in lines)


def patch_desktop_entry(content: str, exec_path: Path | str) -> str:
    """Rewrite a desktop file so that it launches exec_path.

    - Exec is replaced with ``<exec_path> %U``
    - Type=Application, Categories and StartupNotify are added if missing
    - Terminal is forced to false
    - NoDisplay=true is dropped

    Args:
        content: Original desktop file content
        exec_path: Absolute path of the installed executable

    Returns:
        Patched content

    """
    lines = [
        line for line in content.splitlines() if line.strip() != "NoDisplay=true"
    ]

    patched = []
    for line in lines:
        if line.startswith("Exec="):
            line = f"Exec={exec_path} %U"
        elif line.startswith("Terminal="):
            line = "Terminal=false"
        patched.append(line)

    missing = []
    if not _has_key(lines, "Type"):
        missing.append("Type=Application")
    if not _has_key(lines, "Terminal"):
        missing.append("Terminal=false")
    if not _has_key(lines, "Categories"):
        logger.warning("⚠️  Desktop file missing Categories field, adding default")
        missing.append(f"Categories={DESKTOP_DEFAULT_CATEGORIES}")
    if not _has_key(lines, "StartupNotify"):
        missing.append("StartupNotify=true")
    if not _has_key(lines, "Exec"):
        missing.append(f"Exec={exec_path} %U")

    if missing:
        try:
            header_index = patched.index(DESKTOP_SECTION_HEADER)
        except ValueError:
            patched.insert(0, DESKTOP_SECTION_HEADER)
            header_index = 0
        patched[header_index + 1 : header_index + 1] = missing

    return "\n".join(patched) + "\n"


def read_desktop_key(desktop_file: Path, key: str) -> str:
    """Return the first value of key in a desktop file, or ""."""
    try:
        content = desktop_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""
    prefix = f"{key}="
    for line in content.splitlines():
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    return ""


class DesktopDatabase:
    """Desktop file installation and cache refreshes."""

    def __init__(self, runner: CommandRunner, system: SystemPaths) -> None:
        self.runner = runner
        self.system = system

    async def validate(self, desktop_file: Path) -> bool:
        """Run desktop-file-validate when available.

        Returns:
            False only when the validator ran and reported problems

        """
        if not self.runner.which("desktop-file-validate"):
            return True
        result = await self.runner.run("desktop-file-validate", str(desktop_file))
        if not result.ok:
            logger.warning(
                "⚠️  Desktop file has validation warnings (installing anyway)"
            )
        return result.ok

    async def install(self, desktop_file: Path) -> Path:
        """Install a desktop file into the applications directory.

        Uses desktop-file-install when present, otherwise copies the file
        with mode 0644.

        Returns:
            Installed desktop file path

        """
        target_dir = self.system.applications
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / desktop_file.name

        installed = False
        if self.runner.which("desktop-file-install"):
            result = await self.runner.run(
                "desktop-file-install", f"--dir={target_dir}", str(desktop_file)
            )
            installed = result.ok and target.exists()
        if not installed:
            shutil.copyfile(desktop_file, target)
            target.chmod(0o644)

        logger.debug("Desktop file installed: %s", target)
        return target

    async def refresh(self) -> None:
        """Refresh the icon cache and the desktop database (best effort)."""
        if self.runner.which("gtk-update-icon-cache"):
            await self.runner.run(
                "gtk-update-icon-cache", "-f", "-t", str(self.system.icons)
            )
        if self.runner.which("update-desktop-database"):
            await self.runner.run(
                "update-desktop-database", str(self.system.applications)
            )
        logger.debug("Desktop and icon caches refreshed")
