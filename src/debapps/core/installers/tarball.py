"""Installer for applications shipped as plain tarballs."""

import contextlib
import shutil
from pathlib import Path

from debapps.core.installers.base import BaseInstaller, InstallRecord
from debapps.domain.types import (
    CatalogEntry,
    FileType,
    InstallMethod,
    LedgerEntry,
    VersionInfo,
)
from debapps.exceptions import InstallVerificationError
from debapps.infrastructure.archive import extract_tarball, tarball_suffix
from debapps.logger import get_logger

logger = get_logger(__name__)


class TarballInstaller(BaseInstaller):
    """Unpack a tarball under /opt with optional symlink and desktop entry."""

    method = InstallMethod.TARBALL

    def install_dir(self, entry: CatalogEntry) -> Path:
        if entry.install_location:
            return Path(entry.install_location)
        return self.ctx.settings.system.opt / entry.id

    async def _install(
        self, entry: CatalogEntry, info: VersionInfo | None
    ) -> InstallRecord:
        info = self.require_info(entry, info)
        url = info["download_url"]
        tarball = await self.download(entry, url, tarball_suffix(url))

        install_dir = self.install_dir(entry)
        if install_dir.exists():
            shutil.rmtree(install_dir)
        await extract_tarball(
            self.ctx.runner, tarball, install_dir, strip_components=1
        )
        if not any(install_dir.iterdir()):
            msg = f"Nothing was extracted to {install_dir}"
            raise InstallVerificationError(msg, target=entry.id)

        main_executable = install_dir / entry.name
        if main_executable.is_file():
            main_executable.chmod(0o755)

        files: list[tuple[str, FileType]] = []
        symlink = entry.post_install.symlink
        if symlink:
            target = Path(symlink.target)
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.is_symlink() or target.exists():
                target.unlink()
            target.symlink_to(symlink.source)
            files.append((str(target), FileType.SYMLINK))
            logger.debug("Symlink created: %s -> %s", target, symlink.source)

        desktop = entry.post_install.desktop_entry
        if desktop:
            desktop_path = Path(desktop.file)
            desktop_path.parent.mkdir(parents=True, exist_ok=True)
            desktop_path.write_text(
                desktop.content.rstrip("\n") + "\n", encoding="utf-8"
            )
            desktop_path.chmod(0o644)
            files.append((str(desktop_path), FileType.DESKTOP))

        files.append((str(install_dir), FileType.DIRECTORY))
        return InstallRecord(
            version=info["version"],
            install_location=str(install_dir),
            metadata={"tarball": True},
            files=files,
        )

    async def _teardown(
        self,
        entry: CatalogEntry,
        record: LedgerEntry | None,
        location: str,
    ) -> None:
        install_dir = Path(location) if location else self.install_dir(entry)
        if install_dir.is_dir():
            shutil.rmtree(install_dir)
            logger.debug("Removed %s", install_dir)

        paths = [
            Path(path)
            for path, file_type in self.ctx.ledger.list_files(entry.id)
            if file_type in (FileType.SYMLINK.value, FileType.DESKTOP.value)
        ]
        if entry.post_install.symlink:
            paths.append(Path(entry.post_install.symlink.target))
        if entry.post_install.desktop_entry:
            paths.append(Path(entry.post_install.desktop_entry.file))

        for path in dict.fromkeys(paths):
            if path.is_symlink() or path.is_file():
                with contextlib.suppress(FileNotFoundError):
                    path.unlink()
                logger.debug("Removed %s", path)
