"""Tests for AppImage setup and manifest-driven removal."""

import pytest

from conftest import FakeRunner, fake_appimage_extract
from debapps.constants import ICON_SIZES
from debapps.core.appimage import AppImageIntegrator
from debapps.domain.types import FileType
from debapps.exceptions import InstallVerificationError, RemovalSafetyError
from debapps.infrastructure.desktop_entry import DesktopDatabase


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def integrator(runner, system_paths):
    return AppImageIntegrator(
        runner, DesktopDatabase(runner, system_paths), system_paths
    )


@pytest.fixture
def downloaded(tmp_path):
    path = tmp_path / "tmp" / "Obsidian-1.5.3.AppImage"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"\x7fELF appimage")
    return path


def install_dir_of(system_paths):
    return system_paths.opt / "obsidian"


def script_extract(runner, system_paths, **kwargs):
    appimage = install_dir_of(system_paths) / "Obsidian-1.5.3.AppImage"
    runner.on(
        str(appimage),
        "--appimage-extract",
        effect=fake_appimage_extract(**kwargs),
    )
    return appimage


class TestSetup:
    """Test AppImage integration."""

    @pytest.mark.asyncio
    async def test_manifest_order(
        self, integrator, runner, system_paths, downloaded
    ):
        appimage = script_extract(runner, system_paths)
        install_dir = install_dir_of(system_paths)

        lines = await integrator.setup(downloaded, install_dir, "Obsidian")

        assert lines[0] == str(appimage)
        assert lines[1] == str(system_paths.bin / "obsidian-1.5.3")
        assert lines[2] == str(system_paths.applications / "obsidian.desktop")
        assert len(lines) == 3 + len(ICON_SIZES)
        assert lines == integrator.read_manifest(install_dir)

    @pytest.mark.asyncio
    async def test_files_in_place(
        self, integrator, runner, system_paths, downloaded
    ):
        appimage = script_extract(runner, system_paths)
        install_dir = install_dir_of(system_paths)

        await integrator.setup(downloaded, install_dir, "Obsidian")

        assert not downloaded.exists()
        assert appimage.stat().st_mode & 0o777 == 0o755
        link = system_paths.bin / "obsidian-1.5.3"
        assert link.is_symlink()
        assert link.resolve() == appimage.resolve()
        assert not (install_dir / "squashfs-root").exists()

    @pytest.mark.asyncio
    async def test_desktop_file_patched(
        self, integrator, runner, system_paths, downloaded
    ):
        appimage = script_extract(runner, system_paths)

        await integrator.setup(
            downloaded, install_dir_of(system_paths), "Obsidian"
        )

        desktop = system_paths.applications / "obsidian.desktop"
        content = desktop.read_text()
        assert f"Exec={appimage} %U" in content
        assert "NoDisplay=true" not in content
        assert "Type=Application" in content
        assert "Terminal=false" in content
        assert desktop.stat().st_mode & 0o777 == 0o644

    @pytest.mark.asyncio
    async def test_icons_prefer_matching_size(
        self, integrator, runner, system_paths, downloaded
    ):
        script_extract(runner, system_paths)

        await integrator.setup(
            downloaded, install_dir_of(system_paths), "Obsidian"
        )

        icons = system_paths.icons
        assert (icons / "256x256" / "apps" / "obsidian.png").read_bytes() == (
            b"icon-256"
        )
        assert (icons / "48x48" / "apps" / "obsidian.png").exists()

    @pytest.mark.asyncio
    async def test_missing_desktop_file(
        self, integrator, runner, system_paths, downloaded
    ):
        script_extract(runner, system_paths, with_desktop=False)

        with pytest.raises(InstallVerificationError, match="desktop"):
            await integrator.setup(
                downloaded, install_dir_of(system_paths), "Obsidian"
            )

    @pytest.mark.asyncio
    async def test_extraction_failure(
        self, integrator, runner, system_paths, downloaded
    ):
        appimage = install_dir_of(system_paths) / downloaded.name
        runner.on(str(appimage), returncode=1, stderr="not an AppImage")

        with pytest.raises(InstallVerificationError, match="extraction"):
            await integrator.setup(
                downloaded, install_dir_of(system_paths), "Obsidian"
            )

    def test_classify(self, integrator, system_paths):
        assert integrator.classify("/opt/x/x.AppImage", 0) is FileType.BINARY
        assert (
            integrator.classify(str(system_paths.bin / "x"), 1)
            is FileType.SYMLINK
        )
        assert (
            integrator.classify("/usr/share/applications/x.desktop", 2)
            is FileType.DESKTOP
        )
        assert integrator.classify("/usr/share/icons/x.png", 3) is FileType.ICON


class TestRemove:
    """Test manifest replay and its safety checks."""

    @pytest.mark.asyncio
    async def test_remove_after_setup(
        self, integrator, runner, system_paths, downloaded
    ):
        script_extract(runner, system_paths)
        install_dir = install_dir_of(system_paths)
        lines = await integrator.setup(downloaded, install_dir, "Obsidian")

        removed = await integrator.remove(install_dir)

        assert removed == lines
        assert not install_dir.exists()
        assert not (system_paths.bin / "obsidian-1.5.3").is_symlink()
        assert not (system_paths.applications / "obsidian.desktop").exists()

    @pytest.mark.asyncio
    async def test_unsafe_lines_are_skipped(
        self, integrator, system_paths, tmp_path
    ):
        install_dir = install_dir_of(system_paths)
        install_dir.mkdir(parents=True)
        appimage = install_dir / "Obsidian.AppImage"
        appimage.write_bytes(b"x")
        outside = tmp_path / "etc" / "passwd"
        outside.parent.mkdir()
        outside.write_text("root:x:0:0")
        victim = system_paths.opt / "victim"
        victim.write_text("keep")
        (install_dir / "install.log").write_text(
            f"{appimage}\n{outside}\n{install_dir}/../victim\n"
        )

        removed = await integrator.remove(install_dir)

        assert removed == [str(appimage)]
        assert outside.exists()
        assert victim.exists()

    @pytest.mark.asyncio
    async def test_bare_roots_are_skipped(self, integrator, system_paths):
        install_dir = install_dir_of(system_paths)
        install_dir.mkdir(parents=True)
        appimage = install_dir / "Obsidian.AppImage"
        appimage.write_bytes(b"x")
        neighbour = system_paths.opt / "other-app"
        neighbour.mkdir()
        system_paths.share.mkdir(parents=True, exist_ok=True)
        (install_dir / "install.log").write_text(
            f"{appimage}\n{system_paths.opt}/\n{system_paths.share}\n"
            f"{system_paths.opt}/./\n"
        )

        removed = await integrator.remove(install_dir)

        assert removed == [str(appimage)]
        assert neighbour.is_dir()
        assert system_paths.share.is_dir()

    @pytest.mark.asyncio
    async def test_missing_manifest(self, integrator, system_paths):
        with pytest.raises(RemovalSafetyError, match="not found"):
            await integrator.remove(install_dir_of(system_paths))

    @pytest.mark.asyncio
    async def test_first_line_must_be_appimage(
        self, integrator, system_paths
    ):
        install_dir = install_dir_of(system_paths)
        install_dir.mkdir(parents=True)
        (install_dir / "install.log").write_text(
            f"{system_paths.bin / 'obsidian'}\n"
        )

        with pytest.raises(RemovalSafetyError):
            await integrator.remove(install_dir)

        assert install_dir.exists()

    @pytest.mark.asyncio
    async def test_manifest_outside_opt(self, integrator, tmp_path):
        install_dir = tmp_path / "elsewhere"
        install_dir.mkdir()
        (install_dir / "install.log").write_text(
            f"{install_dir / 'x.AppImage'}\n"
        )

        with pytest.raises(RemovalSafetyError):
            await integrator.remove(install_dir)
