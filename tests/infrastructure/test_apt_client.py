"""Tests for AptClient."""

import pytest

from conftest import FakeRunner, dpkg_row
from debapps.exceptions import CommandError, ConfigError
from debapps.infrastructure.apt import AptClient


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def apt(runner):
    return AptClient(runner)


class TestDpkgQueries:
    """Test dpkg-query parsing."""

    @pytest.mark.asyncio
    async def test_package_states(self, apt, runner):
        runner.on(
            "dpkg-query",
            stdout=dpkg_row("code:amd64", "1.95.3")
            + dpkg_row("code-insiders", "1.96.0", state="rc")
            + "garbage line\n",
        )

        states = await apt.package_states("code*")

        assert states == {
            "code": ("ii", "1.95.3"),
            "code-insiders": ("rc", "1.96.0"),
        }
        assert await apt.installed_packages("code*") == {"code": "1.95.3"}

    @pytest.mark.asyncio
    async def test_get_version_exact_and_glob(self, apt, runner):
        runner.on("dpkg-query", stdout=dpkg_row("libreoffice24.8-core", "24.8.2"))

        assert await apt.get_version("libreoffice*-core") == "24.8.2"
        assert await apt.get_version("libreoffice-core") == ""

    @pytest.mark.asyncio
    async def test_not_installed(self, apt, runner):
        runner.on("dpkg-query", returncode=1, stderr="no packages found")

        assert await apt.is_installed("signal-desktop") is False
        assert await apt.get_version("signal-desktop") == ""

    @pytest.mark.asyncio
    async def test_dependency_t64_variant(self, apt, runner):
        runner.on("dpkg-query", "-W", stdout="")
        runner.on(
            "dpkg-query",
            "-W",
            "-f=${db:Status-Abbrev}\t${Package}\t${Version}\n",
            "libfuse2t64",
            stdout=dpkg_row("libfuse2t64", "2.9.9"),
        )

        assert await apt.dependency_present("libfuse2") is True

    @pytest.mark.asyncio
    async def test_candidate_version(self, apt, runner):
        runner.on(
            "apt-cache",
            stdout="code:\n  Installed: (none)\n  Candidate: 1.95.3-1\n",
        )

        assert await apt.candidate_version("code") == "1.95.3-1"

    @pytest.mark.asyncio
    async def test_deb_package_name(self, apt, runner, tmp_path):
        runner.on("dpkg-deb", stdout="threema\n")

        assert await apt.deb_package_name(tmp_path / "a.deb") == "threema"


class TestRemoval:
    """Test package removal fallbacks."""

    @pytest.mark.asyncio
    async def test_not_installed_is_noop(self, apt, runner):
        assert await apt.remove("slack-desktop") is False
        assert not runner.called("apt-get")

    @pytest.mark.asyncio
    async def test_broken_state_forces_dpkg(self, apt, runner):
        runner.on("dpkg-query", stdout=dpkg_row("slack-desktop", "4.0", "iF"))

        assert await apt.remove("slack-desktop") is True
        assert runner.called(
            "dpkg", "--remove", "--force-remove-reinstreq", "slack-desktop"
        )

    @pytest.mark.asyncio
    async def test_purge_fallback(self, apt, runner):
        runner.on("dpkg-query", stdout=dpkg_row("slack-desktop", "4.0"))
        runner.on("apt-get", "-y", "remove", returncode=100)

        assert await apt.remove("slack-desktop") is True
        assert runner.called("apt-get", "-y", "purge", "slack-desktop")

    @pytest.mark.asyncio
    async def test_purge_failure_raises(self, apt, runner):
        runner.on("dpkg-query", stdout=dpkg_row("slack-desktop", "4.0"))
        runner.on("apt-get", returncode=100, stderr="locked")

        with pytest.raises(CommandError, match="locked"):
            await apt.remove("slack-desktop")

    @pytest.mark.asyncio
    async def test_cleanup_never_raises(self, apt, runner):
        runner.on("apt-get", returncode=1)

        await apt.cleanup()

        assert runner.called("apt-get", "-y", "autoremove")
        assert runner.called("apt-get", "-y", "autoclean")


class TestRepositories:
    """Test codename detection and repository files."""

    def test_render_repo_line(self, runner, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text('ID=ubuntu\nVERSION_CODENAME="noble"\n')
        apt = AptClient(runner, os_release=os_release)

        assert apt.render_repo_line("deb https://x <DISTRO> main") == (
            "deb https://x noble main"
        )
        assert apt.render_repo_line("deb https://x stable main") == (
            "deb https://x stable main"
        )

    def test_ubuntu_codename_fallback(self, runner, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text("ID=linuxmint\nUBUNTU_CODENAME=jammy\n")

        assert AptClient(runner, os_release).distro_codename() == "jammy"

    def test_unknown_codename(self, runner, tmp_path):
        apt = AptClient(runner, os_release=tmp_path / "missing")

        with pytest.raises(ConfigError):
            apt.render_repo_line("deb https://x <DISTRO> main")

    @pytest.mark.asyncio
    async def test_armored_key_is_dearmored(self, apt, runner, tmp_path):
        runner.on("gpg", "--dearmor", stdout="BINARY")

        key_path = await apt.install_signing_key(
            b"-----BEGIN PGP PUBLIC KEY BLOCK-----\n...",
            "packages.example",
            tmp_path / "keyrings",
        )

        assert key_path == tmp_path / "keyrings" / "packages.example.gpg"
        assert key_path.read_bytes() == b"BINARY"
        assert key_path.stat().st_mode & 0o777 == 0o644

    @pytest.mark.asyncio
    async def test_binary_key_written_verbatim(self, apt, runner, tmp_path):
        key_path = await apt.install_signing_key(
            b"\x99\x01binary", "packages.example", tmp_path
        )

        assert key_path.read_bytes() == b"\x99\x01binary"
        assert not runner.called("gpg")

    def test_write_source_and_preferences(self, tmp_path):
        source = AptClient.write_source(
            "deb https://x stable main", "x.list", tmp_path / "sources"
        )
        prefs = AptClient.write_preferences(
            str(tmp_path / "preferences.d" / "x"), "Package: *\n\n"
        )

        assert source.read_text() == "deb https://x stable main\n"
        assert prefs.read_text() == "Package: *\n"
