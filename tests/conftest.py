"""Pytest configuration and fixtures for debapps tests."""

import logging
import os
import tempfile
from pathlib import Path

# Keep the test run from writing into ~/.config/debapps/logs
os.environ.setdefault(
    "DEBAPPS_LOG_DIR", tempfile.mkdtemp(prefix="debapps-test-logs-")
)

import pytest  # noqa: E402

from debapps.config.settings import (  # noqa: E402
    DirectorySettings,
    Settings,
    SystemPaths,
)
from debapps.core.context import AppContext  # noqa: E402
from debapps.domain.catalog import Catalog  # noqa: E402
from debapps.infrastructure.process import (  # noqa: E402
    CommandResult,
    CommandRunner,
)


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("debapps"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


class FakeRunner(CommandRunner):
    """CommandRunner double that records calls and replays scripted output.

    Responses are matched by argument prefix, most recently added first.
    Unmatched commands succeed with empty output.
    """

    def __init__(self, available: set[str] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.available = set(available or ())
        self._responses: list[tuple[tuple[str, ...], int, str, str, object]] = []

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.available else None

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect=None,
    ) -> None:
        """Script the result of commands starting with prefix.

        effect, when given, is called as ``effect(args, cwd)`` before the
        result is returned; tests use it to create files a tool would.
        """
        self._responses.append((prefix, returncode, stdout, stderr, effect))

    async def run(
        self,
        *args: str,
        cwd: Path | None = None,
        input_data: bytes | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        self.calls.append(args)
        for prefix, returncode, stdout, stderr, effect in reversed(
            self._responses
        ):
            if args[: len(prefix)] == prefix:
                if effect is not None:
                    effect(args, cwd)
                return CommandResult(args, returncode, stdout.encode(), stderr)
        return CommandResult(args, 0, b"", "")

    def called(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


def dpkg_row(package: str, version: str, state: str = "ii") -> str:
    """One line of the dpkg-query output AptClient parses."""
    return f"{state} \t{package}\t{version}\n"


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def system_paths(tmp_path) -> SystemPaths:
    """SystemPaths rooted in a temporary directory."""
    root = tmp_path / "root"
    share = root / "usr" / "share"
    return SystemPaths(
        opt=root / "opt",
        share=share,
        applications=share / "applications",
        icons=share / "icons" / "hicolor",
        bin=root / "usr" / "sbin",
        apt_keyrings=root / "etc" / "apt" / "keyrings",
        apt_sources=root / "etc" / "apt" / "sources.list.d",
    )


@pytest.fixture
def settings(tmp_path, system_paths) -> Settings:
    return Settings(
        directory=DirectorySettings(
            cache=tmp_path / "cache",
            data=tmp_path / "data",
            logs=tmp_path / "logs",
            tmp=tmp_path / "tmp",
        ),
        system=system_paths,
    )


@pytest.fixture
def sample_catalog_data(tmp_path) -> dict:
    """Catalog covering every install method."""
    root = tmp_path / "root"
    return {
        "schema_version": "2.0",
        "categories": [
            {
                "id": "notes",
                "name": "Note Taking",
                "apps": [
                    {
                        "id": "obsidian",
                        "name": "Obsidian",
                        "install_method": "appimage",
                        "description": "Markdown notes",
                        "source": {
                            "type": "github_release",
                            "repo": "obsidianmd/obsidian-releases",
                            "asset_pattern": "Obsidian-{VERSION}.AppImage",
                            "version_prefix": "v",
                        },
                        "detection": {
                            "binaries": ["obsidian"],
                            "desktop_files": ["obsidian.desktop"],
                        },
                        "dependencies": ["libfuse2"],
                        "install_location": "/opt/obsidian",
                        "warnings": ["Requires FUSE"],
                    },
                ],
            },
            {
                "id": "tools",
                "name": "Tools",
                "apps": [
                    {
                        "id": "signal",
                        "name": "Signal",
                        "install_method": "apt_repo",
                        "source": {
                            "type": "apt_repository",
                            "key_url": "https://updates.signal.org/keys.asc",
                            "key_name": "packages.signal",
                            "repo_line": (
                                "deb [signed-by=/etc/apt/keyrings/"
                                "packages.signal.gpg] "
                                "https://updates.signal.org/desktop/apt "
                                "<DISTRO> main"
                            ),
                            "repo_file": "signal.list",
                            "package_name": "signal-desktop",
                        },
                        "detection": {"apt_packages": ["signal-desktop"]},
                    },
                    {
                        "id": "wireshark",
                        "name": "Wireshark",
                        "install_method": "apt_repo",
                        "source": {
                            "type": "apt_package",
                            "package_name": "wireshark",
                        },
                        "detection": {"apt_packages": ["wireshark"]},
                    },
                    {
                        "id": "chrome",
                        "name": "Google Chrome",
                        "install_method": "deb",
                        "source": {
                            "type": "direct_download",
                            "url": "https://dl.google.com/chrome.deb",
                        },
                        "detection": {
                            "apt_packages": ["google-chrome-stable"]
                        },
                    },
                    {
                        "id": "libreoffice",
                        "name": "LibreOffice",
                        "install_method": "deb_tarball",
                        "source": {"type": "libreoffice_deb_tarball"},
                        "detection": {"apt_packages": ["libreoffice-core"]},
                    },
                    {
                        "id": "tor-browser",
                        "name": "Tor Browser",
                        "install_method": "tarball",
                        "source": {"type": "tor_browser_latest"},
                        "install_location": str(root / "opt" / "tor-browser"),
                        "post_install": {
                            "symlink": {
                                "source": str(
                                    root / "opt" / "tor-browser" / "start"
                                ),
                                "target": str(
                                    root / "usr" / "local" / "bin" / "tor"
                                ),
                            },
                            "desktop_entry": {
                                "file": str(
                                    root
                                    / "usr"
                                    / "share"
                                    / "applications"
                                    / "tor.desktop"
                                ),
                                "content": "[Desktop Entry]\nName=Tor",
                            },
                        },
                    },
                    {
                        "id": "discord",
                        "name": "Discord",
                        "install_method": "flatpak",
                        "flatpak_id": "com.discordapp.Discord",
                        "detection": {
                            "flatpak_packages": ["com.discordapp.Discord"]
                        },
                    },
                ],
            },
        ],
    }


@pytest.fixture
def sample_catalog(sample_catalog_data) -> Catalog:
    return Catalog.from_dict(sample_catalog_data)


@pytest.fixture
def app_context(settings, sample_catalog, fake_runner) -> AppContext:
    """AppContext with a fake runner and no network session."""
    return AppContext(settings, sample_catalog, runner=fake_runner)


APPIMAGE_DESKTOP = """[Desktop Entry]
Name=Obsidian
Exec=AppRun --no-sandbox %U
Icon=obsidian
NoDisplay=true
Categories=Office;
"""


def fake_appimage_extract(with_desktop: bool = True):
    """Runner effect that mimics ``<appimage> --appimage-extract``."""

    def effect(args, cwd):
        root = Path(cwd) / "squashfs-root"
        sized = root / "usr" / "share" / "icons" / "hicolor" / "256x256"
        (sized / "apps").mkdir(parents=True)
        (sized / "apps" / "obsidian.png").write_bytes(b"icon-256")
        (root / "obsidian.png").write_bytes(b"icon-generic")
        if with_desktop:
            (root / "obsidian.desktop").write_text(APPIMAGE_DESKTOP)

    return effect
