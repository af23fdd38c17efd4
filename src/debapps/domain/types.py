"""Domain types for catalog entries, ledger rows and operation results.

Catalog entries are parsed once into frozen dataclasses (see
debapps.domain.catalog); everything downstream works with these types
instead of raw JSON.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypedDict

from debapps.constants import (
    CURSOR_DEFAULT_URL,
    LIBREOFFICE_DEFAULT_BASE_URL,
    TOR_DEFAULT_BASE_URL,
)


class InstallMethod(Enum):
    """Installation mechanisms supported by the installer strategies."""

    APPIMAGE = "appimage"
    APT_REPO = "apt_repo"
    DEB = "deb"
    TARBALL = "tarball"
    DEB_TARBALL = "deb_tarball"
    FLATPAK = "flatpak"


class SourceType(Enum):
    """Version/URL discovery strategies."""

    GITHUB_RELEASE = "github_release"
    DIRECT_DOWNLOAD = "direct_download"
    APT_REPOSITORY = "apt_repository"
    APT_PACKAGE = "apt_package"
    BURP_INSTALLER = "burp_installer"
    TOR_BROWSER_LATEST = "tor_browser_latest"
    LIBREOFFICE_DEB_TARBALL = "libreoffice_deb_tarball"
    CURSOR_LATEST = "cursor_latest"
    SLACK_LATEST = "slack_latest"


class FileType(Enum):
    """Kinds of paths recorded in the ledger's install_files table."""

    SYMLINK = "symlink"
    DESKTOP = "desktop"
    ICON = "icon"
    DIRECTORY = "directory"
    BINARY = "binary"


# --- Sources -----------------------------------------------------------------


@dataclass(frozen=True)
class GitHubReleaseSource:
    """Release published on GitHub."""

    type: ClassVar[SourceType] = SourceType.GITHUB_RELEASE

    repo: str
    asset_pattern: str
    version_prefix: str = ""


@dataclass(frozen=True)
class DirectDownloadSource:
    """Unversioned URL that always serves the latest build."""

    type: ClassVar[SourceType] = SourceType.DIRECT_DOWNLOAD

    url: str


@dataclass(frozen=True)
class AptRepositorySource:
    """Third-party APT repository with its signing key."""

    type: ClassVar[SourceType] = SourceType.APT_REPOSITORY

    key_url: str
    key_name: str
    repo_line: str
    repo_file: str
    package_name: str
    preferences_file: str = ""
    preferences_content: str = ""


@dataclass(frozen=True)
class AptPackageSource:
    """Package from the distribution's default archives."""

    type: ClassVar[SourceType] = SourceType.APT_PACKAGE

    package_name: str


@dataclass(frozen=True)
class BurpInstallerSource:
    """PortSwigger Burp Suite installer."""

    type: ClassVar[SourceType] = SourceType.BURP_INSTALLER

    edition: str = "community"


@dataclass(frozen=True)
class TorBrowserSource:
    """Tor Browser tarball."""

    type: ClassVar[SourceType] = SourceType.TOR_BROWSER_LATEST

    base_url: str = TOR_DEFAULT_BASE_URL


@dataclass(frozen=True)
class LibreOfficeSource:
    """LibreOffice multi-package .deb tarball."""

    type: ClassVar[SourceType] = SourceType.LIBREOFFICE_DEB_TARBALL

    base_url: str = LIBREOFFICE_DEFAULT_BASE_URL


@dataclass(frozen=True)
class CursorSource:
    """Cursor editor AppImage."""

    type: ClassVar[SourceType] = SourceType.CURSOR_LATEST

    url: str = CURSOR_DEFAULT_URL


@dataclass(frozen=True)
class SlackSource:
    """Slack desktop .deb."""

    type: ClassVar[SourceType] = SourceType.SLACK_LATEST


Source = (
    GitHubReleaseSource
    | DirectDownloadSource
    | AptRepositorySource
    | AptPackageSource
    | BurpInstallerSource
    | TorBrowserSource
    | LibreOfficeSource
    | CursorSource
    | SlackSource
)

SOURCE_CLASSES: dict[SourceType, type] = {
    cls.type: cls
    for cls in (
        GitHubReleaseSource,
        DirectDownloadSource,
        AptRepositorySource,
        AptPackageSource,
        BurpInstallerSource,
        TorBrowserSource,
        LibreOfficeSource,
        CursorSource,
        SlackSource,
    )
}


# --- Catalog entry -----------------------------------------------------------


@dataclass(frozen=True)
class DetectionSpec:
    """Signals the detection engine probes for an application."""

    binaries: tuple[str, ...] = ()
    apt_packages: tuple[str, ...] = ()
    snap_packages: tuple[str, ...] = ()
    flatpak_packages: tuple[str, ...] = ()
    desktop_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class SymlinkSpec:
    """Symlink created after a tarball install."""

    source: str
    target: str


@dataclass(frozen=True)
class DesktopEntrySpec:
    """Desktop file written after a tarball install."""

    file: str
    content: str


@dataclass(frozen=True)
class PostInstall:
    """Optional post-install actions."""

    symlink: SymlinkSpec | None = None
    desktop_entry: DesktopEntrySpec | None = None
    fix_dependencies: bool = False


@dataclass(frozen=True)
class CatalogEntry:
    """One installable application's declarative definition."""

    id: str
    name: str
    install_method: InstallMethod
    source: Source | None = None
    detection: DetectionSpec = field(default_factory=DetectionSpec)
    description: str = ""
    category: str = ""
    dependencies: tuple[str, ...] = ()
    install_location: str = ""
    warnings: tuple[str, ...] = ()
    flatpak_id: str = ""
    remove_conflicts: tuple[str, ...] = ()
    remove_pattern: str = ""
    post_install: PostInstall = field(default_factory=PostInstall)

    @property
    def primary_package(self) -> str:
        """First dpkg package name used to verify package installs."""
        return self.detection.apt_packages[0] if self.detection.apt_packages else ""


@dataclass(frozen=True)
class Category:
    """Group of catalog entries."""

    id: str
    name: str
    description: str = ""
    apps: tuple[str, ...] = ()


# --- Ledger ------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerEntry:
    """Row of the installed_apps table."""

    app_id: str
    app_name: str
    install_method: str
    version: str = ""
    install_location: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    install_date: int = 0


# --- Results -----------------------------------------------------------------


class VersionInfo(TypedDict):
    """Successful version resolution."""

    version: str
    download_url: str


class ErrorResult(TypedDict):
    """Structured failure returned instead of raising."""

    error: str


class CachedVersion(VersionInfo):
    """Version cache file contents."""

    fetched_at: int


class DetectionResult(TypedDict):
    """Flat detection output."""

    installed: bool
    method: str
    version: str
    location: str
    upgradeable: bool
    latest_version: str


class OperationResult(TypedDict, total=False):
    """Outcome of an installer lifecycle operation."""

    success: bool
    app_id: str
    version: str
    error: str
    cancelled: bool
