"""Centralized constants module for debapps.

This module serves as the single source of truth for shared constants
across the debapps codebase. Constants are organized by logical categories
and use typing.Final annotations to ensure immutability.

Usage:
    from debapps.constants import VERSION_CACHE_TTL_SECONDS
"""

from typing import Final

# =============================================================================
# Configuration Constants
# =============================================================================

CONFIG_VERSION: Final[str] = "1.0.0"
CONFIG_FILE_NAME: Final[str] = "settings.conf"
CONFIG_DIR_NAME: Final[str] = ".config"
DEFAULT_CONFIG_SUBDIR: Final[str] = "debapps"

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_BACKUP_COUNT: Final[int] = 3
DEFAULT_RETRY_ATTEMPTS: Final[int] = 3
DEFAULT_TIMEOUT_SECONDS: Final[int] = 10

SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_NETWORK: Final[str] = "network"
SECTION_DIRECTORY: Final[str] = "directory"
SECTION_SYSTEM: Final[str] = "system"

KEY_CONFIG_VERSION: Final[str] = "config_version"
KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"
KEY_ASSUME_YES: Final[str] = "assume_yes"
KEY_RETRY_ATTEMPTS: Final[str] = "retry_attempts"
KEY_TIMEOUT_SECONDS: Final[str] = "timeout_seconds"

DIRECTORY_KEYS: Final[tuple[str, ...]] = ("cache", "data", "logs", "tmp")
SYSTEM_KEYS: Final[tuple[str, ...]] = (
    "opt",
    "share",
    "applications",
    "icons",
    "bin",
    "apt_keyrings",
    "apt_sources",
)

# =============================================================================
# Catalog Constants
# =============================================================================

CATALOG_SCHEMA_VERSION: Final[str] = "2.0"
CATALOG_FILE_NAME: Final[str] = "apps.json"

# =============================================================================
# Logging Constants
# =============================================================================

LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = DEFAULT_BACKUP_COUNT

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# =============================================================================
# Version Resolution Constants
# =============================================================================

VERSION_CACHE_TTL_SECONDS: Final[int] = 900
VERSION_CACHE_SUFFIX: Final[str] = "_version.json"
VERSION_LATEST: Final[str] = "latest"
VERSION_UNKNOWN: Final[str] = "unknown"
APT_URL_SCHEME: Final[str] = "apt:"

GITHUB_API_BASE: Final[str] = "https://api.github.com"
GITHUB_WEB_BASE: Final[str] = "https://github.com"
VERSION_PLACEHOLDER: Final[str] = "{VERSION}"

SLACK_DOWNLOAD_PAGE: Final[str] = "https://slack.com/downloads/linux"
SLACK_DEB_URL_TEMPLATE: Final[str] = (
    "https://downloads.slack-edge.com/desktop-releases/linux/x64/"
    "{version}/slack-desktop-{version}-amd64.deb"
)
CURSOR_DEFAULT_URL: Final[str] = (
    "https://api2.cursor.sh/updates/download/golden/linux-x64/cursor/latest"
)
CURSOR_VERSION_API: Final[str] = (
    "https://www.cursor.com/api/download"
    "?platform=linux-x64&releaseTrack=stable"
)
BURP_RELEASES_PAGE: Final[str] = "https://portswigger.net/burp/releases"
BURP_DOWNLOAD_URL_TEMPLATE: Final[str] = (
    "https://portswigger.net/burp/releases/download"
    "?product={product}&version={version}&type={arch}"
)
TOR_DEFAULT_BASE_URL: Final[str] = "https://www.torproject.org/download/"
TOR_DIST_URL: Final[str] = "https://dist.torproject.org/torbrowser/"
TOR_TARBALL_URL_TEMPLATE: Final[str] = (
    "https://dist.torproject.org/torbrowser/{version}/"
    "tor-browser-linux-x86_64-{version}.tar.xz"
)
LIBREOFFICE_DEFAULT_BASE_URL: Final[str] = (
    "https://download.documentfoundation.org/libreoffice/stable/"
)
LIBREOFFICE_TARBALL_PATH_TEMPLATE: Final[str] = (
    "{version}/deb/x86_64/LibreOffice_{version}_Linux_x86-64_deb.tar.gz"
)
HTTP_USER_AGENT: Final[str] = "Mozilla/5.0 (X11; Linux x86_64) debapps"

# =============================================================================
# Download Constants
# =============================================================================

DOWNLOAD_CHUNK_SIZE: Final[int] = 8192
ALLOWED_URL_SCHEMES: Final[tuple[str, ...]] = ("http", "https", "ftp")

# =============================================================================
# Detection Constants
# =============================================================================

BINARY_VERSION_TIMEOUT_SECONDS: Final[float] = 2.0
BINARY_VERSION_PATTERN: Final[str] = r"\d+\.\d+(?:\.\d+)?"

# Applications that open a window when run with --version
GUI_APPS: Final[frozenset[str]] = frozenset(
    {
        "cursor",
        "code",
        "codium",
        "sublime",
        "atom",
        "vscode",
        "bitwarden",
        "keepassxc",
        "obsidian",
        "joplin",
        "standardnotes",
        "discord",
        "slack",
        "zoom",
        "signal-desktop",
        "firefox",
        "chrome",
        "brave-browser",
        "google-chrome",
        "postman",
        "burpsuite",
    }
)

DESKTOP_SEARCH_DIRS: Final[tuple[str, ...]] = (
    "/usr/share/applications",
    "~/.local/share/applications",
)

# =============================================================================
# AppImage Integration Constants
# =============================================================================

APPIMAGE_EXTENSION: Final[str] = ".AppImage"
APPIMAGE_MANIFEST_NAME: Final[str] = "install.log"
APPIMAGE_EXTRACT_DIR: Final[str] = "squashfs-root"

ICON_SIZES: Final[tuple[str, ...]] = (
    "16x16",
    "22x22",
    "24x24",
    "32x32",
    "36x36",
    "48x48",
    "64x64",
    "72x72",
    "96x96",
    "128x128",
    "192x192",
    "256x256",
    "512x512",
)

DESKTOP_DEFAULT_CATEGORIES: Final[str] = "Utility;"

# =============================================================================
# Package Manager Constants
# =============================================================================

PACKAGE_BASED_METHODS: Final[frozenset[str]] = frozenset(
    {"apt_repo", "apt", "apt_package", "deb", "deb_tarball"}
)
FLATHUB_REMOTE: Final[str] = "flathub"
DPKG_INSTALLED_STATE: Final[str] = "ii"
