"""Vendor-specific version scraping.

Each strategy fetches a page and walks an ordered list of regex
fallbacks. Page layouts change without notice, so every heuristic lives
here behind SourceStrategy.
"""

import platform
import re
from collections.abc import Iterable
from typing import cast

from debapps.constants import (
    BURP_DOWNLOAD_URL_TEMPLATE,
    BURP_RELEASES_PAGE,
    CURSOR_VERSION_API,
    LIBREOFFICE_TARBALL_PATH_TEMPLATE,
    SLACK_DEB_URL_TEMPLATE,
    SLACK_DOWNLOAD_PAGE,
    TOR_DIST_URL,
    TOR_TARBALL_URL_TEMPLATE,
    VERSION_LATEST,
)
from debapps.core.sources.base import SourceStrategy
from debapps.domain.types import (
    BurpInstallerSource,
    CatalogEntry,
    CursorSource,
    LibreOfficeSource,
    TorBrowserSource,
    VersionInfo,
)
from debapps.domain.version import max_version
from debapps.exceptions import DownloadError, ResolutionError
from debapps.logger import get_logger

logger = get_logger(__name__)

SLACK_PATTERNS = (
    re.compile(r"slack-desktop-(\d+\.\d+\.\d+)"),
    re.compile(r"Version (\d+\.\d+\.\d+)"),
)
BURP_PATTERN = re.compile(r"professional-community-(\d+(?:-\d+)+)")
TOR_PAGE_PATTERNS = (
    re.compile(r"torbrowser-install-linux-x86_64-(\d+\.\d+(?:\.\d+)?)"),
    re.compile(r"tor-browser-linux-x86_64-(\d+\.\d+(?:\.\d+)?)\.tar"),
)
TOR_DIST_PATTERN = re.compile(r'href="(\d+\.\d+(?:\.\d+)?)/"')
LIBREOFFICE_PATTERN = re.compile(r'href="(\d+\.\d+\.\d+)')

ARM64_MACHINES = frozenset({"aarch64", "arm64"})


def burp_arch_type(machine: str | None = None) -> str:
    """PortSwigger download "type" for the host architecture."""
    machine = (machine or platform.machine()).lower()
    return "linuxarm64" if machine in ARM64_MACHINES else "linux"


def first_match(text: str, patterns: Iterable[re.Pattern[str]]) -> str:
    """Return group 1 of the first pattern that matches, or ""."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return ""


class SlackStrategy(SourceStrategy):
    """Slack .deb version from the Linux downloads page."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        page = await self.downloads.fetch_text(SLACK_DOWNLOAD_PAGE)
        version = first_match(page, SLACK_PATTERNS)
        if not version:
            msg = "Unable to determine Slack version from downloads page"
            raise ResolutionError(msg, target=entry.id)
        return VersionInfo(
            version=version,
            download_url=SLACK_DEB_URL_TEMPLATE.format(version=version),
        )


class CursorStrategy(SourceStrategy):
    """Cursor AppImage; the version API is optional."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast("CursorSource", self._source_of(entry, CursorSource))
        version = VERSION_LATEST
        try:
            data = await self.downloads.fetch_json(CURSOR_VERSION_API)
        except DownloadError as e:
            logger.debug("Cursor version API unavailable: %s", e)
        else:
            if isinstance(data, dict) and data.get("version"):
                version = str(data["version"])
        return VersionInfo(version=version, download_url=source.url)


class BurpStrategy(SourceStrategy):
    """Burp Suite installer from the PortSwigger releases page."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast(
            "BurpInstallerSource", self._source_of(entry, BurpInstallerSource)
        )
        page = await self.downloads.fetch_text(BURP_RELEASES_PAGE)
        match = BURP_PATTERN.search(page)
        if not match:
            msg = "Failed to fetch Burp Suite version"
            raise ResolutionError(msg, target=entry.id)

        version = match.group(1).replace("-", ".")
        product = "pro" if source.edition == "pro" else "community"
        return VersionInfo(
            version=version,
            download_url=BURP_DOWNLOAD_URL_TEMPLATE.format(
                product=product, version=version, arch=burp_arch_type()
            ),
        )


class TorBrowserStrategy(SourceStrategy):
    """Tor Browser from the download page, then the dist listing."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast(
            "TorBrowserSource", self._source_of(entry, TorBrowserSource)
        )
        version = ""
        try:
            page = await self.downloads.fetch_text(source.base_url)
            version = first_match(page, TOR_PAGE_PATTERNS)
        except DownloadError as e:
            logger.debug("Tor download page unavailable: %s", e)

        if not version:
            listing = await self.downloads.fetch_text(TOR_DIST_URL)
            version = max_version(TOR_DIST_PATTERN.findall(listing))

        if not version:
            msg = "Failed to determine Tor Browser version"
            raise ResolutionError(msg, target=entry.id)
        return VersionInfo(
            version=version,
            download_url=TOR_TARBALL_URL_TEMPLATE.format(version=version),
        )


class LibreOfficeStrategy(SourceStrategy):
    """Highest X.Y.Z directory in the LibreOffice stable listing."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast(
            "LibreOfficeSource", self._source_of(entry, LibreOfficeSource)
        )
        listing = await self.downloads.fetch_text(source.base_url)
        version = max_version(LIBREOFFICE_PATTERN.findall(listing))
        if not version:
            msg = "Failed to determine LibreOffice version"
            raise ResolutionError(msg, target=entry.id)

        base_url = source.base_url
        if not base_url.endswith("/"):
            base_url += "/"
        return VersionInfo(
            version=version,
            download_url=base_url
            + LIBREOFFICE_TARBALL_PATH_TEMPLATE.format(version=version),
        )
