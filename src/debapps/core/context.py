"""Application context shared by every command.

AppContext wires the services together once per CLI invocation. Services
are created lazily on first access, so a command that only browses the
catalog never opens the ledger or touches the network.

Usage:
    async with create_http_session(settings.network) as session:
        ctx = AppContext(settings, catalog, session)
        result = await get_installer(ctx, "obsidian").install("obsidian")
"""

from collections.abc import Callable
from pathlib import Path

import aiohttp

from debapps.config.paths import Paths
from debapps.config.settings import Settings
from debapps.constants import DESKTOP_SEARCH_DIRS
from debapps.core.appimage import AppImageIntegrator
from debapps.core.auth import GitHubAuth
from debapps.core.cache import VersionCache
from debapps.core.detection import DetectionEngine
from debapps.core.download import DownloadService
from debapps.core.ledger import InstallLedger
from debapps.core.resolver import VersionResolver
from debapps.domain.catalog import Catalog
from debapps.infrastructure.apt import AptClient
from debapps.infrastructure.desktop_entry import DesktopDatabase
from debapps.infrastructure.flatpak import FlatpakClient
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)

ConfirmCallback = Callable[[str], bool]


def always_yes(_prompt: str) -> bool:
    return True


class AppContext:
    """Lazily built services for one debapps session."""

    def __init__(
        self,
        settings: Settings,
        catalog: Catalog,
        session: aiohttp.ClientSession | None = None,
        confirm: ConfirmCallback | None = None,
        runner: CommandRunner | None = None,
        auth: GitHubAuth | None = None,
        downloads: DownloadService | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            settings: Loaded settings
            catalog: Parsed application catalog
            session: Shared HTTP session; required for network operations
            confirm: Yes/no prompt; defaults to always yes
            runner: Subprocess runner
            auth: GitHub authentication
            downloads: Pre-built download service

        """
        self.settings = settings
        self.catalog = catalog
        self.session = session
        self.confirm: ConfirmCallback = confirm or always_yes
        self.runner = runner or CommandRunner()
        self.auth = auth or GitHubAuth()

        self._downloads = downloads
        self._apt: AptClient | None = None
        self._flatpak: FlatpakClient | None = None
        self._desktop: DesktopDatabase | None = None
        self._cache: VersionCache | None = None
        self._resolver: VersionResolver | None = None
        self._ledger: InstallLedger | None = None
        self._detector: DetectionEngine | None = None
        self._appimage: AppImageIntegrator | None = None

    @property
    def apt(self) -> AptClient:
        if self._apt is None:
            self._apt = AptClient(self.runner)
        return self._apt

    @property
    def flatpak(self) -> FlatpakClient:
        if self._flatpak is None:
            self._flatpak = FlatpakClient(self.runner)
        return self._flatpak

    @property
    def desktop(self) -> DesktopDatabase:
        if self._desktop is None:
            self._desktop = DesktopDatabase(self.runner, self.settings.system)
        return self._desktop

    @property
    def downloads(self) -> DownloadService:
        """Download service bound to the shared session.

        Raises:
            RuntimeError: If the context was built without a session

        """
        if self._downloads is None:
            if self.session is None:
                msg = "Network access requires an HTTP session"
                raise RuntimeError(msg)
            self._downloads = DownloadService(
                self.session, self.settings.network, self.runner, self.auth
            )
        return self._downloads

    @property
    def cache(self) -> VersionCache:
        if self._cache is None:
            self._cache = VersionCache(self.settings.directory.cache)
        return self._cache

    @property
    def resolver(self) -> VersionResolver:
        if self._resolver is None:
            self._resolver = VersionResolver(
                self.catalog, self.cache, self.downloads, self.apt
            )
        return self._resolver

    @property
    def ledger(self) -> InstallLedger:
        if self._ledger is None:
            path = Paths.get_ledger_path(self.settings.directory.data)
            self._ledger = InstallLedger(path)
            logger.debug("Ledger opened at %s", path)
        return self._ledger

    @property
    def detector(self) -> DetectionEngine:
        if self._detector is None:
            self._detector = DetectionEngine(
                self.catalog,
                self.ledger,
                self.resolver,
                self.runner,
                self.apt,
                self.flatpak,
                desktop_dirs=[
                    self.settings.system.applications,
                    Path(DESKTOP_SEARCH_DIRS[1]).expanduser(),
                ],
            )
        return self._detector

    @property
    def appimage(self) -> AppImageIntegrator:
        if self._appimage is None:
            self._appimage = AppImageIntegrator(
                self.runner, self.desktop, self.settings.system
            )
        return self._appimage
