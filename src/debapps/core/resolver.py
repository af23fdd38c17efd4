"""Version resolution with a time-boxed cache.

resolve() never raises for expected failures: it returns either
``{version, download_url}`` or ``{error}`` so that callers working on a
batch of apps can carry on.
"""

from debapps.core.cache import VersionCache
from debapps.core.download import DownloadService
from debapps.core.sources import SOURCE_STRATEGIES, SourceStrategy
from debapps.domain.catalog import Catalog
from debapps.domain.types import (
    CachedVersion,
    ErrorResult,
    SourceType,
    VersionInfo,
)
from debapps.exceptions import DebappsError
from debapps.infrastructure.apt import AptClient
from debapps.logger import get_logger

logger = get_logger(__name__)


class VersionResolver:
    """Resolve latest versions and download URLs for catalog entries."""

    def __init__(
        self,
        catalog: Catalog,
        cache: VersionCache,
        downloads: DownloadService,
        apt: AptClient,
    ) -> None:
        self.catalog = catalog
        self.cache = cache
        self.downloads = downloads
        self.apt = apt
        self._strategies: dict[SourceType, SourceStrategy] = {}

    def _strategy_for(self, source_type: SourceType) -> SourceStrategy:
        if source_type not in self._strategies:
            strategy_cls = SOURCE_STRATEGIES[source_type]
            self._strategies[source_type] = strategy_cls(
                self.downloads, self.apt
            )
        return self._strategies[source_type]

    async def resolve(
        self, app_id: str, use_cache: bool = True
    ) -> VersionInfo | ErrorResult:
        """Resolve the latest version and download URL of an app.

        A fresh cache entry is returned as-is. Otherwise the source
        strategy runs; success overwrites the cache and failure leaves it
        untouched.

        Args:
            app_id: Catalog id
            use_cache: Set False to bypass a fresh cache entry

        Returns:
            VersionInfo on success, ErrorResult on failure

        """
        if use_cache:
            cached = self.cache.get(app_id)
            if cached is not None:
                return cached

        try:
            entry = self.catalog.get(app_id)
            if entry.source is None:
                msg = "No version source configured"
                return ErrorResult(error=f"{msg} for {app_id}")

            strategy = self._strategy_for(entry.source.type)
            info = await strategy.resolve(entry)
        except DebappsError as e:
            logger.debug("Version resolution failed for %s: %s", app_id, e)
            return ErrorResult(error=str(e))

        self.cache.save(app_id, info)
        logger.debug(
            "Resolved %s: %s (%s)", app_id, info["version"], info["download_url"]
        )
        return info

    def get_cached(self, app_id: str) -> CachedVersion | None:
        """Cached entry for app_id regardless of age."""
        return self.cache.get_cached(app_id)

    def clear_cache(self, app_id: str | None = None) -> int:
        """Drop one cache entry, or all of them."""
        return self.cache.clear_cache(app_id)

    def cache_stats(self) -> dict[str, int | str]:
        return self.cache.stats()
