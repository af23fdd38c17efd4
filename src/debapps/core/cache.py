"""Per-application version cache.

Each app has one JSON file, ``<cache_dir>/<app_id>_version.json``, holding
``{version, download_url, fetched_at}``. Freshness is judged from the file
mtime so that touching or rewriting the file renews it.
"""

import contextlib
import time
from pathlib import Path
from typing import Any

import orjson

from debapps.constants import VERSION_CACHE_SUFFIX, VERSION_CACHE_TTL_SECONDS
from debapps.domain.types import CachedVersion, VersionInfo
from debapps.logger import get_logger

logger = get_logger(__name__)


class VersionCache:
    """File-backed cache of resolved versions.

    Usage:
        cache = VersionCache(settings.directory.cache)
        hit = cache.get("obsidian")
        if hit is None:
            cache.save("obsidian", {"version": "1.5.3", "download_url": url})
    """

    def __init__(
        self, cache_dir: Path, ttl_seconds: int = VERSION_CACHE_TTL_SECONDS
    ) -> None:
        """Initialize the version cache.

        Args:
            cache_dir: Directory holding the cache files
            ttl_seconds: Freshness window

        """
        self.cache_dir = cache_dir
        self.ttl_seconds = ttl_seconds

    def _get_cache_file_path(self, app_id: str) -> Path:
        return self.cache_dir / f"{app_id}{VERSION_CACHE_SUFFIX}"

    def _is_fresh(self, cache_file: Path) -> bool:
        try:
            age = time.time() - cache_file.stat().st_mtime
        except OSError:
            return False
        return age < self.ttl_seconds

    def _read(self, cache_file: Path) -> CachedVersion | None:
        try:
            data: dict[str, Any] = orjson.loads(cache_file.read_bytes())
            return CachedVersion(
                version=str(data["version"]),
                download_url=str(data["download_url"]),
                fetched_at=int(data.get("fetched_at", 0)),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            # orjson raises ValueError subclasses for JSON errors
            logger.warning(
                "Cache file corrupted for %s: %s", cache_file.name, e
            )
            with contextlib.suppress(OSError):
                cache_file.unlink()
            return None

    def get(self, app_id: str) -> CachedVersion | None:
        """Return the cached entry if present and fresh."""
        cache_file = self._get_cache_file_path(app_id)
        if not cache_file.exists():
            logger.debug("No version cache for %s", app_id)
            return None
        if not self._is_fresh(cache_file):
            logger.debug("Version cache expired for %s", app_id)
            return None

        entry = self._read(cache_file)
        if entry is not None:
            logger.debug("Version cache hit for %s", app_id)
        return entry

    def get_cached(self, app_id: str) -> CachedVersion | None:
        """Return the cached entry regardless of its age."""
        cache_file = self._get_cache_file_path(app_id)
        if not cache_file.exists():
            return None
        return self._read(cache_file)

    def save(self, app_id: str, info: VersionInfo) -> None:
        """Overwrite the cache entry for app_id.

        Uses an atomic write so that a reader never sees a partial file.

        Args:
            app_id: Application id
            info: Resolved version and download URL

        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        cache_file = self._get_cache_file_path(app_id)
        entry = CachedVersion(
            version=info["version"],
            download_url=info["download_url"],
            fetched_at=int(time.time()),
        )

        temp_file = cache_file.with_suffix(".tmp")
        try:
            temp_file.write_bytes(orjson.dumps(entry, option=orjson.OPT_INDENT_2))
            temp_file.replace(cache_file)
        except OSError as e:
            logger.error("Failed to save version cache for %s: %s", app_id, e)
            with contextlib.suppress(OSError):
                temp_file.unlink()
            return
        logger.debug("Cached version %s for %s", entry["version"], app_id)

    def clear_cache(self, app_id: str | None = None) -> int:
        """Delete one app's entry, or every entry when app_id is None.

        Returns:
            Number of files removed

        """
        if app_id:
            targets = [self._get_cache_file_path(app_id)]
        else:
            targets = list(self.cache_dir.glob(f"*{VERSION_CACHE_SUFFIX}"))

        removed = 0
        for cache_file in targets:
            with contextlib.suppress(FileNotFoundError):
                cache_file.unlink()
                removed += 1
        logger.debug("Cleared %d version cache entries", removed)
        return removed

    def stats(self) -> dict[str, int | str]:
        """Summarize the cache directory.

        Returns:
            Dictionary with total, fresh and expired counts, the cache
            directory and the TTL

        """
        cache_files = (
            list(self.cache_dir.glob(f"*{VERSION_CACHE_SUFFIX}"))
            if self.cache_dir.exists()
            else []
        )
        fresh_count = sum(1 for f in cache_files if self._is_fresh(f))
        return {
            "total_entries": len(cache_files),
            "fresh_entries": fresh_count,
            "expired_entries": len(cache_files) - fresh_count,
            "cache_directory": str(self.cache_dir),
            "ttl_seconds": self.ttl_seconds,
        }
