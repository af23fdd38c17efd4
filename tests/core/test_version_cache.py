"""Tests for VersionCache."""

import os
import time

import orjson
import pytest

from debapps.core.cache import VersionCache


@pytest.fixture
def cache(tmp_path):
    return VersionCache(tmp_path / "cache", ttl_seconds=900)


def _info(version="1.5.3"):
    return {
        "version": version,
        "download_url": f"https://example.com/app-{version}.AppImage",
    }


class TestVersionCache:
    """Test cache reads, writes and expiry."""

    def test_miss_when_absent(self, cache):
        assert cache.get("obsidian") is None
        assert cache.get_cached("obsidian") is None

    def test_save_then_get(self, cache):
        cache.save("obsidian", _info())

        hit = cache.get("obsidian")
        assert hit["version"] == "1.5.3"
        assert hit["download_url"].endswith("app-1.5.3.AppImage")
        assert hit["fetched_at"] > 0

    def test_file_layout(self, cache):
        cache.save("obsidian", _info())

        cache_file = cache.cache_dir / "obsidian_version.json"
        data = orjson.loads(cache_file.read_bytes())
        assert set(data) == {"version", "download_url", "fetched_at"}
        assert not list(cache.cache_dir.glob("*.tmp"))

    def test_expired_entry_is_a_miss(self, cache):
        cache.save("obsidian", _info())
        cache_file = cache.cache_dir / "obsidian_version.json"
        old = time.time() - 901
        os.utime(cache_file, (old, old))

        assert cache.get("obsidian") is None
        assert cache.get_cached("obsidian")["version"] == "1.5.3"

    def test_corrupted_file_is_deleted(self, cache):
        cache.cache_dir.mkdir(parents=True)
        cache_file = cache.cache_dir / "obsidian_version.json"
        cache_file.write_text("{not json")

        assert cache.get("obsidian") is None
        assert not cache_file.exists()

    def test_save_overwrites(self, cache):
        cache.save("obsidian", _info("1.5.3"))
        cache.save("obsidian", _info("1.6.0"))

        assert cache.get("obsidian")["version"] == "1.6.0"

    def test_clear_one_and_all(self, cache):
        cache.save("obsidian", _info())
        cache.save("joplin", _info())
        cache.save("signal", _info())

        assert cache.clear_cache("obsidian") == 1
        assert cache.get("obsidian") is None
        assert cache.clear_cache() == 2
        assert cache.clear_cache() == 0

    def test_stats(self, cache):
        cache.save("obsidian", _info())
        cache.save("joplin", _info())
        old = time.time() - 2000
        os.utime(cache.cache_dir / "joplin_version.json", (old, old))

        stats = cache.stats()
        assert stats["total_entries"] == 2
        assert stats["fresh_entries"] == 1
        assert stats["expired_entries"] == 1
        assert stats["ttl_seconds"] == 900

    def test_stats_without_directory(self, cache):
        assert cache.stats()["total_entries"] == 0
