"""Tests for VersionResolver with GitHub and APT sources."""

import os
import time

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from conftest import FakeRunner
from debapps.config.settings import NetworkSettings
from debapps.core.cache import VersionCache
from debapps.core.download import DownloadService
from debapps.core.resolver import VersionResolver
from debapps.domain.catalog import Catalog
from debapps.infrastructure.apt import AptClient

RELEASES_URL = (
    "https://api.github.com/repos/obsidianmd/obsidian-releases/releases"
)


@pytest.fixture
def cache(tmp_path):
    return VersionCache(tmp_path / "cache")


@pytest_asyncio.fixture
async def session():
    async with aiohttp.ClientSession() as client_session:
        yield client_session


def make_resolver(catalog, cache, session, runner=None):
    runner = runner or FakeRunner()
    return VersionResolver(
        catalog,
        cache,
        DownloadService(session, NetworkSettings(retry_attempts=1), runner),
        AptClient(runner),
    )


class TestGitHubResolution:
    """Test GitHub release resolution through the resolver."""

    @pytest.mark.asyncio
    async def test_prefix_picks_first_stable_release(
        self, sample_catalog, cache, session
    ):
        releases = [
            {"tag_name": "v1.7.0", "prerelease": True},
            {"tag_name": "insider-1.6.9", "prerelease": False},
            {"tag_name": "v1.6.7", "draft": False, "prerelease": False},
            {"tag_name": "v1.6.5", "draft": False, "prerelease": False},
        ]
        with aioresponses() as m:
            m.get(RELEASES_URL, payload=releases)
            resolver = make_resolver(sample_catalog, cache, session)
            info = await resolver.resolve("obsidian")

        assert info["version"] == "1.6.7"
        assert info["download_url"] == (
            "https://github.com/obsidianmd/obsidian-releases/releases/"
            "download/v1.6.7/Obsidian-1.6.7.AppImage"
        )
        assert cache.get("obsidian")["version"] == "1.6.7"

    @pytest.mark.asyncio
    async def test_latest_endpoint_without_prefix(self, cache, session):
        catalog = Catalog.from_dict(
            {
                "categories": [
                    {
                        "id": "passwords",
                        "name": "Passwords",
                        "apps": [
                            {
                                "id": "keepassxc",
                                "name": "KeePassXC",
                                "install_method": "appimage",
                                "source": {
                                    "type": "github_release",
                                    "repo": "keepassxreboot/keepassxc",
                                    "asset_pattern": (
                                        "KeePassXC-{VERSION}-x86_64.AppImage"
                                    ),
                                },
                            }
                        ],
                    }
                ]
            }
        )
        url = (
            "https://api.github.com/repos/keepassxreboot/keepassxc/"
            "releases/latest"
        )
        with aioresponses() as m:
            m.get(url, payload={"tag_name": "2.7.9"})
            info = await make_resolver(catalog, cache, session).resolve(
                "keepassxc"
            )

        assert info["version"] == "2.7.9"
        assert info["download_url"].endswith(
            "/releases/download/2.7.9/KeePassXC-2.7.9-x86_64.AppImage"
        )

    @pytest.mark.asyncio
    async def test_api_message_is_an_error(
        self, sample_catalog, cache, session
    ):
        with aioresponses() as m:
            m.get(
                RELEASES_URL,
                status=403,
                payload={"message": "API rate limit exceeded"},
            )
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian"
            )

        assert "API rate limit exceeded" in info["error"]
        assert cache.get_cached("obsidian") is None

    @pytest.mark.asyncio
    async def test_no_matching_release(self, sample_catalog, cache, session):
        with aioresponses() as m:
            m.get(RELEASES_URL, payload=[{"tag_name": "insider-1"}])
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian"
            )

        assert "No release tag" in info["error"]


class TestCaching:
    """Test cache interaction."""

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_network(
        self, sample_catalog, cache, session
    ):
        cache.save(
            "obsidian",
            {"version": "1.5.0", "download_url": "https://x/o.AppImage"},
        )
        with aioresponses():
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian"
            )

        assert info["version"] == "1.5.0"

    @pytest.mark.asyncio
    async def test_bypass_cache(self, sample_catalog, cache, session):
        cache.save(
            "obsidian",
            {"version": "1.5.0", "download_url": "https://x/o.AppImage"},
        )
        with aioresponses() as m:
            m.get(RELEASES_URL, payload=[{"tag_name": "v1.6.0"}])
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian", use_cache=False
            )

        assert info["version"] == "1.6.0"
        assert cache.get("obsidian")["version"] == "1.6.0"

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_entry(
        self, sample_catalog, cache, session
    ):
        cache.save(
            "obsidian",
            {"version": "1.5.0", "download_url": "https://x/o.AppImage"},
        )
        with aioresponses() as m:
            m.get(RELEASES_URL, exception=aiohttp.ClientConnectionError())
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian", use_cache=False
            )

        assert "error" in info
        assert cache.get_cached("obsidian")["version"] == "1.5.0"

    @staticmethod
    def age(cache, app_id):
        stale = time.time() - cache.ttl_seconds - 60
        os.utime(cache._get_cache_file_path(app_id), (stale, stale))

    @pytest.mark.asyncio
    async def test_expired_entry_is_fetched_again(
        self, sample_catalog, cache, session
    ):
        cache.save(
            "obsidian",
            {"version": "1.5.0", "download_url": "https://x/o.AppImage"},
        )
        self.age(cache, "obsidian")
        with aioresponses() as m:
            m.get(RELEASES_URL, payload=[{"tag_name": "v1.6.0"}])
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian"
            )

        assert info["version"] == "1.6.0"
        assert sum(len(calls) for calls in m.requests.values()) == 1
        assert cache.get("obsidian")["version"] == "1.6.0"

    @pytest.mark.asyncio
    async def test_expired_entry_is_not_served_on_failure(
        self, sample_catalog, cache, session
    ):
        cache.save(
            "obsidian",
            {"version": "1.5.0", "download_url": "https://x/o.AppImage"},
        )
        self.age(cache, "obsidian")
        with aioresponses() as m:
            m.get(RELEASES_URL, exception=aiohttp.ClientConnectionError())
            info = await make_resolver(sample_catalog, cache, session).resolve(
                "obsidian"
            )

        assert "error" in info
        assert "version" not in info
        assert cache.get("obsidian") is None
        assert cache.get_cached("obsidian")["version"] == "1.5.0"


class TestOtherSources:
    """Test APT, direct and missing sources."""

    @pytest.mark.asyncio
    async def test_apt_candidate(self, sample_catalog, cache, session):
        runner = FakeRunner()
        runner.on(
            "apt-cache",
            "policy",
            stdout="signal-desktop:\n  Installed: (none)\n  Candidate: 7.2.1\n",
        )
        info = await make_resolver(
            sample_catalog, cache, session, runner
        ).resolve("signal")

        assert info == {
            "version": "7.2.1",
            "download_url": "apt:signal-desktop",
        }

    @pytest.mark.asyncio
    async def test_apt_without_candidate_is_latest(
        self, sample_catalog, cache, session
    ):
        runner = FakeRunner()
        runner.on("apt-cache", stdout="  Candidate: (none)\n")
        info = await make_resolver(
            sample_catalog, cache, session, runner
        ).resolve("wireshark")

        assert info["version"] == "latest"

    @pytest.mark.asyncio
    async def test_direct_download(self, sample_catalog, cache, session):
        info = await make_resolver(sample_catalog, cache, session).resolve(
            "chrome"
        )

        assert info == {
            "version": "latest",
            "download_url": "https://dl.google.com/chrome.deb",
        }

    @pytest.mark.asyncio
    async def test_unknown_app_and_missing_source(
        self, sample_catalog, cache, session
    ):
        resolver = make_resolver(sample_catalog, cache, session)

        assert "error" in await resolver.resolve("missing")
        assert "No version source" in (await resolver.resolve("discord"))[
            "error"
        ]

    @pytest.mark.asyncio
    async def test_cache_management(self, sample_catalog, cache, session):
        resolver = make_resolver(sample_catalog, cache, session)
        for app_id in ("obsidian", "chrome"):
            cache.save(
                app_id, {"version": "1.0", "download_url": "https://x/a"}
            )

        assert resolver.get_cached("chrome")["version"] == "1.0"
        assert resolver.cache_stats()["fresh_entries"] == 2

        resolver.clear_cache("chrome")
        assert resolver.get_cached("chrome") is None
        assert resolver.cache_stats()["total_entries"] == 1
