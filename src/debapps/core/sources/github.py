"""GitHub release resolution."""

from typing import Any, cast

from debapps.constants import (
    GITHUB_API_BASE,
    GITHUB_WEB_BASE,
    VERSION_PLACEHOLDER,
)
from debapps.core.sources.base import SourceStrategy
from debapps.domain.types import CatalogEntry, GitHubReleaseSource, VersionInfo
from debapps.exceptions import ResolutionError
from debapps.logger import get_logger

logger = get_logger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"


def build_download_url(
    source: GitHubReleaseSource, tag_name: str, version: str
) -> str:
    """Expand asset_pattern into an absolute download URL.

    Args:
        source: GitHub source definition
        tag_name: Full release tag (prefix included)
        version: Tag with the prefix stripped

    Returns:
        Absolute URL; repo-relative assets point at the release download
        path of tag_name

    """
    asset = source.asset_pattern.replace(VERSION_PLACEHOLDER, version)
    if asset.startswith("http"):
        return asset
    return f"{GITHUB_WEB_BASE}/{source.repo}/releases/download/{tag_name}/{asset}"


class GitHubReleaseStrategy(SourceStrategy):
    """Latest stable GitHub release, optionally filtered by tag prefix."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast(
            "GitHubReleaseSource", self._source_of(entry, GitHubReleaseSource)
        )
        prefix = source.version_prefix
        if prefix:
            url = f"{GITHUB_API_BASE}/repos/{source.repo}/releases"
        else:
            url = f"{GITHUB_API_BASE}/repos/{source.repo}/releases/latest"

        logger.debug("Querying GitHub API: %s", url)
        data = await self.downloads.fetch_json(
            url, headers={"Accept": GITHUB_ACCEPT}
        )

        if isinstance(data, dict) and data.get("message"):
            msg = f"GitHub API error: {data['message']}"
            raise ResolutionError(msg, target=entry.id)

        if prefix:
            tag_name = self._first_stable_tag(data, prefix)
        elif isinstance(data, dict):
            tag_name = str(data.get("tag_name") or "")
        else:
            tag_name = ""
        if not tag_name:
            msg = f"No release tag found for {source.repo}"
            raise ResolutionError(msg, target=entry.id)

        version = tag_name[len(prefix) :] if prefix else tag_name
        return VersionInfo(
            version=version,
            download_url=build_download_url(source, tag_name, version),
        )

    @staticmethod
    def _first_stable_tag(releases: Any, prefix: str) -> str:
        if not isinstance(releases, list):
            return ""
        for release in releases:
            tag = str(release.get("tag_name") or "")
            if (
                tag.startswith(prefix)
                and not release.get("draft", False)
                and not release.get("prerelease", False)
            ):
                return tag
        return ""
