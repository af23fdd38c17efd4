"""Unversioned direct downloads."""

from typing import cast

from debapps.constants import VERSION_LATEST
from debapps.core.sources.base import SourceStrategy
from debapps.domain.types import CatalogEntry, DirectDownloadSource, VersionInfo


class DirectDownloadStrategy(SourceStrategy):
    """Report "latest" and return the configured URL verbatim."""

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        source = cast(
            "DirectDownloadSource", self._source_of(entry, DirectDownloadSource)
        )
        return VersionInfo(version=VERSION_LATEST, download_url=source.url)
