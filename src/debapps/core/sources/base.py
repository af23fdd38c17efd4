"""Base class for version/URL discovery strategies."""

from abc import ABC, abstractmethod

from debapps.core.download import DownloadService
from debapps.domain.types import CatalogEntry, VersionInfo
from debapps.exceptions import ConfigError
from debapps.infrastructure.apt import AptClient


class SourceStrategy(ABC):
    """Resolve the latest version and download URL for one source type.

    Subclasses raise ResolutionError (or DownloadError for transport
    failures); VersionResolver turns those into error results.
    """

    def __init__(self, downloads: DownloadService, apt: AptClient) -> None:
        self.downloads = downloads
        self.apt = apt

    @abstractmethod
    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        """Return ``{version, download_url}`` for a catalog entry."""

    @staticmethod
    def _source_of(entry: CatalogEntry, source_cls: type) -> object:
        if not isinstance(entry.source, source_cls):
            msg = f"Expected a {source_cls.__name__} source"
            raise ConfigError(msg, target=entry.id)
        return entry.source
