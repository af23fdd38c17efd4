"""Versions of packages served by APT."""

from debapps.constants import APT_URL_SCHEME, VERSION_LATEST
from debapps.core.sources.base import SourceStrategy
from debapps.domain.types import (
    AptPackageSource,
    AptRepositorySource,
    CatalogEntry,
    VersionInfo,
)
from debapps.exceptions import ConfigError


class AptCandidateStrategy(SourceStrategy):
    """Candidate version from ``apt-cache policy``.

    Used for both third-party repositories and default archives. A
    repository that is not configured yet has no candidate, which is
    reported as "latest".
    """

    async def resolve(self, entry: CatalogEntry) -> VersionInfo:
        if not isinstance(entry.source, AptRepositorySource | AptPackageSource):
            msg = "Expected an APT source"
            raise ConfigError(msg, target=entry.id)

        package = entry.source.package_name.split()[0]
        version = await self.apt.candidate_version(package)
        return VersionInfo(
            version=version or VERSION_LATEST,
            download_url=f"{APT_URL_SCHEME}{entry.source.package_name}",
        )
