"""Version/URL discovery strategies keyed by SourceType."""

from debapps.core.sources.apt import AptCandidateStrategy
from debapps.core.sources.base import SourceStrategy
from debapps.core.sources.direct import DirectDownloadStrategy
from debapps.core.sources.github import GitHubReleaseStrategy
from debapps.core.sources.scrape import (
    BurpStrategy,
    CursorStrategy,
    LibreOfficeStrategy,
    SlackStrategy,
    TorBrowserStrategy,
)
from debapps.domain.types import SourceType

SOURCE_STRATEGIES: dict[SourceType, type[SourceStrategy]] = {
    SourceType.GITHUB_RELEASE: GitHubReleaseStrategy,
    SourceType.DIRECT_DOWNLOAD: DirectDownloadStrategy,
    SourceType.APT_REPOSITORY: AptCandidateStrategy,
    SourceType.APT_PACKAGE: AptCandidateStrategy,
    SourceType.BURP_INSTALLER: BurpStrategy,
    SourceType.TOR_BROWSER_LATEST: TorBrowserStrategy,
    SourceType.LIBREOFFICE_DEB_TARBALL: LibreOfficeStrategy,
    SourceType.CURSOR_LATEST: CursorStrategy,
    SourceType.SLACK_LATEST: SlackStrategy,
}

__all__ = ["SOURCE_STRATEGIES", "SourceStrategy"]
