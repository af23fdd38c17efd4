"""Installer strategies keyed by InstallMethod."""

from debapps.core.context import AppContext
from debapps.core.installers.appimage import AppImageInstaller
from debapps.core.installers.apt_repo import AptRepoInstaller
from debapps.core.installers.base import BaseInstaller, InstallRecord
from debapps.core.installers.deb import DebInstaller, DebTarballInstaller
from debapps.core.installers.flatpak import FlatpakInstaller
from debapps.core.installers.tarball import TarballInstaller
from debapps.domain.types import InstallMethod

INSTALLERS: dict[InstallMethod, type[BaseInstaller]] = {
    InstallMethod.APPIMAGE: AppImageInstaller,
    InstallMethod.APT_REPO: AptRepoInstaller,
    InstallMethod.DEB: DebInstaller,
    InstallMethod.TARBALL: TarballInstaller,
    InstallMethod.DEB_TARBALL: DebTarballInstaller,
    InstallMethod.FLATPAK: FlatpakInstaller,
}


def get_installer(ctx: AppContext, app_id: str) -> BaseInstaller:
    """Build the installer for an app's install_method.

    Raises:
        ConfigError: If the app is not in the catalog

    """
    entry = ctx.catalog.get(app_id)
    return INSTALLERS[entry.install_method](ctx)


__all__ = [
    "INSTALLERS",
    "BaseInstaller",
    "InstallRecord",
    "get_installer",
]
