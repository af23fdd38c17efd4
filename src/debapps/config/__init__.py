"""Configuration: settings file, paths and catalog loading."""

from debapps.config.catalog_loader import CatalogLoader
from debapps.config.paths import Paths
from debapps.config.settings import (
    DirectorySettings,
    NetworkSettings,
    Settings,
    SettingsManager,
    SystemPaths,
)

__all__ = [
    "CatalogLoader",
    "DirectorySettings",
    "NetworkSettings",
    "Paths",
    "Settings",
    "SettingsManager",
    "SystemPaths",
]
