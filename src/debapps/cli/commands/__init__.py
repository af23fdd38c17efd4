"""Command handlers for the debapps CLI."""

from .auth import AuthHandler
from .base import BaseCommandHandler
from .cache import CacheHandler
from .catalog import CatalogHandler
from .ledger import LedgerHandler
from .lifecycle import (
    InstallHandler,
    ReinstallHandler,
    RemoveHandler,
    UpgradeHandler,
)
from .status import StatusHandler

__all__ = [
    "AuthHandler",
    "BaseCommandHandler",
    "CacheHandler",
    "CatalogHandler",
    "InstallHandler",
    "LedgerHandler",
    "ReinstallHandler",
    "RemoveHandler",
    "StatusHandler",
    "UpgradeHandler",
]
