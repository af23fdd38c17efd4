"""Path constants and utilities for debapps configuration.

Everything the tool owns (settings, version cache, ledger database, logs)
lives under ~/.config/debapps. System locations that installers write to
are configured separately through the [system] section of settings.conf.
"""

from pathlib import Path

from debapps.constants import (
    CATALOG_FILE_NAME,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
)


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    CONFIG_DIR = HOME_DIR / CONFIG_DIR_NAME / DEFAULT_CONFIG_SUBDIR

    # Bundled with the package
    PACKAGE_DIR = Path(__file__).parent.parent
    CATALOG_FILE = PACKAGE_DIR / "catalog" / CATALOG_FILE_NAME

    CACHE_DIR = CONFIG_DIR / "cache"
    DATA_DIR = CONFIG_DIR / "data"
    LOGS_DIR = CONFIG_DIR / "logs"
    TMP_DIR = Path("/tmp")

    SETTINGS_FILE = CONFIG_DIR / CONFIG_FILE_NAME
    LEDGER_FILE_NAME = "installed.db"

    @classmethod
    def get_ledger_path(cls, data_dir: Path | None = None) -> Path:
        """Get path to the SQLite install ledger.

        Args:
            data_dir: Optional data directory override

        Returns:
            Path to the ledger database file
        """
        return (data_dir or cls.DATA_DIR) / cls.LEDGER_FILE_NAME

    @classmethod
    def expand_path(cls, path_str: str) -> Path:
        """Expand ~ and resolve a path string.

        Example:
            >>> Paths.expand_path("~/apps")
            Path('/home/user/apps')
        """
        return Path(path_str).expanduser().resolve(strict=False)

    @classmethod
    def ensure_directories(cls, *directories: Path) -> None:
        """Create the given directories, or the defaults when none given."""
        targets = directories or (
            cls.CONFIG_DIR,
            cls.CACHE_DIR,
            cls.DATA_DIR,
            cls.LOGS_DIR,
        )
        for directory in targets:
            directory.mkdir(parents=True, exist_ok=True)
