"""SQLite install ledger.

Records which apps debapps installed, how, at which version, and the
files each install created. Every statement is parameterized; file rows
cascade away with their app row.
"""

import sqlite3
import time
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any

import orjson

from debapps.constants import PACKAGE_BASED_METHODS
from debapps.domain.types import FileType, LedgerEntry
from debapps.exceptions import LedgerError
from debapps.infrastructure.apt import AptClient
from debapps.logger import get_logger

logger = get_logger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS installed_apps (
        app_id TEXT PRIMARY KEY,
        app_name TEXT NOT NULL,
        install_method TEXT NOT NULL,
        version TEXT,
        install_date INTEGER,
        install_location TEXT,
        metadata TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS install_files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        app_id TEXT NOT NULL,
        file_path TEXT NOT NULL,
        file_type TEXT,
        FOREIGN KEY(app_id) REFERENCES installed_apps(app_id)
            ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_app_id ON install_files(app_id)",
    "CREATE INDEX IF NOT EXISTS idx_install_method "
    "ON installed_apps(install_method)",
)


def _row_to_entry(row: sqlite3.Row) -> LedgerEntry:
    raw_metadata = row["metadata"] or "{}"
    try:
        metadata = orjson.loads(raw_metadata)
    except orjson.JSONDecodeError:
        logger.warning("Invalid metadata for %s, ignoring", row["app_id"])
        metadata = {}
    return LedgerEntry(
        app_id=row["app_id"],
        app_name=row["app_name"],
        install_method=row["install_method"],
        version=row["version"] or "",
        install_location=row["install_location"] or "",
        metadata=metadata if isinstance(metadata, dict) else {},
        install_date=int(row["install_date"] or 0),
    )


class InstallLedger:
    """Persistent record of installed applications.

    Usage:
        ledger = InstallLedger(Paths.get_ledger_path())
        ledger.upsert(LedgerEntry("obsidian", "Obsidian", "appimage", "1.5.3"))
        ledger.add_file("obsidian", "/usr/sbin/obsidian", FileType.SYMLINK)
    """

    def __init__(self, db_path: Path) -> None:
        """Open (and if needed create) the ledger database.

        Raises:
            LedgerError: If the schema cannot be created

        """
        self.db_path = db_path
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                for statement in _SCHEMA:
                    conn.execute(statement)
        except (OSError, sqlite3.Error) as e:
            msg = f"Cannot initialize ledger at {db_path}: {e}"
            raise LedgerError(msg) from e

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            try:
                with conn:
                    yield conn
            except sqlite3.Error as e:
                raise LedgerError(str(e)) from e

    # --- writes ----------------------------------------------------------

    def upsert(self, entry: LedgerEntry) -> None:
        """Insert or replace an app row.

        Replacing a row starts a fresh file manifest; callers add file rows
        after upserting.
        """
        install_date = entry.install_date or int(time.time())
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM install_files WHERE app_id = ?", (entry.app_id,)
            )
            conn.execute(
                """
                INSERT OR REPLACE INTO installed_apps
                    (app_id, app_name, install_method, version,
                     install_date, install_location, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.app_id,
                    entry.app_name,
                    entry.install_method,
                    entry.version,
                    install_date,
                    entry.install_location,
                    orjson.dumps(entry.metadata).decode(),
                ),
            )
        logger.debug("Ledger: recorded %s %s", entry.app_id, entry.version)

    def remove(self, app_id: str) -> bool:
        """Delete an app row and, by cascade, its file rows.

        Returns:
            True if a row was deleted

        """
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM installed_apps WHERE app_id = ?", (app_id,)
            )
        if cursor.rowcount:
            logger.debug("Ledger: removed %s", app_id)
        return cursor.rowcount > 0

    def add_file(
        self, app_id: str, file_path: str | Path, file_type: FileType
    ) -> None:
        """Record a file created by an install.

        Raises:
            LedgerError: If app_id has no ledger row

        """
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO install_files (app_id, file_path, file_type) "
                "VALUES (?, ?, ?)",
                (app_id, str(file_path), file_type.value),
            )

    def record(
        self,
        entry: LedgerEntry,
        files: list[tuple[str | Path, FileType]],
    ) -> None:
        """Write an app row and its file manifest in one transaction.

        Either the row and every file row land, or nothing changes.

        Raises:
            LedgerError: If any statement fails

        """
        install_date = entry.install_date or int(time.time())
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM install_files WHERE app_id = ?", (entry.app_id,)
            )
            conn.execute(
                """
                INSERT OR REPLACE INTO installed_apps
                    (app_id, app_name, install_method, version,
                     install_date, install_location, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.app_id,
                    entry.app_name,
                    entry.install_method,
                    entry.version,
                    install_date,
                    entry.install_location,
                    orjson.dumps(entry.metadata).decode(),
                ),
            )
            conn.executemany(
                "INSERT INTO install_files (app_id, file_path, file_type) "
                "VALUES (?, ?, ?)",
                [
                    (entry.app_id, str(path), file_type.value)
                    for path, file_type in files
                ],
            )
        logger.debug(
            "Ledger: recorded %s %s with %d file(s)",
            entry.app_id,
            entry.version,
            len(files),
        )

    def update_version(self, app_id: str, version: str) -> bool:
        """Set the recorded version of an installed app."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE installed_apps SET version = ? WHERE app_id = ?",
                (version, app_id),
            )
        return cursor.rowcount > 0

    # --- reads -----------------------------------------------------------

    def get(self, app_id: str) -> LedgerEntry | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM installed_apps WHERE app_id = ?", (app_id,)
            ).fetchone()
        return _row_to_entry(row) if row else None

    def is_installed(self, app_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM installed_apps WHERE app_id = ?",
                (app_id,),
            ).fetchone()
        return bool(row[0])

    def list_files(self, app_id: str) -> list[tuple[str, str]]:
        """Return ``(file_path, file_type)`` pairs in insertion order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT file_path, file_type FROM install_files "
                "WHERE app_id = ? ORDER BY id",
                (app_id,),
            ).fetchall()
        return [(row["file_path"], row["file_type"] or "") for row in rows]

    def list_installed(self) -> list[LedgerEntry]:
        """All rows, most recent install first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM installed_apps ORDER BY install_date DESC"
            ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def stats(self) -> dict[str, int]:
        """Number of installed apps per install method."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT install_method, COUNT(*) AS count "
                "FROM installed_apps GROUP BY install_method "
                "ORDER BY count DESC"
            ).fetchall()
        return {row["install_method"]: row["count"] for row in rows}

    # --- maintenance -----------------------------------------------------

    def export_json(self, path: Path) -> int:
        """Write every row (with its files) to a JSON file.

        Returns:
            Number of exported apps

        """
        export: list[dict[str, Any]] = []
        for entry in self.list_installed():
            export.append(
                {
                    "app_id": entry.app_id,
                    "app_name": entry.app_name,
                    "install_method": entry.install_method,
                    "version": entry.version,
                    "install_date": entry.install_date,
                    "install_location": entry.install_location,
                    "metadata": entry.metadata,
                    "files": [
                        {"file_path": file_path, "file_type": file_type}
                        for file_path, file_type in self.list_files(entry.app_id)
                    ],
                }
            )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(export, option=orjson.OPT_INDENT_2))
        logger.debug("Ledger exported to %s", path)
        return len(export)

    def vacuum(self) -> None:
        """Compact the database file."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            try:
                conn.execute("VACUUM")
            except sqlite3.Error as e:
                raise LedgerError(str(e)) from e

    async def sync_versions(self, apt: AptClient) -> dict[str, tuple[str, str]]:
        """Refresh versions of package-based installs from dpkg.

        Rows without a ``package`` in their metadata, or whose package is
        no longer installed, are left alone.

        Returns:
            ``{app_id: (old_version, new_version)}`` for updated rows

        """
        changes: dict[str, tuple[str, str]] = {}
        for entry in self.list_installed():
            if entry.install_method not in PACKAGE_BASED_METHODS:
                continue
            package = str(entry.metadata.get("package", "")).split()
            if not package:
                continue
            current = await apt.get_version(package[0])
            if current and current != entry.version:
                self.update_version(entry.app_id, current)
                changes[entry.app_id] = (entry.version, current)
                logger.info(
                    "Ledger: %s %s → %s", entry.app_id, entry.version, current
                )
        return changes
