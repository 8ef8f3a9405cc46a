"""SQLite connection layer with sqlite-vec extension."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import sqlite_vec

from reposync.errors import StorageError

DEFAULT_BUSY_TIMEOUT_MS = 5000


class Database:
    """Per-deployment SQLite database with sqlite-vec distance functions loaded.

    One connection per caller thread; the ingestion workers never touch it.
    """

    def __init__(self, db_path: Path | str, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
        """Store the database path. Call connect() to open the connection.

        Args:
            db_path: Path to the SQLite database file (created if missing).
            busy_timeout_ms: How long a writer waits on a locked database,
                e.g. while another poll of the same project commits.
        """
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Open a connection with sqlite-vec loaded, FKs on and WAL journaling.

        Raises:
            StorageError: If the file cannot be opened or sqlite-vec fails to load.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database '{self.db_path}': {exc}") from exc
        try:
            conn.row_factory = sqlite3.Row
            conn.enable_load_extension(True)
            sqlite_vec.load(conn)
            conn.enable_load_extension(False)
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        except sqlite3.Error as exc:
            conn.close()
            raise StorageError(f"Cannot prepare database '{self.db_path}': {exc}") from exc
        return conn

    def __enter__(self) -> sqlite3.Connection:
        """Open the database and return the connection (context manager support)."""
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        """Close the connection when leaving the context manager."""
        if self._conn:
            self._conn.close()
            self._conn = None
