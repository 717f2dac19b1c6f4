"""
Owns the single SQLite connection shared by the catalog persister, the reader
and the account store, plus the schema migrations that create its tables.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from iptv_catalog.exceptions import SchemaError

log = logging.getLogger(__name__)

T = TypeVar("T")

REQUIRED_TABLES = ("account", "categories", "items")

# Each entry upgrades the schema from version N to N + 1
MIGRATIONS = [
    """
    CREATE TABLE IF NOT EXISTS account (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL,
        password TEXT NOT NULL,
        server TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        type TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        logo TEXT,
        url TEXT NOT NULL,
        category_id INTEGER NOT NULL,
        FOREIGN KEY (category_id) REFERENCES categories (id)
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_categories_type ON categories(type);
    CREATE INDEX IF NOT EXISTS idx_items_category ON items(category_id);
    """,
]


def apply_migrations(conn: sqlite3.Connection) -> int:
    """
    Brings the schema up to date, tracking progress in `PRAGMA user_version`.

    This runs at application startup. The persister and reader only assume the
    tables exist; they never create them.

    Returns:
        The schema version after migration.
    """
    version = conn.execute("PRAGMA user_version").fetchone()[0]
    for index in range(version, len(MIGRATIONS)):
        log.debug(f"Applying catalog schema migration {index + 1}...")
        conn.executescript(
            f"BEGIN;\n{MIGRATIONS[index]}\nPRAGMA user_version = {index + 1};\nCOMMIT;"
        )
    return max(version, len(MIGRATIONS))


class CatalogDatabase:
    """
    A single shared SQLite connection used from asyncio code.

    Statements run in a worker thread via `asyncio.to_thread`, so every storage
    call is a suspension point. Callers that need a consistent view (a whole
    transaction, or a read that must not see one in progress) hold `lock`.
    The connection is in autocommit mode; transactions are explicit.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self.lock = asyncio.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        """Opens the connection with the PRAGMA settings used for the catalog."""
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                self.db_path,
                timeout=30,
                check_same_thread=False,
                isolation_level=None,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA temp_store=MEMORY;")
            conn.execute("PRAGMA foreign_keys=ON;")
            return conn
        except (OSError, sqlite3.Error) as e:
            log.error(f"Failed to open catalog database '{self.db_path}': {e}")
            raise

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = self._get_connection()
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "CatalogDatabase":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def migrate(self) -> int:
        """Creates or upgrades the catalog tables."""
        return apply_migrations(self.connection)

    def check_schema(self) -> None:
        """
        Verifies that all catalog tables exist.

        Raises:
            SchemaError: If any table is missing.
        """
        rows = self.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
        existing = {row[0] for row in rows}
        missing = [name for name in REQUIRED_TABLES if name not in existing]
        if missing:
            raise SchemaError(
                f"Catalog database '{self.db_path}' is missing tables: "
                f"{', '.join(missing)}."
            )

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Runs a synchronous database function in a worker thread."""
        return await asyncio.to_thread(func, *args)

    async def execute(self, sql: str, params: tuple | list = ()) -> sqlite3.Cursor:
        return await self.run(self.connection.execute, sql, params)

    def _fetch_all_sync(self, sql: str, params: tuple | list) -> list[sqlite3.Row]:
        return self.connection.execute(sql, params).fetchall()

    async def fetch_all(self, sql: str, params: tuple | list = ()) -> list[sqlite3.Row]:
        return await self.run(self._fetch_all_sync, sql, params)
