"""
Stores the credentials of the logged-in account in the catalog database.
"""

import logging
import sqlite3

from pydantic import ValidationError

from iptv_catalog.exceptions import PersistError
from iptv_catalog.models.catalog import Credentials

from .database import CatalogDatabase

log = logging.getLogger(__name__)


class AccountStore:
    """Keeps at most one account row: the credentials of the current session."""

    def __init__(self, database: CatalogDatabase):
        self._db = database

    def _save_sync(self, credentials: Credentials) -> None:
        conn = self._db.connection
        conn.execute("BEGIN IMMEDIATE")
        try:
            conn.execute("DELETE FROM account")
            conn.execute(
                "INSERT INTO account (username, password, server) VALUES (?, ?, ?)",
                (credentials.username, credentials.password, credentials.server),
            )
            conn.execute("COMMIT")
        except sqlite3.Error:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                log.warning(f"Rollback of account transaction failed: {e}")
            raise

    async def save(self, credentials: Credentials) -> None:
        """
        Replaces the stored account with `credentials`.

        Raises:
            PersistError: If the account cannot be written.
        """
        async with self._db.lock:
            try:
                await self._db.run(self._save_sync, credentials)
            except sqlite3.Error as e:
                raise PersistError(f"Failed to save account: {e}") from e
        log.debug(f"Stored account '{credentials.username}' for {credentials.server}.")

    async def load(self) -> Credentials | None:
        """Returns the stored credentials, or None when nobody is logged in."""
        async with self._db.lock:
            rows = await self._db.fetch_all(
                "SELECT username, password, server FROM account ORDER BY id DESC LIMIT 1"
            )
        if not rows:
            return None
        row = rows[0]
        try:
            return Credentials(
                username=row["username"], password=row["password"], server=row["server"]
            )
        except ValidationError as e:
            log.warning(f"Ignoring invalid stored account: {e}")
            return None

    async def clear(self) -> None:
        """Forgets the stored account (logout). The catalog is kept."""
        async with self._db.lock:
            await self._db.execute("DELETE FROM account")
        log.debug("Stored account cleared.")
