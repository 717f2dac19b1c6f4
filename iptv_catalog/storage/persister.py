"""
Writes a categorized catalog into SQLite as one atomic replace-all transaction.
"""

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass

from iptv_catalog.exceptions import PersistError
from iptv_catalog.models.catalog import Category, Item
from iptv_catalog.models.progress import Observer, ProgressEvent, notify

from .database import CatalogDatabase

log = logging.getLogger(__name__)

PHASE_CATEGORIES = "categories"
PHASE_ITEMS = "items"


def quote_literal(value: str | None) -> str:
    """
    Renders a value as an SQLite string literal.

    Single quotes are doubled so they cannot terminate the literal. NUL
    characters are removed since SQLite statement text cannot carry them.
    """
    if value is None:
        return "NULL"
    return "'" + value.replace("\x00", "").replace("'", "''") + "'"


def build_items_insert(items: Sequence[Item], category_id: int) -> str:
    """Builds one multi-row INSERT for a batch of items of a category."""
    values = ",".join(
        f"({quote_literal(item.name)}, {quote_literal(item.logo)}, "
        f"{quote_literal(item.url)}, {int(category_id)})"
        for item in items
    )
    return f"INSERT INTO items (name, logo, url, category_id) VALUES {values}"  # noqa: S608


@dataclass(frozen=True)
class PersistResult:
    categories: int
    items: int


class CatalogPersister:
    """
    Replaces the stored catalog with a new set of categories.

    The store holds either the previous catalog or the new one, never a mix:
    everything from the deletes to the last item batch runs in a single
    transaction that is rolled back on any failure.
    """

    BATCH_SIZE = 500

    def __init__(self, database: CatalogDatabase, batch_size: int = BATCH_SIZE):
        self._db = database
        self.batch_size = batch_size

    async def persist(
        self, categories: Sequence[Category], on_progress: Observer | None = None
    ) -> PersistResult:
        """
        Deletes all stored items and categories and inserts `categories`.

        Category ids assigned by the database are written back to the given
        `Category` objects once the transaction has committed.

        Raises:
            PersistError: On any storage failure. The transaction has been
            rolled back before this is raised.
        """
        total_items = sum(len(category.items) for category in categories)
        log.debug(
            f"Persisting {len(categories)} categories and {total_items} items "
            f"(batch size {self.batch_size})."
        )

        async with self._db.lock:
            try:
                await self._db.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise PersistError(f"Could not start catalog transaction: {e}") from e

            try:
                category_ids = await self._replace_all(
                    categories, total_items, on_progress
                )
                await self._db.execute("COMMIT")
            except Exception as e:
                await self._rollback()
                raise PersistError(f"Failed to save catalog: {e}") from e

        for category, category_id in zip(categories, category_ids, strict=True):
            category.id = category_id
            for item in category.items:
                item.category_id = category_id

        notify(on_progress, ProgressEvent("Database save completed successfully"))
        log.info(
            f"Saved {len(categories)} categories and {total_items} items to the catalog."
        )
        return PersistResult(categories=len(categories), items=total_items)

    async def _replace_all(
        self,
        categories: Sequence[Category],
        total_items: int,
        on_progress: Observer | None,
    ) -> list[int]:
        notify(on_progress, ProgressEvent("Clearing existing data (items)..."))
        await self._db.execute("DELETE FROM items")
        notify(on_progress, ProgressEvent("Clearing existing data (categories)..."))
        await self._db.execute("DELETE FROM categories")

        category_ids: list[int] = []
        if categories:
            notify(
                on_progress,
                ProgressEvent("Saving categories: 0%", 0, PHASE_CATEGORIES),
            )
        for category in categories:
            cursor = await self._db.execute(
                "INSERT INTO categories (name, type) VALUES (?, ?)",
                (category.name, category.kind.value),
            )
            category_ids.append(cursor.lastrowid)
            percent = round(len(category_ids) / len(categories) * 100)
            notify(
                on_progress,
                ProgressEvent(f"Saving categories: {percent}%", percent, PHASE_CATEGORIES),
            )

        processed = 0
        for category, category_id in zip(categories, category_ids, strict=True):
            items = category.items
            for start in range(0, len(items), self.batch_size):
                batch = items[start : start + self.batch_size]
                await self._db.execute(build_items_insert(batch, category_id))

                processed += len(batch)
                percent = round(processed / total_items * 100)
                notify(
                    on_progress,
                    ProgressEvent(
                        f"Saving items: {percent}% ({processed}/{total_items})",
                        percent,
                        PHASE_ITEMS,
                    ),
                )
        return category_ids

    async def _rollback(self) -> None:
        try:
            await self._db.execute("ROLLBACK")
            log.debug("Catalog transaction rolled back.")
        except sqlite3.Error as e:
            # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
            log.warning(f"Rollback of catalog transaction failed: {e}")
