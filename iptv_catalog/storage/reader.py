"""
Read-side queries that rebuild categories and their items from the catalog.
"""

import logging
import sqlite3

from iptv_catalog.exceptions import NotFoundError
from iptv_catalog.models.catalog import Category, Item, Kind

from .database import CatalogDatabase

log = logging.getLogger(__name__)


def _to_kind(value: str) -> Kind:
    try:
        return Kind(value)
    except ValueError:
        return Kind.UNKNOWN


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(id=row["id"], name=row["name"], kind=_to_kind(row["type"]))


def _row_to_item(row: sqlite3.Row) -> Item:
    return Item(
        id=row["id"],
        name=row["name"],
        logo=row["logo"] or None,
        url=row["url"],
        category_id=row["category_id"],
    )


class CatalogReader:
    """
    Answers catalog queries for presentation code.

    Reads wait for the database lock, so they never run while a replace-all
    transaction is in progress on the shared connection.
    """

    def __init__(self, database: CatalogDatabase):
        self._db = database

    async def list_by_kind(self, kind: Kind | str) -> list[Category]:
        """Returns all categories of a kind, without their items."""
        kind = Kind(kind)
        async with self._db.lock:
            rows = await self._db.fetch_all(
                "SELECT id, name, type FROM categories WHERE type = ? ORDER BY id",
                (kind.value,),
            )
        return [_row_to_category(row) for row in rows]

    async def get_with_items(self, category_id: int) -> Category:
        """
        Returns one category with its full item list.

        Raises:
            NotFoundError: If no category has this id.
        """
        async with self._db.lock:
            rows = await self._db.fetch_all(
                "SELECT id, name, type FROM categories WHERE id = ?", (category_id,)
            )
            if not rows:
                raise NotFoundError(f"Category {category_id} not found.")
            item_rows = await self._db.fetch_all(
                "SELECT id, name, logo, url, category_id FROM items"
                " WHERE category_id = ? ORDER BY id",
                (category_id,),
            )

        category = _row_to_category(rows[0])
        category.items = [_row_to_item(row) for row in item_rows]
        log.debug(
            f"Loaded category '{category.name}' with {len(category.items)} items."
        )
        return category

    async def count_by_kind(self) -> dict[Kind, dict[str, int]]:
        """Counts categories and items per kind."""
        async with self._db.lock:
            rows = await self._db.fetch_all(
                """
                SELECT c.type AS type,
                       COUNT(DISTINCT c.id) AS categories,
                       COUNT(i.id) AS items
                FROM categories c
                LEFT JOIN items i ON i.category_id = c.id
                GROUP BY c.type
                """
            )
        counts = {kind: {"categories": 0, "items": 0} for kind in Kind}
        for row in rows:
            bucket = counts[_to_kind(row["type"])]
            bucket["categories"] += row["categories"]
            bucket["items"] += row["items"]
        return counts
