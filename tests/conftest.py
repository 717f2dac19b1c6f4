"""Shared fixtures for the iptv_catalog test suite."""

from pathlib import Path

import pytest

from iptv_catalog.models.catalog import Category, Item, Kind
from iptv_catalog.storage.database import CatalogDatabase

from .helpers import EventCollector


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def database(tmp_path: Path):
    """A migrated catalog database in a temporary directory."""
    db = CatalogDatabase(tmp_path / "catalog.db")
    db.migrate()
    yield db
    db.close()


@pytest.fixture
def sample_categories() -> list[Category]:
    return [
        Category(
            name="News",
            kind=Kind.LIVE,
            items=[
                Item(
                    name="BBC One", logo="http://logo/bbc1.png", url="http://s/live/1.ts"
                ),
                Item(name="CNN", logo=None, url="http://s/live/2.ts"),
            ],
        ),
        Category(
            name="Movies",
            kind=Kind.MOVIE,
            items=[Item(name="The Matrix", url="http://s/movie/10.mkv")],
        ),
    ]
