"""Tests for catalog read queries."""

import asyncio

import pytest

from iptv_catalog.exceptions import NotFoundError
from iptv_catalog.models.catalog import Kind
from iptv_catalog.storage.persister import CatalogPersister
from iptv_catalog.storage.reader import CatalogReader


@pytest.fixture
def reader(database, sample_categories) -> CatalogReader:
    asyncio.run(CatalogPersister(database).persist(sample_categories))
    return CatalogReader(database)


def test_list_by_kind(reader, sample_categories) -> None:
    live = asyncio.run(reader.list_by_kind(Kind.LIVE))

    assert [(c.id, c.name, c.kind) for c in live] == [
        (sample_categories[0].id, "News", Kind.LIVE)
    ]
    assert live[0].items == []


def test_list_by_kind_accepts_string(reader) -> None:
    assert [c.name for c in asyncio.run(reader.list_by_kind("movie"))] == ["Movies"]


def test_list_by_kind_empty(reader) -> None:
    assert asyncio.run(reader.list_by_kind(Kind.SERIES)) == []


def test_get_with_items(reader, sample_categories) -> None:
    news_id = sample_categories[0].id

    category = asyncio.run(reader.get_with_items(news_id))

    assert category.name == "News"
    assert [(i.name, i.logo, i.url) for i in category.items] == [
        ("BBC One", "http://logo/bbc1.png", "http://s/live/1.ts"),
        ("CNN", None, "http://s/live/2.ts"),
    ]
    assert all(item.category_id == news_id for item in category.items)
    assert all(isinstance(item.id, int) for item in category.items)


def test_get_with_items_unknown_id(reader) -> None:
    with pytest.raises(NotFoundError, match="Category 9999 not found"):
        asyncio.run(reader.get_with_items(9999))


def test_count_by_kind(reader) -> None:
    counts = asyncio.run(reader.count_by_kind())

    assert counts[Kind.LIVE] == {"categories": 1, "items": 2}
    assert counts[Kind.MOVIE] == {"categories": 1, "items": 1}
    assert counts[Kind.SERIES] == {"categories": 0, "items": 0}
    assert counts[Kind.UNKNOWN] == {"categories": 0, "items": 0}


def test_empty_logo_reads_back_as_none(database) -> None:
    database.connection.execute("INSERT INTO categories (name, type) VALUES ('A', 'live')")
    database.connection.execute(
        "INSERT INTO items (name, logo, url, category_id) VALUES ('X', '', 'u', 1)"
    )

    category = asyncio.run(CatalogReader(database).get_with_items(1))

    assert category.items[0].logo is None


def test_unrecognized_stored_type_is_unknown(database) -> None:
    database.connection.execute("INSERT INTO categories (name, type) VALUES ('A', 'radio')")

    counts = asyncio.run(CatalogReader(database).count_by_kind())

    assert counts[Kind.UNKNOWN]["categories"] == 1
