"""Tests for stored account credentials."""

import asyncio

import pytest

from iptv_catalog.exceptions import PersistError
from iptv_catalog.storage.account_store import AccountStore

from .helpers import make_credentials


def test_load_without_account(database) -> None:
    assert asyncio.run(AccountStore(database).load()) is None


def test_save_and_load(database) -> None:
    store = AccountStore(database)
    credentials = make_credentials("http://iptv.example.com:8080")

    asyncio.run(store.save(credentials))

    assert asyncio.run(store.load()) == credentials


def test_save_replaces_previous_account(database) -> None:
    store = AccountStore(database)
    asyncio.run(store.save(make_credentials("http://one.example.com", username="a")))
    asyncio.run(store.save(make_credentials("http://two.example.com", username="b")))

    loaded = asyncio.run(store.load())
    count = database.connection.execute("SELECT COUNT(*) FROM account").fetchone()[0]

    assert loaded.username == "b"
    assert loaded.server == "http://two.example.com"
    assert count == 1


def test_clear_keeps_catalog(database, sample_categories) -> None:
    from iptv_catalog.storage.persister import CatalogPersister

    store = AccountStore(database)
    asyncio.run(store.save(make_credentials("http://iptv.example.com")))
    asyncio.run(CatalogPersister(database).persist(sample_categories))

    asyncio.run(store.clear())

    assert asyncio.run(store.load()) is None
    assert database.connection.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 3


def test_invalid_stored_row_is_ignored(database) -> None:
    database.connection.execute(
        "INSERT INTO account (username, password, server) VALUES ('u', 'p', 'ftp://bad')"
    )

    assert asyncio.run(AccountStore(database).load()) is None


def test_failed_save_reports_original_error(database) -> None:
    store = AccountStore(database)
    previous = make_credentials("http://one.example.com", username="a")
    asyncio.run(store.save(previous))
    # RAISE(ROLLBACK) ends the transaction itself, so the explicit ROLLBACK fails
    database.connection.execute(
        """
        CREATE TRIGGER reject_account BEFORE INSERT ON account
        BEGIN SELECT RAISE(ROLLBACK, 'account rejected'); END;
        """
    )

    with pytest.raises(PersistError, match="account rejected"):
        asyncio.run(store.save(make_credentials("http://two.example.com", username="b")))

    assert not database.connection.in_transaction
    assert asyncio.run(store.load()) == previous
