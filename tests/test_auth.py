"""Tests for account validation against the player API."""

import asyncio

import pytest

from iptv_catalog.api.auth import AccountValidator
from iptv_catalog.api.client import XtreamClient, mask_url
from iptv_catalog.exceptions import AuthError

from .helpers import account_payload, json_handler, make_credentials, serve, text_handler


async def validate(handler, fetch_only: bool = False):
    async with serve({"/player_api.php": handler}) as base, XtreamClient() as client:
        validator = AccountValidator(client)
        credentials = make_credentials(base)
        if fetch_only:
            return await validator.fetch_account_info(credentials)
        return await validator.validate(credentials)


def test_authenticated_account() -> None:
    calls: list[dict] = []

    info = asyncio.run(validate(json_handler(account_payload(), calls=calls)))

    assert info.user_info.is_authenticated
    assert info.user_info.status == "Active"
    assert info.user_info.exp_date == "1767225600"
    assert info.server_info.timestamp_now == 1735689600
    assert calls == [{"username": "user", "password": "pass"}]


def test_null_informational_fields_use_defaults() -> None:
    payload = {
        "user_info": {
            "auth": 1,
            "status": "Active",
            "message": None,
            "exp_date": None,
            "max_connections": None,
            "allowed_output_formats": None,
        },
        "server_info": {"timezone": None, "timestamp_now": None},
    }

    info = asyncio.run(validate(json_handler(payload)))

    assert info.user_info.is_authenticated
    assert info.user_info.message == ""
    assert info.user_info.exp_date is None
    assert info.user_info.max_connections == "0"
    assert info.user_info.allowed_output_formats == []
    assert info.server_info.timezone == ""


def test_null_auth_flag_is_rejected() -> None:
    payload = {"user_info": {"auth": None, "status": "Active"}}

    with pytest.raises(AuthError, match="Invalid credentials"):
        asyncio.run(validate(json_handler(payload)))


def test_rejected_account() -> None:
    with pytest.raises(AuthError, match="Invalid credentials"):
        asyncio.run(validate(json_handler(account_payload(auth=0, status="Disabled"))))


def test_fetch_does_not_check_auth_flag() -> None:
    info = asyncio.run(validate(json_handler(account_payload(auth=0)), fetch_only=True))

    assert not info.user_info.is_authenticated


def test_missing_user_info_is_not_authenticated() -> None:
    with pytest.raises(AuthError, match="Invalid credentials"):
        asyncio.run(validate(json_handler({"server_info": {}})))


def test_server_error() -> None:
    with pytest.raises(AuthError, match="HTTP 500"):
        asyncio.run(validate(json_handler({}, status=500)))


def test_non_json_answer() -> None:
    with pytest.raises(AuthError, match="valid JSON"):
        asyncio.run(validate(text_handler("<html>Login</html>")))


def test_unexpected_document() -> None:
    with pytest.raises(AuthError, match="unexpected document"):
        asyncio.run(validate(json_handler([1, 2, 3])))


def test_account_url_and_masking() -> None:
    client = XtreamClient()
    url = client.account_url(make_credentials("http://iptv.example.com:8080", password="s3cret"))

    assert str(url) == (
        "http://iptv.example.com:8080/player_api.php?username=user&password=s3cret"
    )
    assert "s3cret" not in mask_url(url)
    assert mask_url("http://iptv.example.com/logo.png") == "http://iptv.example.com/logo.png"
