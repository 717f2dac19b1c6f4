"""Tests for INI configuration loading, validation and migration."""

import configparser
from pathlib import Path

import pytest

from iptv_catalog.exceptions import ConfigurationError
from iptv_catalog.models.config import DEFAULT_USER_AGENT, AppConfig
from iptv_catalog.storage.config_manager import ConfigManager


def write_config(path: Path, **values) -> Path:
    lines = ["[DEFAULT]"] + [f"{key} = {value}" for key, value in values.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_missing_file_uses_defaults(tmp_path) -> None:
    config = ConfigManager(tmp_path / "config.ini").load_config()

    assert config.batch_size == 500
    assert config.chunk_size == 65536
    assert config.user_agent == DEFAULT_USER_AGENT
    assert config.resolve_database_path() == tmp_path / "iptv_data.db"
    assert config.resolve_log_dir() is None
    assert not (tmp_path / "config.ini").exists()


def test_values_from_file(tmp_path) -> None:
    path = write_config(
        tmp_path / "config.ini",
        database_path=str(tmp_path / "elsewhere.db"),
        batch_size=250,
        read_timeout=30,
        log_dir=str(tmp_path / "logs"),
        structured_logs="true",
    )

    config = ConfigManager(path).load_config()

    assert config.batch_size == 250
    assert config.read_timeout == 30.0
    assert config.resolve_database_path() == tmp_path / "elsewhere.db"
    assert config.resolve_log_dir() == tmp_path / "logs"


def test_cli_options_override_file(tmp_path) -> None:
    path = write_config(tmp_path / "config.ini", batch_size=250)

    config = ConfigManager(path).load_config({"batch_size": 1000})

    assert config.batch_size == 1000


def test_missing_keys_are_migrated(tmp_path) -> None:
    path = write_config(tmp_path / "config.ini", batch_size=100)

    ConfigManager(path).load_config()

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")
    assert parser["DEFAULT"]["batch_size"] == "100"
    assert set(parser["DEFAULT"]) == AppConfig.get_ini_keys()


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("batch_size", 0, "Batch size"),
        ("batch_size", 9000, "Batch size"),
        ("chunk_size", 10, "Chunk size"),
        ("connect_timeout", -1, "Timeouts"),
        ("structured_logs", "true", "log_dir"),
    ],
)
def test_invalid_values(tmp_path, key, value, message) -> None:
    path = write_config(tmp_path / "config.ini", **{key: value})

    with pytest.raises(ConfigurationError, match=message):
        ConfigManager(path).load_config()


def test_non_numeric_value(tmp_path) -> None:
    path = write_config(tmp_path / "config.ini", batch_size="lots")

    with pytest.raises(ConfigurationError, match="Invalid value"):
        ConfigManager(path).load_config()


def test_malformed_file(tmp_path) -> None:
    path = tmp_path / "config.ini"
    path.write_text("batch_size = 1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="parsing"):
        ConfigManager(path).load_config()


def test_save_new_config(tmp_path) -> None:
    path = tmp_path / "nested" / "config.ini"
    manager = ConfigManager(path)

    manager.save_new_config({"batch_size": 42, "structured_logs": False})

    display = manager.get_display_dict()
    assert display["batch_size"] == "42"
    assert display["structured_logs"] == "false"
    assert display["database_path"] == ""
    assert ConfigManager(path).load_config().batch_size == 42


def test_display_dict_without_file(tmp_path) -> None:
    assert ConfigManager(tmp_path / "config.ini").get_display_dict() == {}
