import pytest

from rookie_cli.catalog import servers as servers_module
from rookie_cli.catalog.servers import load_server_config, resolve_server_config_path
from rookie_cli.exceptions import ConfigError


def test_active_server_round_trip(write_servers):
    path = write_servers(
        {
            "ActiveServer": "default",
            "Servers": {"default": {"Name": "X", "IndexUrl": "http://h/i.json"}},
        }
    )
    key, entry = load_server_config(path).active_entry()
    assert key == "default"
    assert entry.name == "X"
    assert entry.index_url == "http://h/i.json"


def test_keys_are_case_insensitive(write_servers):
    path = write_servers(
        {
            "activeserver": "main",
            "SERVERS": {"main": {"name": "Main", "indexUrl": "http://m/index.json"}},
        }
    )
    key, entry = load_server_config(path).active_entry()
    assert (key, entry.name, entry.index_url) == ("main", "Main", "http://m/index.json")


def test_server_keys_match_exactly(write_servers):
    path = write_servers({"ActiveServer": "Main", "Servers": {"main": {"Name": "m"}}})
    with pytest.raises(ConfigError, match="Main"):
        load_server_config(path).active_entry()


def test_missing_active_key_is_config_error(write_servers):
    path = write_servers(
        {"ActiveServer": "ghost", "Servers": {"default": {"Name": "X"}}}
    )
    config = load_server_config(path)
    with pytest.raises(ConfigError, match="Active server key not found"):
        config.active_entry()


def test_null_active_server_falls_back_to_default(write_servers):
    path = write_servers({"Servers": {"default": {"Name": "Fallback"}}})
    key, entry = load_server_config(path).active_entry()
    assert key == "default"
    assert entry.name == "Fallback"
    assert entry.index_url is None


def test_missing_file_is_config_error(tmp_path):
    missing = tmp_path / "config" / "servers.json"
    with pytest.raises(ConfigError, match="Missing servers config"):
        load_server_config(missing)


@pytest.mark.parametrize("document", ["{not json", "null", '{"Servers": [1, 2]}'])
def test_malformed_file_is_config_error(write_servers, document):
    path = write_servers(document)
    with pytest.raises(ConfigError):
        load_server_config(path)


def test_byte_order_mark_is_accepted(tmp_path):
    path = tmp_path / "servers.json"
    path.write_text('\ufeff{"ActiveServer": "a", "Servers": {"a": {}}}', encoding="utf-8")
    key, entry = load_server_config(path).active_entry()
    assert key == "a"
    assert entry.name is None


def test_resolve_prefers_override(tmp_path):
    override = tmp_path / "custom.json"
    assert resolve_server_config_path(override) == override


def test_resolve_uses_bundled_file_when_present(tmp_path, monkeypatch):
    bundled = tmp_path / "bundled.json"
    bundled.write_text("{}", encoding="utf-8")
    monkeypatch.setattr(servers_module, "BUNDLED_SERVERS_CONFIG", bundled)
    assert resolve_server_config_path() == bundled


def test_resolve_falls_back_to_working_directory(tmp_path, monkeypatch):
    monkeypatch.setattr(servers_module, "BUNDLED_SERVERS_CONFIG", tmp_path / "absent.json")
    monkeypatch.chdir(tmp_path)
    expected = (tmp_path / "config" / "servers.json").resolve()
    assert resolve_server_config_path() == expected


def test_bundled_sample_ships_with_package(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert servers_module.BUNDLED_SERVERS_CONFIG.is_file()
    assert resolve_server_config_path() == servers_module.BUNDLED_SERVERS_CONFIG

    key, entry = load_server_config(resolve_server_config_path()).active_entry()
    assert key == "default"
    assert entry.index_url
