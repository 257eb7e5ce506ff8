import json

import pytest

from noderelay.auth import Auth
from noderelay.config import access
from noderelay.config.loader import camel_to_snake, load_config, save_config, snake_to_camel
from noderelay.config.schema import Config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("NODERELAY_RPC__URL", "NODERELAY_RPC__USER", "NODERELAY_RPC__PASSWORD", "NODERELAY_RPC__COOKIE_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_get_config_uses_cache_and_force_reload(monkeypatch):
    calls = {"n": 0}

    def _fake_load_config(_path=None):
        calls["n"] += 1
        cfg = Config()
        cfg.rpc.url = f"http://127.0.0.1:{18000 + calls['n']}"
        return cfg

    monkeypatch.setattr(access, "load_config", _fake_load_config)
    access.clear_config_cache()

    first = access.get_config()
    second = access.get_config()
    third = access.get_config(force_reload=True)

    assert first.rpc.url == second.rpc.url
    assert third.rpc.url != second.rpc.url
    assert calls["n"] == 2


def test_load_config_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "config.json")
    assert cfg.rpc.url == "http://127.0.0.1:8332"
    assert cfg.get_auth() == Auth.none()


def test_load_config_reads_camel_case_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rpc": {"url": "http://node:18443", "cookieFile": "~/.bitcoin/regtest/.cookie"}}))

    cfg = load_config(path)

    assert cfg.rpc.url == "http://node:18443"
    assert cfg.rpc.cookie_file == "~/.bitcoin/regtest/.cookie"
    assert cfg.get_auth().kind == "cookie_file"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rpc": {"url": "http://file:8332", "user": "fileuser", "password": "pw"}}))
    monkeypatch.setenv("NODERELAY_RPC__URL", "http://env:8332")

    cfg = load_config(path)

    assert cfg.rpc.url == "http://env:8332"
    assert cfg.rpc.user == "fileuser"
    assert cfg.get_auth() == Auth.user_pass("fileuser", "pw")


def test_load_config_invalid_json_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)


def test_save_config_round_trips_through_camel_case(tmp_path):
    path = tmp_path / "nested" / "config.json"
    cfg = Config()
    cfg.rpc.cookie_file = "/tmp/.cookie"
    cfg.logging.level = "DEBUG"

    save_config(cfg, path)

    on_disk = json.loads(path.read_text())
    assert on_disk["rpc"]["cookieFile"] == "/tmp/.cookie"
    assert load_config(path).logging.level == "DEBUG"


def test_key_case_conversion():
    assert camel_to_snake("cookieFile") == "cookie_file"
    assert snake_to_camel("cookie_file") == "cookieFile"


def test_get_auth_prefers_cookie_over_user_password():
    cfg = Config()
    cfg.rpc.user = "u"
    cfg.rpc.password = "p"
    assert cfg.get_auth() == Auth.user_pass("u", "p")
    cfg.rpc.cookie_file = "/tmp/.cookie"
    assert cfg.get_auth().kind == "cookie_file"
