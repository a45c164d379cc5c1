from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from inline_snapshot import snapshot
from zbx.config.constants import OutputFormat
from zbx.config.model import APIConfig
from zbx.config.model import AppConfig
from zbx.config.model import Config
from zbx.config.utils import find_config
from zbx.config.utils import get_config
from zbx.config.utils import load_config_toml
from zbx.exceptions import ConfigError


def test_config_default() -> None:
    """Assert that the config can be instantiated with no arguments."""
    assert Config()


def test_sample_config() -> None:
    conf = Config.sample_config()
    assert conf.sample
    assert conf.api.url == "https://zabbix.example.com"
    assert conf.api.timeout is None
    assert conf.app.wait_interval == timedelta(seconds=30)
    assert not conf.app.dry_run


def test_load_config_file(tmp_path: Path) -> None:
    path = tmp_path / "zbx.toml"
    path.write_text(
        """\
[api]
zabbix_api_url = "https://zabbix.example.com/zabbix"
virtual_host = "zabbix.internal"
username = "monitor"
password = "secret"
cert_verify = "OFF"
timeout = 0
login_username_since = "6.4.0beta5"

[app]
dry_run = "ON"
wait_interval = "2m30s"

[app.output]
format = "JSON"

[logging]
log_level = "debug"
log_file = ""
"""
    )
    conf = Config.from_file(path)
    assert conf.config_path == path
    assert not conf.sample
    assert conf.api.url == "https://zabbix.example.com/zabbix"
    assert conf.api.virtual_host == "zabbix.internal"
    assert conf.api.username == "monitor"
    assert conf.api.password.get_secret_value() == "secret"
    assert conf.api.verify_ssl is False
    assert conf.api.timeout is None
    assert conf.api.login_username_since == "6.4.0beta5"
    assert conf.app.dry_run is True
    assert conf.app.wait_interval == timedelta(minutes=2, seconds=30)
    assert conf.app.output.format == OutputFormat.JSON
    assert conf.logging.log_level == "DEBUG"
    assert conf.logging.log_file is None


def test_config_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc_info:
        Config.from_file(tmp_path / "nope.toml")
    assert "does not exist" in str(exc_info.value)


def test_no_config_file_uses_sample(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("zbx.config.model.find_config", lambda: None)
    conf = get_config()
    assert conf.sample


def test_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "zbx.toml"
    path.write_text("[api\nurl = ")
    with pytest.raises(ConfigError):
        load_config_toml(path)


@pytest.mark.parametrize(
    "section, option, value",
    [
        ("api", "login_username_since", '"6.4"'),
        ("app", "wait_interval", '"soon"'),
        ("app", "wait_interval", '"0s"'),
        ("api", "timeout", '"forever"'),
    ],
)
def test_invalid_option(tmp_path: Path, section: str, option: str, value: str) -> None:
    path = tmp_path / "zbx.toml"
    path.write_text(f"[{section}]\n{option} = {value}\n")
    with pytest.raises(ConfigError) as exc_info:
        Config.from_file(path)
    assert option in str(exc_info.value)


def test_timeout() -> None:
    assert APIConfig(timeout=0).timeout is None
    assert APIConfig(timeout=10).timeout == 10


def test_wait_interval_timedelta() -> None:
    assert AppConfig(wait_interval=timedelta(seconds=5)).wait_interval == timedelta(
        seconds=5
    )
    assert AppConfig(wait_interval="1 minute").wait_interval == snapshot(  # type: ignore[arg-type]
        timedelta(seconds=60)
    )


def test_find_config(tmp_path: Path) -> None:
    first = tmp_path / "a.toml"
    second = tmp_path / "b.toml"
    second.touch()
    assert find_config(priority=(first, second)) == second
    first.touch()
    assert find_config(priority=(first, second)) == first
    assert find_config(priority=(tmp_path / "c.toml",)) is None


def test_find_config_user_file_first(tmp_path: Path) -> None:
    default = tmp_path / "default.toml"
    default.touch()
    user = tmp_path / "user.toml"
    user.touch()
    assert find_config(user, priority=(default,)) == user
