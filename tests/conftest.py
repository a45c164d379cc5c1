from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from pytest_httpserver import HTTPServer
from typer.testing import CliRunner
from zbx.app import StatefulApp
from zbx.config.model import Config
from zbx.main import app
from zbx.pyzabbix.client import ZabbixAPI
from zbx.state import State
from zbx.state import get_state


@pytest.fixture(name="app")
def _app() -> Iterator[StatefulApp]:
    yield app


@pytest.fixture(name="runner")
def _runner() -> Iterator[CliRunner]:
    yield CliRunner()


@pytest.fixture(autouse=True)
def reset_state() -> Iterator[None]:
    """Ensure every test starts with a fresh State singleton."""
    State._instance = None  # pyright: ignore[reportPrivateUsage]
    yield
    state = State._instance  # pyright: ignore[reportPrivateUsage]
    if state is not None and state.is_client_loaded:
        state.client.close()
    State._instance = None  # pyright: ignore[reportPrivateUsage]


@pytest.fixture(name="config_path")
def config_path(tmp_path: Path, httpserver: HTTPServer) -> Iterator[Path]:
    """A config file pointing at the mocked Zabbix API."""
    path = tmp_path / "zbx.toml"
    path.write_text(
        f"""\
[api]
url = "{httpserver.url_for("/")}"
username = "Admin"
password = "zabbix"

[app]
wait_interval = "1s"

[logging]
log_level = "DEBUG"
log_file = "{(tmp_path / "zbx.log").as_posix()}"
"""
    )
    yield path


@pytest.fixture(name="config")
def config(tmp_path: Path) -> Iterator[Config]:
    """Return a sample config."""
    conf = Config.sample_config()
    # Set up logging for the test environment
    conf.logging.log_file = tmp_path / "zbx.log"
    conf.logging.log_level = "DEBUG"  # we want to see all logs
    yield conf


@pytest.fixture(name="state")
def state(config: Config) -> Iterator[State]:
    """Return a fresh State object with a config and no client."""
    state = get_state()
    state.config = config
    yield state


@pytest.fixture(name="zabbix_client")
def zabbix_client(httpserver: HTTPServer) -> Iterator[ZabbixAPI]:
    """A client for the mocked Zabbix API. Not logged in."""
    client = ZabbixAPI(server=httpserver.url_for("/"))
    yield client
    client.close()
