from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest
from click.testing import Result
from pytest_httpserver import HTTPServer
from typer.testing import CliRunner
from zbx.app import StatefulApp
from zbx.exceptions import ZbxError

from tests.utils import add_zabbix_endpoint
from tests.utils import add_zabbix_login_endpoints
from tests.utils import add_zabbix_version_endpoint
from tests.utils import host

START = "2024-06-01T22:00"


def epoch(ts: str) -> str:
    """API timestamp of a local `YYYY-MM-DDTHH:MM` time."""
    return str(int(datetime.strptime(ts, "%Y-%m-%dT%H:%M").astimezone().timestamp()))


def invoke(runner: CliRunner, app: StatefulApp, config_path: Path, *args: str) -> Result:
    return runner.invoke(app, ["-c", str(config_path), "-o", "json", *args])


def maintenance(
    maintenanceid: str = "3",
    name: str = "Kernel upgrade",
    hosts: list[dict[str, str]] | None = None,
    groups: list[dict[str, str]] | None = None,
    timeperiods: int = 1,
) -> dict[str, object]:
    """A maintenance object as returned by maintenance.get."""
    return {
        "maintenanceid": maintenanceid,
        "name": name,
        "maintenance_type": "0",
        "description": "",
        "active_since": epoch(START),
        "active_till": epoch("2024-06-01T23:00"),
        "tags_evaltype": "0",
        "hosts": hosts or [],
        "hostgroups": groups or [],
        "timeperiods": [
            {
                "timeperiodid": str(10 + i),
                "timeperiod_type": "0",
                "period": "3600",
                "start_date": epoch(START),
            }
            for i in range(timeperiods)
        ],
    }


@pytest.fixture(name="sleeps")
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record sleeps while waiting for maintenances instead of sleeping."""
    calls: list[float] = []
    monkeypatch.setattr(
        "zbx.commands.maintenance.time", SimpleNamespace(sleep=calls.append)
    )
    return calls


#
# mainte create
#


@pytest.mark.parametrize(
    "args, message",
    [
        (["-n", "x", "-p", "1h"], "At least one of --host or --group must be set."),
        (["-n", "x", "-p", "1h", "-H", ""], "At least one of --host or --group must be set."),
        (["-n", "x", "-p", "0s", "-H", "web01"], "--period must be positive."),
        (
            [
                "-n",
                "x",
                "-p",
                "1h",
                "-H",
                "web01",
                "--active-since",
                "2024-06-02T00:00",
                "--active-till",
                "2024-06-01T00:00",
            ],
            "--active-till must be later than --active-since.",
        ),
        (
            ["-n", "x", "-p", "1h", "-H", "web01", "--wait", "--interval", "0s"],
            "Polling interval must be positive.",
        ),
    ],
)
def test_create_invalid_args(
    runner: CliRunner,
    app: StatefulApp,
    config_path: Path,
    httpserver: HTTPServer,
    args: list[str],
    message: str,
) -> None:
    result = invoke(runner, app, config_path, "mainte", "create", *args)
    assert result.exit_code == 1
    assert message in result.output
    # Validation happens before logging in
    assert len(httpserver.log) == 0


def test_create_invalid_period(
    runner: CliRunner, app: StatefulApp, config_path: Path
) -> None:
    result = invoke(
        runner, app, config_path, "mainte", "create", "-n", "x", "-p", "1y", "-H", "a"
    )
    assert result.exit_code == 1
    assert isinstance(result.exception, ZbxError)


def test_create_missing_name(
    runner: CliRunner, app: StatefulApp, config_path: Path
) -> None:
    result = invoke(runner, app, config_path, "mainte", "create", "-p", "1h", "-H", "a")
    assert result.exit_code == 2


def test_create(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "host.get",
        params={"filter": {"name": ["web01"]}},
        response=[host("1", "web01")],
        auth="session-token",
    )
    add_zabbix_endpoint(
        httpserver,
        "maintenance.create",
        params={
            "name": "Kernel upgrade",
            "description": "Reboot after upgrade",
            "maintenance_type": 0,
            "tags_evaltype": 0,
            "active_since": epoch(START),
            "active_till": epoch("2024-06-01T23:30"),
            "hosts": [{"hostid": "1"}],
            "groups": [],
            "timeperiods": [
                {"period": 5400, "timeperiod_type": 0, "start_date": epoch(START)}
            ],
        },
        response={"maintenanceids": ["12"]},
        auth="session-token",
    )
    result = invoke(
        runner,
        app,
        config_path,
        "mainte",
        "create",
        "--name",
        "Kernel upgrade",
        "--desc",
        "Reboot after upgrade",
        "--host",
        "web01",
        "--start-date",
        START,
        "--period",
        "1h30m",
    )
    assert result.exit_code == 0, result.output
    server_url = httpserver.url_for("/").rstrip("/")
    assert (
        f"Created maintenance 12, url: {server_url}/maintenance.php?form=update&maintenanceid=12"
        in result.output
    )
    httpserver.check_assertions()


def test_create_with_nested_groups_pre_6_0(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "5.2.0")
    add_zabbix_endpoint(
        httpserver,
        "hostgroup.get",
        params={"filter": {"name": ["Servers"]}},
        response=[{"groupid": "2", "name": "Servers"}],
    )
    add_zabbix_endpoint(
        httpserver,
        "hostgroup.get",
        params={"search": {"name": ["Servers/"]}},
        response=[{"groupid": "4", "name": "Servers/DB"}],
    )
    add_zabbix_endpoint(
        httpserver,
        "maintenance.create",
        params={"hostids": [], "groupids": ["2", "4"]},
        response={"maintenanceids": ["12"]},
    )
    result = invoke(
        runner,
        app,
        config_path,
        "mainte",
        "create",
        "-n",
        "DC move",
        "-g",
        "Servers",
        "--include-nested",
        "-p",
        "2h",
    )
    assert result.exit_code == 0, result.output
    assert "Created maintenance 12" in result.output
    httpserver.check_assertions()


def test_create_dry_run(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver)
    add_zabbix_endpoint(httpserver, "host.get", response=[host("1", "web01")])
    result = runner.invoke(
        app,
        [
            "-c",
            str(config_path),
            "-o",
            "json",
            "--dry-run",
            "mainte",
            "create",
            "-n",
            "Kernel upgrade",
            "-H",
            "web01",
            "-p",
            "1h",
            "--start-date",
            START,
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Dry run, maintenance not created." in result.output
    assert '"name": "Kernel upgrade"' in result.output
    # Only login and host lookup, nothing created
    assert len(httpserver.log) == 3
    httpserver.check_assertions()


def test_create_wait(
    runner: CliRunner,
    app: StatefulApp,
    config_path: Path,
    httpserver: HTTPServer,
    sleeps: list[float],
) -> None:
    add_zabbix_login_endpoints(httpserver)
    add_zabbix_endpoint(httpserver, "host.get", response=[host("1", "web01")])
    add_zabbix_endpoint(
        httpserver, "maintenance.create", response={"maintenanceids": ["12"]}
    )
    add_zabbix_endpoint(
        httpserver,
        "host.get",
        params={"hostids": ["1"]},
        response=[host("1", "web01", maintenance_status="1")],
    )
    result = invoke(
        runner,
        app,
        config_path,
        "mainte",
        "create",
        "-n",
        "Kernel upgrade",
        "-H",
        "web01",
        "-p",
        "1h",
        "--wait",
        "--interval",
        "5s",
    )
    assert result.exit_code == 0, result.output
    assert "Waiting for maintenance to take effect on 1 host(s): web01" in result.output
    assert "Maintenance is in effect on all hosts." in result.output
    assert sleeps == [5.0]
    httpserver.check_assertions()


#
# mainte get
#


def test_get(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"selectHostGroups": ["groupid", "name"]},
        response=[
            maintenance("10", "Second"),
            maintenance("9", "First", hosts=[host("1", "web01")]),
        ],
    )
    result = invoke(runner, app, config_path, "mainte", "get")
    assert result.exit_code == 0, result.output
    # Sorted numerically by ID
    assert result.output.index('"maintenanceid": "9"') < result.output.index(
        '"maintenanceid": "10"'
    )
    httpserver.check_assertions()


def test_get_with_api_token(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    # No user.login, and the version lookup carries no auth token
    add_zabbix_version_endpoint(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"selectHostGroups": ["groupid", "name"]},
        response=[maintenance("9", "First")],
        auth="api-token",
    )
    result = runner.invoke(
        app,
        ["-c", str(config_path), "--token", "api-token", "-o", "json", "mainte", "get"],
    )
    assert result.exit_code == 0, result.output
    assert '"maintenanceid": "9"' in result.output
    httpserver.check_assertions()


#
# mainte update
#


def test_update_requires_one_target(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    for args in ([], ["--id", "3", "--name", "foo"]):
        result = invoke(runner, app, config_path, "mainte", "update", *args)
        assert result.exit_code == 1
        assert "Exactly one of --id or --name must be set." in result.output
    assert len(httpserver.log) == 0


def test_update(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"maintenanceids": ["3"]},
        response=[maintenance("3", hosts=[host("1", "web01")])],
    )
    add_zabbix_endpoint(
        httpserver,
        "maintenance.update",
        params={
            "maintenanceid": "3",
            "name": "Renamed",
            "active_till": epoch("2024-06-02T01:00"),
            "hosts": [],
            "timeperiods": [
                {"period": 10800, "timeperiod_type": 0, "start_date": epoch(START)}
            ],
        },
        response={"maintenanceids": ["3"]},
    )
    result = invoke(
        runner,
        app,
        config_path,
        "mainte",
        "update",
        "--id",
        "3",
        "--new-name",
        "Renamed",
        "--host",
        "",
        "--period",
        "3h",
        "--active-till",
        "2024-06-02T01:00",
    )
    assert result.exit_code == 0, result.output
    assert "Updated maintenance 3" in result.output
    httpserver.check_assertions()


def test_update_multiple_timeperiods(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"filter": {"name": ["Kernel upgrade"]}},
        response=[maintenance("3", timeperiods=2)],
    )
    result = invoke(
        runner, app, config_path, "mainte", "update", "-n", "Kernel upgrade", "-p", "2h"
    )
    assert result.exit_code == 1
    assert "Maintenance 3 has 2 time periods, only 1 is supported." in result.output


def test_update_dry_run(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver, "maintenance.get", response=[maintenance("3")]
    )
    result = runner.invoke(
        app,
        [
            "-c",
            str(config_path),
            "--dry-run",
            "mainte",
            "update",
            "--id",
            "3",
            "--desc",
            "New description",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Dry run, maintenance not updated." in result.output
    assert len(httpserver.log) == 3


#
# mainte delete
#


@pytest.mark.parametrize(
    "args, message",
    [
        ([], "At least one --id or --name must be set."),
        (["--id", "3", "--id", "4", "--id", "3"], "Duplicate IDs given with --id: 3"),
        (["-n", "a", "-n", "a"], "Duplicate names given with --name: a"),
    ],
)
def test_delete_invalid_args(
    runner: CliRunner,
    app: StatefulApp,
    config_path: Path,
    httpserver: HTTPServer,
    args: list[str],
    message: str,
) -> None:
    result = invoke(runner, app, config_path, "mainte", "delete", *args)
    assert result.exit_code == 1
    assert message in result.output
    assert len(httpserver.log) == 0


def test_delete(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver)
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"maintenanceids": ["12", "3"]},
        response=[{"maintenanceid": "12"}, {"maintenanceid": "3"}],
    )
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"filter": {"name": ["Kernel upgrade"]}},
        response=[{"maintenanceid": "3", "name": "Kernel upgrade"}],
    )
    add_zabbix_endpoint(
        httpserver,
        "maintenance.delete",
        params=["3", "12"],
        response={"maintenanceids": ["3", "12"]},
    )
    result = invoke(
        runner,
        app,
        config_path,
        "mainte",
        "delete",
        "--id",
        "12",
        "--id",
        "3",
        "--name",
        "Kernel upgrade",
    )
    assert result.exit_code == 0, result.output
    assert "Deleted maintenances: 3, 12" in result.output
    httpserver.check_assertions()


def test_delete_not_found(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver)
    add_zabbix_endpoint(httpserver, "maintenance.get", response=[])
    result = invoke(runner, app, config_path, "mainte", "delete", "-n", "Nope")
    assert result.exit_code == 1
    assert isinstance(result.exception, ZbxError)
    assert "maintenances not found: Nope" in str(result.exception)


def test_delete_dry_run(
    runner: CliRunner, app: StatefulApp, config_path: Path, httpserver: HTTPServer
) -> None:
    add_zabbix_login_endpoints(httpserver)
    add_zabbix_endpoint(
        httpserver, "maintenance.get", response=[{"maintenanceid": "3"}]
    )
    result = runner.invoke(
        app, ["-c", str(config_path), "--dry-run", "mainte", "delete", "--id", "3"]
    )
    assert result.exit_code == 0, result.output
    assert "Dry run, would delete maintenances: 3" in result.output
    httpserver.check_assertions()


#
# mainte status
#


def test_status_requires_one_target(
    runner: CliRunner, app: StatefulApp, config_path: Path
) -> None:
    result = invoke(runner, app, config_path, "mainte", "status")
    assert result.exit_code == 1
    assert "Exactly one of --id or --name must be set." in result.output


def test_status_wait(
    runner: CliRunner,
    app: StatefulApp,
    config_path: Path,
    httpserver: HTTPServer,
    sleeps: list[float],
) -> None:
    add_zabbix_login_endpoints(httpserver, "7.0.0")
    add_zabbix_endpoint(
        httpserver,
        "maintenance.get",
        params={"maintenanceids": ["3"]},
        response=[
            maintenance(
                "3",
                hosts=[host("1", "web01", maintenance_status="1")],
                groups=[{"groupid": "2", "name": "Databases"}],
            )
        ],
    )
    add_zabbix_endpoint(
        httpserver,
        "host.get",
        params={"groupids": ["2"]},
        response=[host("3", "db01"), host("1", "web01", maintenance_status="1")],
    )
    add_zabbix_endpoint(
        httpserver,
        "host.get",
        params={"hostids": ["3", "1"]},
        response=[host("3", "db01"), host("1", "web01", maintenance_status="1")],
    )
    add_zabbix_endpoint(
        httpserver,
        "host.get",
        params={"hostids": ["3", "1"]},
        response=[
            host("3", "db01", maintenance_status="1"),
            host("1", "web01", maintenance_status="1"),
        ],
    )
    result = invoke(runner, app, config_path, "mainte", "status", "--id", "3", "--wait")
    assert result.exit_code == 0, result.output
    assert '"name": "db01"' in result.output
    assert "Waiting for maintenance to take effect on 1 host(s): db01" in result.output
    assert "Maintenance is in effect on all hosts." in result.output
    # Configured wait_interval
    assert sleeps == [1.0, 1.0]
    httpserver.check_assertions()


def test_help_shows_examples(
    runner: CliRunner, app: StatefulApp, config_path: Path
) -> None:
    result = runner.invoke(app, ["-c", str(config_path), "mainte", "create", "--help"])
    assert result.exit_code == 0
    assert "Examples" in result.output
