"""Commands for managing the lifecycle of Zabbix maintenances."""

from __future__ import annotations

import time
from datetime import datetime
from datetime import timedelta
from typing import TYPE_CHECKING
from typing import Optional

import typer

from zbx.app import Example
from zbx.app import StatefulApp
from zbx.output.console import exit_err
from zbx.output.console import info
from zbx.output.console import success
from zbx.output.render import render_result
from zbx.pyzabbix.enums import MaintenancePeriodType
from zbx.pyzabbix.enums import MaintenanceType
from zbx.pyzabbix.enums import TagsEvalType
from zbx.utils import concat_dedup
from zbx.utils import find_duplicates
from zbx.utils import maintenance_url
from zbx.utils import now_minute
from zbx.utils import parse_duration
from zbx.utils import parse_optional_timestamp

if TYPE_CHECKING:
    from zbx.pyzabbix.client import ZabbixAPI
    from zbx.pyzabbix.types import Host
    from zbx.pyzabbix.types import HostGroup
    from zbx.pyzabbix.types import Maintenance

app = StatefulApp(
    name="mainte",
    help="Create, get, update or delete Zabbix maintenances.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

OPTION_GROUPS = typer.Option(
    None, "--group", "-g", help="Host group name. Can be repeated."
)
OPTION_HOSTS = typer.Option(None, "--host", "-H", help="Host name. Can be repeated.")
OPTION_INCLUDE_NESTED = typer.Option(
    False,
    "--include-nested",
    help="Also include host groups nested below the given groups.",
)
OPTION_ACTIVE_SINCE = typer.Option(
    None,
    "--active-since",
    help="Start of the active period (YYYY-MM-DDTHH:MM, local time).",
)
OPTION_ACTIVE_TILL = typer.Option(
    None,
    "--active-till",
    help="End of the active period (YYYY-MM-DDTHH:MM, local time).",
)
OPTION_START_DATE = typer.Option(
    None,
    "--start-date",
    help="Start of the maintenance period (YYYY-MM-DDTHH:MM, local time).",
)
OPTION_WAIT = typer.Option(
    False,
    "--wait",
    "-w",
    help="Wait until the maintenance is in effect on all hosts.",
)
OPTION_INTERVAL = typer.Option(
    None,
    "--interval",
    help="Polling interval when waiting, e.g. 30s or 1m. Defaults to the configured interval.",
    show_default=False,
)


def get_interval(interval: Optional[str]) -> timedelta:
    """Polling interval from the option, or the configured default."""
    if interval:
        td = parse_duration(interval)
    else:
        td = app.state.config.app.wait_interval
    if td.total_seconds() <= 0:
        exit_err("Polling interval must be positive.")
    return td


def get_groups(
    client: ZabbixAPI, names: list[str], include_nested: bool
) -> list[HostGroup]:
    if not names:
        return []
    if include_nested:
        return client.get_nested_hostgroups(names)
    return client.get_hostgroups_by_names(names)


def check_active_period(since: Optional[datetime], till: Optional[datetime]) -> None:
    if since and till and till <= since:
        exit_err("--active-till must be later than --active-since.")


def wait_for_maintenance(hosts: list[Host], interval: timedelta) -> list[Host]:
    """Poll the hosts until all of them are in maintenance.

    Returns the last fetched hosts."""
    host_ids = [h.hostid for h in hosts]
    while not all(h.in_maintenance for h in hosts):
        pending = [h.name for h in hosts if not h.in_maintenance]
        info(
            f"Waiting for maintenance to take effect on {len(pending)} host(s): "
            f"{', '.join(pending)}"
        )
        time.sleep(interval.total_seconds())
        hosts = app.client.get_hosts_by_ids(host_ids)
    success("Maintenance is in effect on all hosts.")
    return hosts


def get_target_maintenance(
    client: ZabbixAPI, maintenance_id: Optional[str], name: Optional[str]
) -> Maintenance:
    if maintenance_id:
        return client.get_maintenance_by_id(maintenance_id)
    if name:
        return client.get_maintenance_by_name(name)
    exit_err("One of --id or --name is required.")


def print_maintenance_url(action: str, maintenance_id: str) -> None:
    from zbx.commands.results.maintenance import MaintenanceURLResult
    from zbx.models import Result

    url = maintenance_url(app.client.server_url, maintenance_id)
    render_result(
        Result(
            message=f"{action} maintenance {maintenance_id}, url: {url}",
            result=MaintenanceURLResult(maintenance_id=maintenance_id, url=url),
        )
    )


@app.command(
    name="create",
    examples=[
        Example(
            "Create a one hour maintenance for a host starting now",
            "zbx mainte create --name 'Kernel upgrade' --host web01 --period 1h",
        ),
        Example(
            "Create a maintenance for a host group and its nested groups, and wait for it",
            "zbx mainte create -n 'DC move' -g 'Servers' --include-nested "
            "--start-date 2024-06-01T22:00 --period 2h30m --wait",
        ),
    ],
)
def create_maintenance(
    ctx: typer.Context,
    name: str = typer.Option(
        ..., "--name", "-n", help="Name of the maintenance.", show_default=False
    ),
    description: str = typer.Option(
        "", "--desc", "-d", help="Description of the maintenance."
    ),
    include_nested: bool = OPTION_INCLUDE_NESTED,
    groups: Optional[list[str]] = OPTION_GROUPS,
    hosts: Optional[list[str]] = OPTION_HOSTS,
    active_since: Optional[str] = OPTION_ACTIVE_SINCE,
    active_till: Optional[str] = OPTION_ACTIVE_TILL,
    start_date: Optional[str] = OPTION_START_DATE,
    period: str = typer.Option(
        ...,
        "--period",
        "-p",
        help="Duration of the maintenance, e.g. 1h30m.",
        show_default=False,
    ),
    wait: bool = OPTION_WAIT,
    interval: Optional[str] = OPTION_INTERVAL,
) -> None:
    """Create a one-time maintenance with data collection.

    The maintenance starts at [option]--start-date[/] (default: now) and lasts
    for [option]--period[/]. The active period defaults to the same interval.
    At least one host or host group is required.
    """
    from zbx.models import Result
    from zbx.pyzabbix.types import Maintenance
    from zbx.pyzabbix.types import TimePeriod

    host_names = [h for h in hosts or [] if h]
    group_names = [g for g in groups or [] if g]
    if not host_names and not group_names:
        exit_err("At least one of --host or --group must be set.")

    duration = parse_duration(period)
    if duration.total_seconds() <= 0:
        exit_err("--period must be positive.")
    poll_interval = get_interval(interval) if wait else None

    start = parse_optional_timestamp(start_date) or now_minute()
    since = parse_optional_timestamp(active_since) or start
    till = parse_optional_timestamp(active_till) or start + duration
    check_active_period(since, till)

    client = app.client
    maintenance = Maintenance(
        name=name,
        description=description,
        maintenance_type=MaintenanceType.WITH_DC.as_api_value(),
        active_since=since,
        active_till=till,
        tags_evaltype=TagsEvalType.AND_OR.as_api_value(),
        hosts=client.get_hosts_by_names(host_names),
        groups=get_groups(client, group_names, include_nested),
        timeperiods=[
            TimePeriod(
                period=int(duration.total_seconds()),
                timeperiod_type=MaintenancePeriodType.ONETIME.as_api_value(),
                start_date=start,
            )
        ],
    )

    if app.state.dry_run:
        render_result(
            Result(message="Dry run, maintenance not created.", result=maintenance)
        )
        return

    with app.status("Creating maintenance..."):
        maintenance_id = client.create_maintenance(maintenance)
    print_maintenance_url("Created", maintenance_id)

    if poll_interval:
        wait_for_maintenance(client.get_maintenance_hosts(maintenance), poll_interval)


@app.command(name="get")
def get_maintenances(ctx: typer.Context) -> None:
    """Show all maintenances, ordered by ID."""
    from zbx.models import AggregateResult

    with app.status("Fetching maintenances..."):
        maintenances = app.client.get_maintenances()
    maintenances.sort(key=lambda m: m.id_int)
    render_result(AggregateResult(result=maintenances))


@app.command(
    name="update",
    examples=[
        Example(
            "Extend a maintenance to 3 hours",
            "zbx mainte update --name 'Kernel upgrade' --period 3h --active-till 2024-06-02T01:00",
        ),
        Example(
            "Remove all hosts from a maintenance",
            "zbx mainte update --id 42 --host ''",
        ),
    ],
)
def update_maintenance(
    ctx: typer.Context,
    maintenance_id: Optional[str] = typer.Option(
        None, "--id", help="ID of the maintenance to update."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Name of the maintenance to update."
    ),
    new_name: Optional[str] = typer.Option(
        None, "--new-name", help="Rename the maintenance."
    ),
    description: Optional[str] = typer.Option(
        None, "--desc", "-d", help="Description of the maintenance."
    ),
    include_nested: bool = OPTION_INCLUDE_NESTED,
    groups: Optional[list[str]] = typer.Option(
        None,
        "--group",
        "-g",
        help="Host group name. Can be repeated. A single empty value removes all groups.",
    ),
    hosts: Optional[list[str]] = typer.Option(
        None,
        "--host",
        "-H",
        help="Host name. Can be repeated. A single empty value removes all hosts.",
    ),
    active_since: Optional[str] = OPTION_ACTIVE_SINCE,
    active_till: Optional[str] = OPTION_ACTIVE_TILL,
    start_date: Optional[str] = OPTION_START_DATE,
    period: Optional[str] = typer.Option(
        None, "--period", "-p", help="Duration of the maintenance, e.g. 1h30m."
    ),
    wait: bool = OPTION_WAIT,
    interval: Optional[str] = OPTION_INTERVAL,
) -> None:
    """Update a maintenance selected by ID or name.

    Hosts and host groups are replaced when given, and kept otherwise.
    Only maintenances with a single time period can be updated.
    """
    from zbx.models import Result

    if bool(maintenance_id) == bool(name):
        exit_err("Exactly one of --id or --name must be set.")
    duration = parse_duration(period) if period else None
    if duration is not None and duration.total_seconds() <= 0:
        exit_err("--period must be positive.")
    poll_interval = get_interval(interval) if wait else None
    since = parse_optional_timestamp(active_since)
    till = parse_optional_timestamp(active_till)
    start = parse_optional_timestamp(start_date)

    client = app.client
    maintenance = get_target_maintenance(client, maintenance_id, name)
    if len(maintenance.timeperiods) != 1:
        exit_err(
            f"Maintenance {maintenance.maintenanceid} has "
            f"{len(maintenance.timeperiods)} time periods, only 1 is supported."
        )

    if hosts is not None:
        if hosts == [""]:
            maintenance.hosts = []
        else:
            maintenance.hosts = client.get_hosts_by_names([h for h in hosts if h])
    if groups is not None:
        if groups == [""]:
            maintenance.groups = []
        else:
            maintenance.groups = get_groups(
                client, [g for g in groups if g], include_nested
            )

    if new_name:
        maintenance.name = new_name
    if description is not None:
        maintenance.description = description
    if since:
        maintenance.active_since = since
    if till:
        maintenance.active_till = till
    check_active_period(maintenance.active_since, maintenance.active_till)
    timeperiod = maintenance.timeperiods[0]
    if start:
        timeperiod.start_date = start
    if duration is not None:
        timeperiod.period = int(duration.total_seconds())

    if app.state.dry_run:
        render_result(
            Result(message="Dry run, maintenance not updated.", result=maintenance)
        )
        return

    with app.status("Updating maintenance..."):
        updated_id = client.update_maintenance(maintenance)
    print_maintenance_url("Updated", updated_id)

    if poll_interval:
        wait_for_maintenance(client.get_maintenance_hosts(maintenance), poll_interval)


@app.command(
    name="delete",
    examples=[
        Example(
            "Delete maintenances by ID and name",
            "zbx mainte delete --id 42 --id 43 --name 'Kernel upgrade'",
        ),
    ],
)
def delete_maintenances(
    ctx: typer.Context,
    maintenance_ids: Optional[list[str]] = typer.Option(
        None, "--id", help="ID of a maintenance to delete. Can be repeated."
    ),
    names: Optional[list[str]] = typer.Option(
        None, "--name", "-n", help="Name of a maintenance to delete. Can be repeated."
    ),
) -> None:
    """Delete maintenances by ID and/or name."""
    from zbx.commands.results.maintenance import DeleteMaintenanceResult
    from zbx.models import Result

    ids = maintenance_ids or []
    names = names or []
    if not ids and not names:
        exit_err("At least one --id or --name must be set.")
    if dups := find_duplicates(ids):
        exit_err(f"Duplicate IDs given with --id: {', '.join(dups)}")
    if dups := find_duplicates(names):
        exit_err(f"Duplicate names given with --name: {', '.join(dups)}")

    client = app.client
    ids_by_ids = client.get_maintenance_ids_by_ids(ids) if ids else []
    ids_by_names = client.get_maintenance_ids_by_names(names) if names else []
    target_ids = sorted(
        concat_dedup(ids_by_ids, ids_by_names),
        key=lambda mid: int(mid) if mid.isdigit() else 0,
    )

    if app.state.dry_run:
        render_result(
            Result(
                message=f"Dry run, would delete maintenances: {', '.join(target_ids)}",
                result=DeleteMaintenanceResult(target_ids=target_ids),
            )
        )
        return

    with app.status("Deleting maintenances..."):
        deleted_ids = client.delete_maintenances(target_ids)
    render_result(
        Result(
            message=f"Deleted maintenances: {', '.join(deleted_ids)}",
            result=DeleteMaintenanceResult(
                target_ids=target_ids, deleted_ids=deleted_ids
            ),
        )
    )


@app.command(name="status")
def maintenance_status(
    ctx: typer.Context,
    maintenance_id: Optional[str] = typer.Option(
        None, "--id", help="ID of the maintenance."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Name of the maintenance."
    ),
    wait: bool = OPTION_WAIT,
    interval: Optional[str] = OPTION_INTERVAL,
) -> None:
    """Show a maintenance and the maintenance status of its hosts.

    Hosts in the maintenance's host groups are included.
    """
    from zbx.commands.results.maintenance import MaintenanceStatusResult

    if bool(maintenance_id) == bool(name):
        exit_err("Exactly one of --id or --name must be set.")
    poll_interval = get_interval(interval) if wait else None

    client = app.client
    maintenance = get_target_maintenance(client, maintenance_id, name)
    hosts = client.get_maintenance_hosts(maintenance)
    render_result(MaintenanceStatusResult(maintenance=maintenance, hosts=hosts))

    if poll_interval:
        wait_for_maintenance(hosts, poll_interval)
