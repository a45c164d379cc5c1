from __future__ import annotations

from typing import Any
from typing import Optional

import typer

from zbx.app import Example
from zbx.app import StatefulApp
from zbx.output.console import exit_err
from zbx.output.render import render_result
from zbx.pyzabbix.enums import TriggerStatus

app = StatefulApp(
    name="trigger",
    help="Show, enable or disable Zabbix triggers.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

OPTION_IDS = typer.Option(None, "--id", help="Trigger ID. Can be repeated.")
OPTION_HOSTS = typer.Option(None, "--host", "-H", help="Host name. Can be repeated.")
OPTION_GROUPS = typer.Option(
    None, "--group", "-g", help="Host group name. Can be repeated."
)
OPTION_DESCRIPTIONS = typer.Option(
    None,
    "--description",
    "-d",
    help="Exact trigger description (name). Can be repeated.",
)


def get_filters(
    trigger_ids: Optional[list[str]],
    hosts: Optional[list[str]],
    groups: Optional[list[str]],
    descriptions: Optional[list[str]],
) -> dict[str, Any]:
    """Keyword arguments for the trigger lookups.

    Host and host group names are resolved to IDs."""
    client = app.client
    host_ids = [h.hostid for h in client.get_hosts_by_names(hosts)] if hosts else None
    group_ids = (
        [g.groupid for g in client.get_hostgroups_by_names(groups)] if groups else None
    )
    return {
        "trigger_ids": trigger_ids or None,
        "host_ids": host_ids,
        "group_ids": group_ids,
        "descriptions": descriptions or None,
    }


@app.command(name="get")
def get_triggers(
    ctx: typer.Context,
    trigger_ids: Optional[list[str]] = OPTION_IDS,
    hosts: Optional[list[str]] = OPTION_HOSTS,
    groups: Optional[list[str]] = OPTION_GROUPS,
    descriptions: Optional[list[str]] = OPTION_DESCRIPTIONS,
) -> None:
    """Show triggers matching all of the given filters."""
    from zbx.models import AggregateResult

    filters = get_filters(trigger_ids, hosts, groups, descriptions)
    with app.status("Fetching triggers..."):
        triggers = app.client.get_triggers(**filters)
    render_result(AggregateResult(result=triggers))


def set_status(
    status: TriggerStatus,
    trigger_ids: Optional[list[str]],
    hosts: Optional[list[str]],
    groups: Optional[list[str]],
    descriptions: Optional[list[str]],
) -> None:
    from zbx.commands.results.trigger import TriggerStatusResult
    from zbx.models import Result

    if not any((trigger_ids, hosts, groups, descriptions)):
        exit_err("At least one of --id, --host, --group or --description must be set.")

    filters = get_filters(trigger_ids, hosts, groups, descriptions)
    client = app.client
    target_ids = client.get_trigger_ids(**filters)
    if not target_ids:
        exit_err("No triggers match the given filters.")

    if app.state.dry_run:
        render_result(
            Result(
                message=f"Dry run, would set {len(target_ids)} trigger(s) to {status}.",
                result=TriggerStatusResult(status=str(status), trigger_ids=target_ids),
            )
        )
        return

    updated_ids: list[str] = []
    with app.status(f"Setting trigger status to {status}..."):
        for trigger_id in target_ids:
            updated_ids.extend(client.set_trigger_status(trigger_id, status))
    render_result(
        Result(
            message=f"Set {len(updated_ids)} trigger(s) to {status}.",
            result=TriggerStatusResult(
                status=str(status), trigger_ids=target_ids, updated_ids=updated_ids
            ),
        )
    )


@app.command(
    name="enable",
    examples=[
        Example("Enable all triggers of a host", "zbx trigger enable --host web01"),
    ],
)
def enable_triggers(
    ctx: typer.Context,
    trigger_ids: Optional[list[str]] = OPTION_IDS,
    hosts: Optional[list[str]] = OPTION_HOSTS,
    groups: Optional[list[str]] = OPTION_GROUPS,
    descriptions: Optional[list[str]] = OPTION_DESCRIPTIONS,
) -> None:
    """Enable triggers matching all of the given filters."""
    set_status(TriggerStatus.ENABLED, trigger_ids, hosts, groups, descriptions)


@app.command(
    name="disable",
    examples=[
        Example(
            "Disable a trigger by description on a host",
            "zbx trigger disable --host web01 --description 'High CPU load'",
        ),
    ],
)
def disable_triggers(
    ctx: typer.Context,
    trigger_ids: Optional[list[str]] = OPTION_IDS,
    hosts: Optional[list[str]] = OPTION_HOSTS,
    groups: Optional[list[str]] = OPTION_GROUPS,
    descriptions: Optional[list[str]] = OPTION_DESCRIPTIONS,
) -> None:
    """Disable triggers matching all of the given filters."""
    set_status(TriggerStatus.DISABLED, trigger_ids, hosts, groups, descriptions)
