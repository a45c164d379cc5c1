from __future__ import annotations

from .app import Example
from .app import StatefulApp

app = StatefulApp(
    name="zbx",
    help="Command line client for the Zabbix API.",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Import commands to register them with the app
from zbx.commands import maintenance  # noqa: E402, I001
from zbx.commands import trigger  # noqa: E402

app.add_subcommand(maintenance.app, name="mainte")
app.add_subcommand(trigger.app, name="trigger")

__all__ = ["Example", "StatefulApp", "app"]
