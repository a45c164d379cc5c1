#!/usr/bin/env python
#
# Authors:
# rafael@e-mc2.net / https://e-mc2.net/
#
# Copyright (c) 2014-2024 USIT-University of Oslo
#
# This file is part of Zabbix-cli
# https://github.com/unioslo/zabbix-cli
#
# Zabbix-CLI is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Zabbix-CLI is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Zabbix-CLI.  If not, see <http://www.gnu.org/licenses/>.
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from zbx.__about__ import __version__
from zbx.app import app
from zbx.config.constants import ConfigEnvVars
from zbx.config.constants import OutputFormat
from zbx.config.utils import get_config
from zbx.logs import configure_logging
from zbx.logs import logger
from zbx.state import get_state


def version_callback(value: bool):
    if value:
        print(f"zbx version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-l",
        help="Zabbix URL, e.g. https://zabbix.example.com",
        envvar=ConfigEnvVars.URL,
    ),
    virtual_host: Optional[str] = typer.Option(
        None,
        "--virtual-host",
        help="Virtual host on the Zabbix server (HTTP Host header).",
        envvar=ConfigEnvVars.VIRTUAL_HOST,
    ),
    username: Optional[str] = typer.Option(
        None,
        "--username",
        "-u",
        help="Username to log in with.",
        envvar=ConfigEnvVars.USERNAME,
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Password to log in with. Prompted for if both this and the token are empty.",
        envvar=ConfigEnvVars.PASSWORD,
        show_default=False,
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        help="Zabbix API token. Used instead of username and password.",
        envvar=ConfigEnvVars.API_TOKEN,
        show_default=False,
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Alternate configuration file to use.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Print JSON-RPC requests and responses, and log at DEBUG level.",
    ),
    dry_run: Optional[bool] = typer.Option(
        None,
        "--dry-run",
        help="Show what would be changed without changing anything.",
    ),
    output_format: Optional[OutputFormat] = typer.Option(
        None,
        "--format",
        "-o",
        help="Output format.",
        case_sensitive=False,
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show the version of zbx and exit.",
        is_eager=True,
        callback=version_callback,
    ),
) -> None:
    # Don't run callback if --help is passed in
    # https://github.com/tiangolo/typer/issues/55
    if "--help" in sys.argv:
        return

    state = get_state()
    config = get_config(config_file)

    # Command line options override the config file
    if url is not None:
        config.api.url = url
    if virtual_host is not None:
        config.api.virtual_host = virtual_host
    if username is not None:
        config.api.username = username
    if password is not None:
        config.api.password = password  # type: ignore[assignment] # validated into SecretStr
    if token is not None:
        config.api.auth_token = token  # type: ignore[assignment]
    if dry_run is not None:
        config.app.dry_run = dry_run
    if output_format is not None:
        config.app.output.format = output_format

    state.debug = debug
    state.config = config
    logger.debug("zbx started.")


def main() -> int:
    """Main entry point for the CLI."""
    state = get_state()

    try:
        configure_logging()
        app()
    except Exception as e:
        from zbx.exceptions import handle_exception

        handle_exception(e)
    finally:
        state.logout_on_exit()
        logger.debug("zbx stopped.")
    return 0


if __name__ == "__main__":
    main()
