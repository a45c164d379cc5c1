"""Authentication against the Zabbix API for CLI invocations.

An API token is used when one is configured. Otherwise the client logs in
with username and password, prompting for the password if it is not set.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from zbx.exceptions import redact_params
from zbx.logs import add_log_context
from zbx.output.prompts import str_prompt
from zbx.pyzabbix.client import ZabbixAPI

if TYPE_CHECKING:
    from zbx.config.model import Config
    from zbx.pyzabbix.client import DebugDirection

logger = logging.getLogger(__name__)


def print_debug_payload(direction: DebugDirection, payload: bytes) -> None:
    """Print a raw request or response body to stderr with secrets masked."""
    from zbx.output.console import debug

    try:
        text = json.dumps(redact_params(json.loads(payload)))
    except ValueError:
        text = payload.decode(errors="replace")
    debug(f"{direction}: {text}")


def prompt_password(username: str) -> str:
    return str_prompt(f"Password for {username}", password=True)


def login(config: Config, debug: bool = False) -> ZabbixAPI:
    """Log in to the Zabbix API using credentials from the config.

    Returns the Zabbix API client object.
    """
    client = ZabbixAPI.from_config(
        config, debug_hook=print_debug_payload if debug else None
    )
    if client.is_authenticated:
        add_log_context("user", "<token>")
        logger.debug("Using API token for %s", client.url)
        return client

    username = config.api.username
    password = config.api.password.get_secret_value()
    if not password:
        password = prompt_password(username)
    try:
        client.login(username, password)
    except Exception:
        client.close()
        raise
    add_log_context("user", username)
    logger.debug("Logged in as %s to %s", username, client.url)
    return client
