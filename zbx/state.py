"""Defines the global state object for the application.

The global state object is a singleton that holds the current configuration
and Zabbix API client for the duration of a CLI invocation.
"""

# This module should not import from other local modules because it's widely
# used throughout the application, and we don't want to create circular imports.
# Runtime imports from other modules should be done inside functions,
# while annotations imports should done in `if TYPE_CHECKING:` blocks.
from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Optional

if TYPE_CHECKING:
    from zbx.config.model import Config
    from zbx.pyzabbix.client import ZabbixAPI

logger = logging.getLogger(__name__)


class State:
    """Object that encapsulates the current state of the application.
    Holds the current configuration and Zabbix client.
    """

    _instance = None

    def __new__(cls, *args: Any, **kwargs: Any):
        if cls._instance is None:
            cls._instance = super().__new__(cls, *args, **kwargs)
        return cls._instance

    _client: Optional[ZabbixAPI] = None
    """Zabbix API client object."""

    _config: Optional[Config] = None
    """Current Config object (may have overrides)."""

    debug: bool = False
    """Print raw API requests and responses."""

    @property
    def client(self) -> ZabbixAPI:
        """Zabbix API client object.
        Fails if the client is not configured.
        """
        from zbx.exceptions import ZbxError

        if self._client is None:
            raise ZbxError("Not connected to the Zabbix API.")
        return self._client

    @client.setter
    def client(self, client: ZabbixAPI) -> None:
        self._client = client

    @property
    def is_client_loaded(self) -> bool:
        return self._client is not None

    @property
    def config(self) -> Config:
        if self._config is None:
            from zbx.config.model import Config

            logger.debug(
                "Using sample config as fallback.",
                stacklevel=2,  # See who called this
            )
            self._config = Config.sample_config()
        return self._config

    @config.setter
    def config(self, config: Config) -> None:
        """Set the configuration object and update active configuration of
        loggers and consoles."""
        from zbx.logs import configure_logging
        from zbx.output.console import configure_console

        self._config = config
        configure_logging(config.logging, debug=self.debug)
        configure_console(config)

    @property
    def dry_run(self) -> bool:
        return self.config.app.dry_run

    def login(self) -> None:
        """Log in to the Zabbix API with the credentials from the config."""
        from zbx import auth

        self.client = auth.login(self.config, debug=self.debug)

    def logout_on_exit(self) -> None:
        """End the API session on exit if it was started by logging in.

        API tokens are not sessions and are left alone."""
        if self._client is None:
            return
        try:
            if (
                self._client.is_authenticated
                and not self.config.api.auth_token.get_secret_value()
            ):
                self._client.logout()
        except Exception as e:
            from zbx.exceptions import handle_exception

            # Outside of main loop, handle the exception
            handle_exception(e)
        finally:
            self._client.close()
            self._client = None

    def reset(self) -> None:
        """Forget the client and config."""
        self._client = None
        self._config = None
        self.debug = False


def get_state() -> State:
    """Returns the global state object.

    Instantiates a new state object with defaults if it doesn't exist.
    """
    return State()
