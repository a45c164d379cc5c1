# Authors:
# rafael@postgresql.org.es / http://www.postgresql.org.es/
#
# Copyright (c) 2014-2016 USIT-University of Oslo
#
# This file is part of Zabbix-CLI
# https://github.com/rafaelma/zabbix-cli
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

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any
from typing import Optional

from pydantic import AliasChoices
from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import SecretStr
from pydantic import ValidationError
from pydantic import ValidationInfo
from pydantic import field_validator
from pydantic import model_validator
from typing_extensions import Self

from zbx.config.constants import LOG_FILE
from zbx.config.constants import OutputFormat
from zbx.config.utils import find_config
from zbx.config.utils import load_config_toml
from zbx.exceptions import ConfigError
from zbx.exceptions import InvalidVersion
from zbx.logs import LogLevelStr
from zbx.pyzabbix.version import APIVersion

logger = logging.getLogger("zbx.config")


class BaseModel(PydanticBaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    @field_validator("*")
    @classmethod
    def _conf_bool_validator_compat(cls, v: Any, info: ValidationInfo) -> Any:
        """Handles config files that specify bools as ON/OFF."""
        if not isinstance(v, str):
            return v
        if v.upper() == "ON":
            return True
        if v.upper() == "OFF":
            return False
        return v


class APIConfig(BaseModel):
    """Configuration for the Zabbix API."""

    url: str = Field(
        default="",
        validation_alias=AliasChoices("url", "zabbix_api_url"),
        description="URL of the Zabbix web interface. Should not include `/api_jsonrpc.php`.",
        examples=["https://zabbix.example.com"],
    )
    virtual_host: str = Field(
        default="",
        description="Value of the HTTP Host header, if it differs from the URL host.",
    )
    username: str = Field(
        default="Admin",
        description="Username for the Zabbix API.",
        examples=["Admin"],
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Password for user.",
        examples=["zabbix"],
    )
    auth_token: SecretStr = Field(
        default=SecretStr(""),
        description="API auth token. Used instead of username and password.",
        examples=["API_TOKEN_123"],
    )
    verify_ssl: bool = Field(
        default=True,
        validation_alias=AliasChoices("verify_ssl", "cert_verify"),
        description="Verify SSL certificate of the Zabbix API host.",
    )
    timeout: Optional[int] = Field(
        default=0,
        description="API request timeout in seconds.",
    )
    login_username_since: str = Field(
        default="",
        description=(
            "First API version whose `user.login` takes `username` instead of `user`. "
            "Uses the built-in rules when empty."
        ),
        examples=["6.4.0beta5"],
    )

    @field_validator("login_username_since")
    @classmethod
    def _validate_version(cls, v: str) -> str:
        if v:
            try:
                APIVersion.parse(v)
            except InvalidVersion as e:
                raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def _validate_model(self) -> Self:
        # Convert 0 timeout to None
        if self.timeout == 0:
            self.timeout = None
        return self


class OutputConfig(BaseModel):
    format: OutputFormat = Field(
        default=OutputFormat.TABLE,
        description="Format of command output.",
    )
    color: bool = Field(
        default=True,
        description="Use colors in terminal output.",
    )

    @field_validator("format", mode="before")
    @classmethod
    def _ignore_enum_case(cls, v: Any) -> Any:
        """Ignore case when validating enum value."""
        if isinstance(v, str):
            return v.lower()
        return v


class AppConfig(BaseModel):
    dry_run: bool = Field(
        default=False,
        description="Never create, update or delete anything.",
    )
    wait_interval: timedelta = Field(
        default=timedelta(seconds=30),
        description="Interval between polls when waiting for maintenances to take effect.",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("wait_interval", mode="before")
    @classmethod
    def _parse_duration(cls, v: Any) -> Any:
        if isinstance(v, str):
            from zbx.exceptions import ZbxError
            from zbx.utils import parse_duration

            try:
                return parse_duration(v)
            except ZbxError as e:
                raise ValueError(str(e)) from e
        return v

    @field_validator("wait_interval")
    @classmethod
    def _positive_interval(cls, v: timedelta) -> timedelta:
        if v.total_seconds() <= 0:
            raise ValueError("wait_interval must be positive")
        return v


class LoggingConfig(BaseModel):
    """Configuration for application logs."""

    enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("logging", "enabled"),
        description="Enable logging.",
    )
    log_level: LogLevelStr = Field(
        default="INFO",
        description="Log level.",
    )
    log_file: Optional[Path] = Field(
        default=LOG_FILE,
        description=(
            "File for storing logs. "
            "Can be set to an empty string to log to stderr (**warning:** NOISY)."
        ),
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_string_is_none(cls, v: Any) -> Any:
        """Passing in an empty string to `log_file` sets it to `None`,
        while omitting the option altogether sets it to the default.

        Examples:
        -------
        To get `LoggingConfig.log_file == None`:

        ```toml
        [logging]
        log_file = ""
        ```
        """
        if v == "":
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class Config(BaseModel):
    """Configuration for the application."""

    api: APIConfig = Field(default_factory=APIConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    config_path: Optional[Path] = Field(default=None, exclude=True)
    sample: bool = Field(default=False, exclude=True)

    @classmethod
    def sample_config(cls) -> Config:
        """Get a sample configuration."""
        return cls(api=APIConfig(url="https://zabbix.example.com"), sample=True)

    @classmethod
    def from_file(cls, filename: Optional[Path] = None) -> Config:
        """Load configuration from a file.

        Attempts to find a config file to load if none is specified.
        Returns the sample config if no file is found.
        """
        if filename:
            if not filename.exists():
                raise ConfigError(f"Configuration file {filename} does not exist.")
            fp: Optional[Path] = filename
        else:
            fp = find_config()
        if not fp:
            logger.debug("No configuration file found. Using sample config.")
            return cls.sample_config()
        return cls.from_toml_file(fp)

    @classmethod
    def from_toml_file(cls, filename: Path) -> Config:
        """Load configuration from a TOML file."""
        conf = load_config_toml(filename)
        try:
            return cls(**conf, config_path=filename)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration file {filename}: {e}") from e
