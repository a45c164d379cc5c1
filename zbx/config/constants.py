from __future__ import annotations

from pathlib import Path

from strenum import StrEnum

from zbx.dirs import CONFIG_DIR
from zbx.dirs import LOGS_DIR
from zbx.dirs import SITE_CONFIG_DIR

# Config file basename
CONFIG_FILENAME = "zbx.toml"
DEFAULT_CONFIG_FILE = CONFIG_DIR / CONFIG_FILENAME


CONFIG_PRIORITY = (
    Path() / CONFIG_FILENAME,  # current directory
    DEFAULT_CONFIG_FILE,  # local config directory
    SITE_CONFIG_DIR / CONFIG_FILENAME,  # system config directory
)


LOG_FILE = LOGS_DIR / "zbx.log"


# Environment variable names
class ConfigEnvVars:
    API_TOKEN = "ZBX_API_TOKEN"
    PASSWORD = "ZBX_PASSWORD"
    URL = "ZBX_URL"
    USERNAME = "ZBX_USERNAME"
    VIRTUAL_HOST = "ZBX_VIRTUAL_HOST"


class OutputFormat(StrEnum):
    JSON = "json"
    TABLE = "table"
