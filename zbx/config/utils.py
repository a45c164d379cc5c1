from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import Optional

from zbx.config.constants import CONFIG_PRIORITY
from zbx.exceptions import ConfigError

if TYPE_CHECKING:
    from zbx.config.model import Config

logger = logging.getLogger(__name__)


def load_config_toml(filename: Path) -> dict[str, Any]:
    """Load a TOML configuration file."""
    import tomli

    try:
        return tomli.loads(filename.read_text())
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Error decoding TOML file {filename}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading TOML file {filename}: {e}") from e


def find_config(
    filename: Optional[Path] = None,
    priority: tuple[Path, ...] = CONFIG_PRIORITY,
) -> Optional[Path]:
    """Find the first existing configuration file.

    :param filename: An optional user supplied file that takes precedence
    """
    filename_prio = list(priority)
    if filename:
        filename_prio.insert(0, filename)
    for fp in filename_prio:
        if fp.exists():
            logger.debug("found config %r", fp)
            return fp
    return None


def get_config(filename: Optional[Path] = None) -> Config:
    """Get a configuration object.

    Falls back on the sample configuration if no file is found.
    """
    from zbx.config.model import Config

    return Config.from_file(filename)
