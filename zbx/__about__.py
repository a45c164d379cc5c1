from __future__ import annotations

APP_NAME = "zbx"
AUTHOR = "zbx"
__version__ = "0.4.0"
