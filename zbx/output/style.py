from __future__ import annotations

from rich.theme import Theme
from strenum import StrEnum


class Color(StrEnum):
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"
    INFO = "default"


class TextStyle(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


RICH_THEME = Theme(
    {
        TextStyle.SUCCESS.value: Color.SUCCESS,
        TextStyle.WARNING.value: f"bold {Color.WARNING}",
        TextStyle.ERROR.value: f"bold {Color.ERROR}",
        TextStyle.INFO.value: Color.INFO,
    }
)


class Icon(StrEnum):
    DEBUG = "⚙"
    INFO = "!"
    OK = "✓"
    ERROR = "✗"
    PROMPT = "?"
    WARNING = "⚠"
