from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any
from typing import Generic
from typing import Optional
from typing import TypeVar

from typing_extensions import Self

from zbx.exceptions import ZbxError

T = TypeVar("T")


class APIStr(str, Generic[T]):
    """String type that can be used as an Enum choice while also
    carrying an API value associated with the string.
    """

    # Instance variables are set by __new__
    api_value: T
    value: str
    metadata: Mapping[str, Any]

    def __new__(
        cls,
        s: str,
        api_value: T = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> APIStr[T]:
        if isinstance(s, APIStr):
            return s  # type: ignore # Type checker should be able to infer generic type
        if api_value is None:
            raise ZbxError("API value must be provided for APIStr.")
        obj = str.__new__(cls, s)
        obj.value = s
        obj.api_value = api_value
        obj.metadata = metadata or {}
        return obj


class Choice(Enum):
    """Enum whose members carry both a human readable name and the
    Zabbix API value, and can be instantiated with either:

        * `TriggerStatus("enabled")`
        * `TriggerStatus(0)`
        * `TriggerStatus("0")`

    The API itself is inconsistent with usage of strings and ints,
    so both are supported.
    """

    value: APIStr[int]  # pyright: ignore[reportIncompatibleMethodOverride]
    __choice_name__: str = ""  # default (falls back to class name)

    def __new__(cls, value: APIStr[int]) -> Choice:
        obj = object.__new__(cls)
        obj._value_ = value
        return obj

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        pass

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def __fmt_name__(cls) -> str:
        """Return the name of the enum class in a human-readable format,
        e.g. `TriggerStatus` becomes `trigger status`.
        """
        if cls.__choice_name__:
            return cls.__choice_name__
        return (
            "".join([(" " + i if i.isupper() else i) for i in cls.__name__])
            .lower()
            .strip()
        )

    @classmethod
    def choices(cls) -> list[str]:
        """Return list of string values of the enum members."""
        return [str(e) for e in cls]

    def as_api_value(self) -> int:
        """Return the equivalent Zabbix API value."""
        return self.value.api_value

    def as_api_str(self) -> str:
        """Return the API value the way the API sends it (a string)."""
        return str(self.value.api_value)

    @classmethod
    def _missing_(cls, value: object) -> object:
        """Look up a member by its name (ignoring case) or its API value."""
        for v in cls:
            if v.value == value:
                return v
            elif str(v.value).lower() == str(value).lower():
                return v
            elif str(v.as_api_value()) == str(value):
                return v
        raise ZbxError(f"Invalid {cls.__fmt_name__()}: {value!r}.")


class APIStrEnum(Choice):
    """Enum that can format API values as status strings."""

    @classmethod
    def string_from_value(
        cls: type[Self], value: Any, default: str = "Unknown", with_code: bool = False
    ) -> str:
        """Get a formatted status string given a value."""
        try:
            c = cls(value)
            if c.value.islower():
                name = c.value.capitalize()
            else:
                name = str(c.value)
            code = c.value.api_value
        except (ValueError, ZbxError):
            name = default
            code = value
        if with_code:
            return f"{name} ({code})"
        return name


class MaintenanceStatus(APIStrEnum):
    """Host maintenance status."""

    ON = APIStr("on", 1)
    OFF = APIStr("off", 0)


class MaintenanceType(APIStrEnum):
    """Maintenance type (data collection during maintenance)."""

    WITH_DC = APIStr("With DC", 0)
    WITHOUT_DC = APIStr("Without DC", 1)


class MaintenancePeriodType(APIStrEnum):
    """Maintenance time period type."""

    ONETIME = APIStr("one time", 0)
    DAILY = APIStr("daily", 2)
    WEEKLY = APIStr("weekly", 3)
    MONTHLY = APIStr("monthly", 4)


class TagsEvalType(APIStrEnum):
    """Problem tag evaluation method of a maintenance."""

    AND_OR = APIStr("and/or", 0)
    OR = APIStr("or", 2)


class TriggerStatus(APIStrEnum):
    ENABLED = APIStr("enabled", 0)
    DISABLED = APIStr("disabled", 1)


class TriggerPriority(APIStrEnum):
    UNCLASSIFIED = APIStr("unclassified", 0)
    INFORMATION = APIStr("information", 1)
    WARNING = APIStr("warning", 2)
    AVERAGE = APIStr("average", 3)
    HIGH = APIStr("high", 4)
    DISASTER = APIStr("disaster", 5)
