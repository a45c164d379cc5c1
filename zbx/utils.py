"""Parsing and formatting helpers shared by the commands."""

from __future__ import annotations

import re
from collections.abc import Hashable
from collections.abc import Iterable
from datetime import datetime
from datetime import timedelta
from typing import NamedTuple
from typing import Optional
from typing import TypeVar

from zbx.exceptions import ZbxError

T = TypeVar("T", bound=Hashable)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"
"""Layout of timestamps given on the command line (local time)."""


class TimeUnit(NamedTuple):
    unit: str
    tokens: list[str]
    value: int
    """Seconds per unit."""


TIME_VALUE_DAY = TimeUnit("d", ["days", "day"], value=60 * 60 * 24)
TIME_VALUE_HOUR = TimeUnit("h", ["hours", "hour"], value=60 * 60)
TIME_VALUE_MINUTE = TimeUnit("m", ["minutes", "minute", "min"], value=60)
TIME_VALUE_SECOND = TimeUnit("s", ["seconds", "second", "sec"], value=1)
TIME_VALUES = [
    TIME_VALUE_DAY,
    TIME_VALUE_HOUR,
    TIME_VALUE_MINUTE,
    TIME_VALUE_SECOND,
]

_UNITS: dict[str, int] = {}
for _tv in TIME_VALUES:
    _UNITS[_tv.unit] = _tv.value
    for _token in _tv.tokens:
        _UNITS[_token] = _tv.value

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)([a-z]+)")


def parse_duration(time: str) -> timedelta:
    """Convert a duration string to a timedelta.

    `time` specifies a duration in one of the following formats:

    - `1d1h30m30s`
    - `1 day 1 hour 30 minutes 30 seconds`

    Any combination of the above is also valid, e.g. `1h30m`, `2 days 30m`
    or `1.5h`. A plain number is a number of seconds.
    """
    text = time.replace(" ", "").lower()
    if not text:
        raise ZbxError("Empty duration")
    if text.isdigit():
        return timedelta(seconds=int(text))

    seconds = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        number, unit = match.groups()
        if unit not in _UNITS:
            raise ZbxError(f"Invalid time unit {unit!r} in duration {time!r}")
        seconds += float(number) * _UNITS[unit]
        pos = match.end()
    if pos != len(text):
        raise ZbxError(f"Invalid duration: {time!r}")
    return timedelta(seconds=seconds)


def format_duration(td: timedelta) -> str:
    """Format a timedelta as a compact duration, e.g. `1d2h30m`."""
    seconds = int(td.total_seconds())
    if seconds == 0:
        return "0s"
    parts: list[str] = []
    for tv in TIME_VALUES:
        n, seconds = divmod(seconds, tv.value)
        if n:
            parts.append(f"{n}{tv.unit}")
    return "".join(parts)


def parse_timestamp(ts: str) -> datetime:
    """Parse a `YYYY-MM-DDTHH:MM` timestamp in local time.

    Returns a timezone-aware datetime."""
    try:
        return datetime.strptime(ts.strip(), TIMESTAMP_FORMAT).astimezone()
    except ValueError as e:
        raise ZbxError(
            f"Invalid timestamp {ts!r}, expected format YYYY-MM-DDTHH:MM"
        ) from e


def parse_optional_timestamp(ts: Optional[str]) -> Optional[datetime]:
    if not ts:
        return None
    return parse_timestamp(ts)


def now_minute() -> datetime:
    """Current local time, truncated to the minute."""
    return datetime.now().astimezone().replace(second=0, microsecond=0)


def find_duplicates(values: Iterable[T]) -> list[T]:
    """Values that occur more than once, in order of first repetition."""
    seen: set[T] = set()
    dups: list[T] = []
    for value in values:
        if value in seen and value not in dups:
            dups.append(value)
        seen.add(value)
    return dups


def concat_dedup(*iterables: Iterable[T]) -> list[T]:
    """Concatenate iterables, keeping the first occurrence of each value."""
    seen: set[T] = set()
    result: list[T] = []
    for iterable in iterables:
        for value in iterable:
            if value not in seen:
                seen.add(value)
                result.append(value)
    return result


def maintenance_url(server_url: str, maintenance_id: str) -> str:
    """URL of the maintenance edit form in the Zabbix web interface."""
    return (
        f"{server_url.rstrip('/')}/maintenance.php"
        f"?form=update&maintenanceid={maintenance_id}"
    )
