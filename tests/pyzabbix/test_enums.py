from __future__ import annotations

import pytest
from inline_snapshot import snapshot
from zbx.exceptions import ZbxError
from zbx.pyzabbix.enums import APIStr
from zbx.pyzabbix.enums import MaintenancePeriodType
from zbx.pyzabbix.enums import MaintenanceStatus
from zbx.pyzabbix.enums import MaintenanceType
from zbx.pyzabbix.enums import TriggerPriority
from zbx.pyzabbix.enums import TriggerStatus


@pytest.mark.parametrize("value", ["enabled", "ENABLED", 0, "0", TriggerStatus.ENABLED])
def test_choice_lookup(value: object) -> None:
    assert TriggerStatus(value) == TriggerStatus.ENABLED


def test_choice_invalid() -> None:
    with pytest.raises(ZbxError) as exc_info:
        TriggerStatus("maybe")
    assert str(exc_info.value) == snapshot("Invalid trigger status: 'maybe'.")


def test_api_values() -> None:
    assert TriggerStatus.DISABLED.as_api_value() == 1
    assert TriggerStatus.DISABLED.as_api_str() == "1"
    assert MaintenancePeriodType.ONETIME.as_api_value() == 0
    assert MaintenanceType.WITHOUT_DC.as_api_value() == 1
    assert str(TriggerStatus.DISABLED) == "disabled"


def test_choices() -> None:
    assert TriggerPriority.choices() == snapshot(
        ["unclassified", "information", "warning", "average", "high", "disaster"]
    )


@pytest.mark.parametrize(
    "value, expect",
    [
        ("1", "On"),
        (0, "Off"),
        ("7", "Unknown"),
        (None, "Unknown"),
    ],
)
def test_string_from_value(value: object, expect: str) -> None:
    assert MaintenanceStatus.string_from_value(value) == expect


def test_string_from_value_keeps_case() -> None:
    assert MaintenanceType.string_from_value("1") == "Without DC"
    assert MaintenanceType.string_from_value("1", with_code=True) == "Without DC (1)"
    assert MaintenanceType.string_from_value("9", with_code=True) == "Unknown (9)"


def test_api_str_requires_api_value() -> None:
    with pytest.raises(ZbxError):
        APIStr("foo")
    s = APIStr("foo", 3)
    assert s == "foo"
    assert s.api_value == 3
    assert APIStr(s) is s
