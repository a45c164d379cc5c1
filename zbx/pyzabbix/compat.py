"""Compatibility rules to support different Zabbix API versions.

Version-dependent parameter names are declared as ordered tuples of
`VersionRule`s, most specific (newest) first. A rule applies to every
version at or above its `since` version, and the first applicable rule
wins. If no rule applies, the default value is used.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from typing import Literal
from typing import NamedTuple
from typing import TypeVar

from zbx.pyzabbix.version import APIVersion

T = TypeVar("T")


class VersionRule(NamedTuple):
    since: APIVersion
    """First version the rule applies to."""
    value: Any


def select_by_version(
    version: APIVersion, rules: Sequence[VersionRule], default: T
) -> Any:
    """Return the value of the first rule that applies to `version`."""
    for rule in rules:
        if version >= rule.since:
            return rule.value
    return default


def sort_rules(rules: Sequence[VersionRule]) -> tuple[VersionRule, ...]:
    """Order rules most specific (newest) first."""
    return tuple(sorted(rules, key=lambda r: r.since, reverse=True))


LoginUserField = Literal["user", "username"]

# https://support.zabbix.com/browse/ZBXNEXT-8085
# `user` deprecated in 5.4.0, removed in 6.4.0
LOGIN_USER_FIELD_RULES: tuple[VersionRule, ...] = (
    VersionRule(APIVersion(5, 4, 0), "username"),
)
LOGIN_USER_FIELD_DEFAULT: LoginUserField = "user"


def login_rules_since(version: APIVersion) -> tuple[VersionRule, ...]:
    """Login rules that switch to `username` at `version`."""
    return (VersionRule(version, "username"),)


def login_user_name(
    version: APIVersion,
    rules: Sequence[VersionRule] = LOGIN_USER_FIELD_RULES,
) -> LoginUserField:
    """Name of the user parameter of `user.login`."""
    return select_by_version(version, rules, LOGIN_USER_FIELD_DEFAULT)


### API params
# API parameter rules are in the following format:
# PARAM_<object>_<method>_<param>

# https://www.zabbix.com/documentation/6.2/en/manual/api/changes_6.0_-_6.2
PARAM_SELECT_HOSTGROUPS_RULES: tuple[VersionRule, ...] = (
    VersionRule(APIVersion(6, 2, 0), "selectHostGroups"),
)


def param_select_hostgroups(
    version: APIVersion,
) -> Literal["selectHostGroups", "selectGroups"]:
    """Parameter selecting host groups in `maintenance.get` and `trigger.get`."""
    return select_by_version(
        version, PARAM_SELECT_HOSTGROUPS_RULES, "selectGroups"
    )


class MaintenanceTargetParams(NamedTuple):
    hosts: str
    groups: str
    as_objects: bool
    """Targets are `{"hostid": ...}` objects rather than plain IDs."""


# https://www.zabbix.com/documentation/6.0/en/manual/api/changes_5.4_-_6.0
PARAM_MAINTENANCE_TARGETS_RULES: tuple[VersionRule, ...] = (
    VersionRule(APIVersion(6, 0, 0), MaintenanceTargetParams("hosts", "groups", True)),
)


def param_maintenance_targets(version: APIVersion) -> MaintenanceTargetParams:
    """Parameters used to assign hosts and host groups in
    `maintenance.create` and `maintenance.update`."""
    return select_by_version(
        version,
        PARAM_MAINTENANCE_TARGETS_RULES,
        MaintenanceTargetParams("hostids", "groupids", False),
    )
