"""Type definitions for JSON-RPC envelopes and Zabbix API objects.

All API object models ignore extra fields, since different API versions
return different sets of fields. The Zabbix API encodes IDs, integers and
timestamps as strings; timestamps are epoch seconds.
"""

from __future__ import annotations

import logging
from datetime import datetime
from datetime import timedelta
from typing import Annotated
from typing import Any
from typing import Literal
from typing import Optional

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PlainSerializer
from pydantic import computed_field

from zbx.models import ColsRowsType
from zbx.models import RowsType
from zbx.models import TableRenderable
from zbx.pyzabbix.enums import MaintenancePeriodType
from zbx.pyzabbix.enums import MaintenanceStatus
from zbx.pyzabbix.enums import MaintenanceType
from zbx.pyzabbix.enums import TriggerPriority
from zbx.pyzabbix.enums import TriggerStatus

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


def serialize_timestamp(dt: datetime) -> str:
    """Serialize a datetime as epoch seconds in a string."""
    return str(int(dt.timestamp()))


Timestamp = Annotated[
    datetime, PlainSerializer(serialize_timestamp, return_type=str, when_used="json")
]
"""A datetime that is sent to the API as epoch seconds."""


def format_datetime(dt: Optional[datetime]) -> str:
    """Returns a datetime formatted in local time, or an empty string
    if the datetime is unset or the epoch (which the API uses as "never")."""
    if not dt or dt.timestamp() <= 0:
        return ""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


class ZabbixAPIRequest(BaseModel):
    """A JSON-RPC 2.0 request envelope."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Any = None
    id: int
    auth: Optional[str] = None

    def to_json(self) -> bytes:
        """Serialize the request. `auth` is omitted when unset."""
        exclude = {"auth"} if self.auth is None else None
        return self.model_dump_json(exclude=exclude).encode()


class ZabbixAPIErrorInfo(BaseModel):
    """Zabbix API error information."""

    code: int
    message: str
    data: Optional[str] = None


class ZabbixAPIResponse(BaseModel):
    """The raw response from the Zabbix API"""

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[int] = None
    result: Any = None
    """Result of API call, if request succeeded."""
    error: Optional[ZabbixAPIErrorInfo] = None
    """Error info, if request failed."""


class ZabbixAPIBaseModel(TableRenderable):
    """Base model for Zabbix API objects."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    def model_dump_api(self) -> dict[str, Any]:
        """Dump the model as a JSON-serializable dict used in API calls.

        Excludes computed fields (also of nested models) and unset values."""
        data = self.model_dump(
            mode="json",
            exclude=set(self.model_computed_fields),
            exclude_none=True,
        )
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, ZabbixAPIBaseModel):
                data[name] = value.model_dump_api()
            elif isinstance(value, list) and value:
                if all(isinstance(v, ZabbixAPIBaseModel) for v in value):
                    data[name] = [v.model_dump_api() for v in value]
        return data


class HostGroup(ZabbixAPIBaseModel):
    groupid: str
    name: str = ""

    def __cols_rows__(self) -> ColsRowsType:
        return ["ID", "Name"], [[self.groupid, self.name]]


class Host(ZabbixAPIBaseModel):
    hostid: str
    name: str = ""
    maintenance_from: Optional[Timestamp] = None
    maintenance_status: Optional[str] = None
    maintenance_type: Optional[str] = None
    maintenanceid: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name!r} ({self.hostid})"

    @property
    def in_maintenance(self) -> bool:
        return self.maintenance_status == MaintenanceStatus.ON.as_api_str()

    @computed_field
    @property
    def maintenance_status_str(self) -> str:
        return MaintenanceStatus.string_from_value(self.maintenance_status)

    @computed_field
    @property
    def maintenance_from_str(self) -> str:
        return format_datetime(self.maintenance_from)

    def __cols_rows__(self) -> ColsRowsType:
        cols = ["ID", "Name", "Maintenance", "Since", "Maintenance ID"]
        rows: RowsType = [
            [
                self.hostid,
                self.name,
                self.maintenance_status_str,
                self.maintenance_from_str,
                self.maintenanceid or "",
            ]
        ]
        return cols, rows


class Item(ZabbixAPIBaseModel):
    itemid: str
    hostid: Optional[str] = None
    key_: str = ""
    name: str = ""
    type: Optional[int] = None


class TimePeriod(ZabbixAPIBaseModel):
    timeperiodid: Optional[str] = None
    period: int = 3600
    """Duration in seconds."""
    timeperiod_type: int = MaintenancePeriodType.ONETIME.as_api_value()
    start_date: Optional[Timestamp] = None

    @computed_field
    @property
    def timeperiod_type_str(self) -> str:
        return MaintenancePeriodType.string_from_value(self.timeperiod_type)

    @computed_field
    @property
    def period_str(self) -> str:
        return str(timedelta(seconds=self.period))

    @computed_field
    @property
    def start_date_str(self) -> str:
        return format_datetime(self.start_date)

    def __cols_rows__(self) -> ColsRowsType:
        cols = ["Type", "Duration", "Start date"]
        rows: RowsType = [
            [self.timeperiod_type_str, self.period_str, self.start_date_str]
        ]
        return cols, rows


class Maintenance(ZabbixAPIBaseModel):
    maintenanceid: Optional[str] = None
    name: str
    description: str = ""
    maintenance_type: int = MaintenanceType.WITH_DC.as_api_value()
    active_since: Optional[Timestamp] = None
    active_till: Optional[Timestamp] = None
    tags_evaltype: int = 0
    timeperiods: list[TimePeriod] = Field(default_factory=list)
    hosts: list[Host] = Field(default_factory=list)
    groups: list[HostGroup] = Field(
        default_factory=list,
        # Compat for >= 6.2.0
        validation_alias=AliasChoices("groups", "hostgroups"),
    )

    @computed_field
    @property
    def maintenance_type_str(self) -> str:
        return MaintenanceType.string_from_value(self.maintenance_type)

    @computed_field
    @property
    def active_since_str(self) -> str:
        return format_datetime(self.active_since)

    @computed_field
    @property
    def active_till_str(self) -> str:
        return format_datetime(self.active_till)

    @property
    def id_int(self) -> int:
        """Numeric ID used for sorting."""
        try:
            return int(self.maintenanceid or 0)
        except ValueError:
            return 0

    def __cols_rows__(self) -> ColsRowsType:
        cols = [
            "ID",
            "Name",
            "Type",
            "Active since",
            "Active till",
            "Host groups",
            "Hosts",
            "Description",
        ]
        rows: RowsType = [
            [
                self.maintenanceid or "",
                self.name,
                self.maintenance_type_str,
                self.active_since_str,
                self.active_till_str,
                "\n".join(g.name for g in self.groups),
                "\n".join(h.name for h in self.hosts),
                self.description,
            ]
        ]
        return cols, rows


class Trigger(ZabbixAPIBaseModel):
    triggerid: str
    description: Optional[str] = None
    expression: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[int] = None
    value: Optional[int] = None
    groups: list[HostGroup] = Field(
        default_factory=list,
        # Compat for >= 6.2.0
        validation_alias=AliasChoices("groups", "hostgroups"),
    )
    hosts: list[Host] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)

    @computed_field
    @property
    def status_str(self) -> str:
        return TriggerStatus.string_from_value(self.status)

    @computed_field
    @property
    def priority_str(self) -> str:
        return TriggerPriority.string_from_value(self.priority)

    def __cols_rows__(self) -> ColsRowsType:
        cols = ["ID", "Description", "Status", "Priority", "Hosts"]
        rows: RowsType = [
            [
                self.triggerid,
                self.description or "",
                self.status_str,
                self.priority_str,
                "\n".join(h.name for h in self.hosts),
            ]
        ]
        return cols, rows
