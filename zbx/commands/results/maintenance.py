from __future__ import annotations

from pydantic import Field

from zbx.models import ColsRowsType
from zbx.models import RowsType
from zbx.models import TableRenderable
from zbx.pyzabbix.types import Host
from zbx.pyzabbix.types import Maintenance


class MaintenanceURLResult(TableRenderable):
    """Result type for `mainte create` and `mainte update`."""

    maintenance_id: str = Field(title="Maintenance ID")
    url: str

    def __cols_rows__(self) -> ColsRowsType:
        return ["Maintenance ID", "URL"], [[self.maintenance_id, self.url]]


class DeleteMaintenanceResult(TableRenderable):
    """Result type for `mainte delete`."""

    target_ids: list[str] = Field(default_factory=list)
    deleted_ids: list[str] = Field(default_factory=list)


class MaintenanceStatusResult(TableRenderable):
    """Result type for `mainte status`."""

    maintenance: Maintenance
    hosts: list[Host] = Field(default_factory=list)

    @property
    def all_in_maintenance(self) -> bool:
        return all(h.in_maintenance for h in self.hosts)

    def __cols_rows__(self) -> ColsRowsType:
        from zbx.models import AggregateResult

        cols = ["Maintenance", "Hosts"]
        rows: RowsType = [
            [
                self.maintenance.as_table(),
                AggregateResult(result=self.hosts).as_table() if self.hosts else "",
            ]
        ]
        return cols, rows
