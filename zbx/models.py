from __future__ import annotations

from collections.abc import MutableSequence
from typing import TYPE_CHECKING
from typing import Any
from typing import Generic
from typing import Optional
from typing import Union
from typing import cast

import rich.box
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from rich.table import Table
from rich.text import Text
from strenum import StrEnum
from typing_extensions import TypeVar

if TYPE_CHECKING:
    from rich.console import RenderableType


class ReturnCode(StrEnum):
    DONE = "Done"
    ERROR = "Error"


ColsType = list[str]
"""A list of column headers."""

RowContent = MutableSequence["RenderableType"]
"""A list of renderables representing the content of a row."""

RowsType = MutableSequence[RowContent]
"""A list of rows, where each row is a list of renderables."""

ColsRowsType = tuple[ColsType, RowsType]
"""A tuple containing a list of columns and a list of rows."""


def fmt_field_name(field_name: str) -> str:
    """Formats a field name for display in a table."""
    return field_name.capitalize().replace("_", " ")


def get_table(
    cols: ColsType,
    rows: RowsType,
    title: Optional[str] = None,
    show_lines: bool = True,
    box: rich.box.Box = rich.box.ROUNDED,
) -> Table:
    """Returns a Rich table given a list of columns and rows."""
    table = Table(title=title, box=box, show_lines=show_lines)
    for col in cols:
        table.add_column(col, overflow="fold")
    for row in rows:
        # Empty subtables are not rendered
        row = [cell if not isinstance(cell, Table) or cell.rows else "" for cell in row]
        table.add_row(*row)
    return table


class TableRenderable(BaseModel):
    """Base model that can be rendered as a table."""

    model_config = ConfigDict(populate_by_name=True)

    __title__: Optional[str] = None
    __show_lines__: bool = True
    __box__: rich.box.Box = rich.box.ROUNDED

    def __cols__(self) -> ColsType:
        """Column headers. Defaults to the capitalized field names."""
        return [fmt_field_name(name) for name in type(self).model_fields]

    def __rows__(self) -> RowsType:
        """Row contents. Lists are rendered as newline delimited strings,
        nested renderables as subtables."""
        row: RowContent = []
        for name in type(self).model_fields:
            value = getattr(self, name, "")
            if isinstance(value, TableRenderable):
                row.append(value.as_table())
            elif isinstance(value, list):
                value = cast(list[Any], value)
                if value and all(isinstance(v, TableRenderable) for v in value):
                    row.append(AggregateResult(result=value).as_table())
                else:
                    row.append("\n".join(str(v) for v in value))
            elif value is None:
                row.append("")
            else:
                row.append(str(value))
        return [row]

    def __cols_rows__(self) -> ColsRowsType:
        return self.__cols__(), self.__rows__()

    def as_table(self) -> Table:
        """Renders a Rich table given the rows and cols generated for the object."""
        cols, rows = self.__cols_rows__()
        # API values such as item keys can look like markup (`cpu.load[all]`)
        rows = [[Text(c) if isinstance(c, str) else c for c in row] for row in rows]
        return get_table(
            cols=cols,
            rows=rows,
            title=self.__title__,
            show_lines=self.__show_lines__,
            box=self.__box__,
        )


DataT = TypeVar("DataT", default=TableRenderable)


class BaseResult(TableRenderable):
    message: str = Field(default="")
    """Field that signals that the result should be printed as a message, not a table."""
    errors: list[str] = Field(default_factory=list)
    return_code: ReturnCode = ReturnCode.DONE

    model_config = ConfigDict(
        arbitrary_types_allowed=True, validate_assignment=True, extra="allow"
    )


class Result(BaseResult, Generic[DataT]):
    """A result wrapping a single data object."""

    result: Optional[Union[DataT, list[DataT]]] = None

    # https://docs.pydantic.dev/latest/concepts/serialization/#serialize_as_any-runtime-setting
    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        return super().model_dump(serialize_as_any=True, **kwargs)

    def model_dump_json(self, **kwargs: Any) -> str:
        return super().model_dump_json(serialize_as_any=True, **kwargs)


TableRenderableT = TypeVar("TableRenderableT", bound=TableRenderable)


class AggregateResult(BaseResult, Generic[TableRenderableT]):
    """Result wrapping multiple table renderables, rendered as one table."""

    result: list[TableRenderableT] = Field(default_factory=list)

    def __cols_rows__(self) -> ColsRowsType:
        cols: ColsType = []
        rows: RowsType = []

        for result in self.result:
            c, r = result.__cols_rows__()
            if not cols:
                cols = c
            rows.extend(r)
        return cols, rows
