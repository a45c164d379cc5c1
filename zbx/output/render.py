from __future__ import annotations

from typing import TYPE_CHECKING

from zbx.output.console import console
from zbx.output.console import error
from zbx.output.console import success
from zbx.state import get_state

if TYPE_CHECKING:
    from pydantic import BaseModel

    from zbx.models import BaseResult
    from zbx.models import TableRenderable


def wrap_result(result: BaseModel) -> BaseResult:
    """Wraps a BaseModel instance in a Result object so that it receives
    `return_code`, `errors`, and `message` fields, with the original object
    is available as `result`.

    Does nothing if the function argument is already a BaseResult instance.
    """
    from zbx.models import BaseResult
    from zbx.models import Result

    if isinstance(result, BaseResult):
        return result
    return Result(result=result)


def render_result(result: TableRenderable) -> None:
    """Render the result of a command to stdout in the configured format."""
    from zbx.config.constants import OutputFormat

    fmt = get_state().config.app.output.format
    if fmt == OutputFormat.JSON:
        render_json(result)
    elif fmt == OutputFormat.TABLE:
        render_table(result)
    else:
        raise ValueError(f"Unknown output format {fmt!r}.")


def _print_message(result: TableRenderable) -> None:
    from zbx.models import BaseResult
    from zbx.models import ReturnCode

    if isinstance(result, BaseResult) and result.message:
        if result.return_code == ReturnCode.ERROR:
            error(result.message)
        else:
            success(result.message)


def render_table(result: TableRenderable) -> None:
    """Render the result of a command as a table.

    A message is printed instead of the wrapper when the result has one,
    followed by a table of the wrapped object if there is one.
    """
    from zbx.models import AggregateResult
    from zbx.models import BaseResult
    from zbx.models import Result

    _print_message(result)
    if isinstance(result, Result):
        inner = result.result
        if inner is None:
            return
        if isinstance(inner, list):
            result = AggregateResult(result=inner)
        else:
            result = inner
    elif isinstance(result, BaseResult) and result.message:
        return

    tbl = result.as_table()
    if not tbl.rows:
        console.print("No results found.")
    else:
        console.print(tbl)


def render_json(result: TableRenderable) -> None:
    """Render the result of a command as JSON."""
    wrapped = wrap_result(result)
    o_json = wrapped.model_dump_json(indent=2, by_alias=True)
    console.print_json(o_json, indent=2, sort_keys=False)
    _print_message(wrapped)
