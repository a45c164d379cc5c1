from __future__ import annotations

from pydantic import Field

from zbx.models import TableRenderable


class TriggerStatusResult(TableRenderable):
    """Result type for `trigger enable` and `trigger disable`."""

    status: str
    trigger_ids: list[str] = Field(default_factory=list)
    updated_ids: list[str] = Field(default_factory=list)
