"""Note model shared by the store, the scheduler and the MCP surface."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from netention_mcp.enums import NoteStatus, NoteType


class Note(BaseModel):
    """A node of the note graph.

    Attributes are snake_case; the wire and storage shape is the flat camelCase
    record (``model_dump(by_alias=True)``). Both spellings are accepted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore",
    )

    id: str | None = None
    type: NoteType = NoteType.TASK
    title: str = "Untitled Note"
    content: Any = None
    description: str | None = None
    status: NoteStatus = NoteStatus.PENDING
    priority: float = Field(default=0, allow_inf_nan=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    references: list[str] = Field(default_factory=list)
    requires_web_search: bool = False
    input_schema: Any = None
    output_schema: Any = None
    config: dict[str, Any] = Field(default_factory=dict)
    logic: Any = None

    # Outcome of the last execution attempt
    result: Any = None
    error: str | None = None

    @property
    def is_task(self) -> bool:
        return self.type == NoteType.TASK

    @property
    def is_tool(self) -> bool:
        return self.type == NoteType.TOOL

    def to_record(self) -> dict[str, Any]:
        """Flat camelCase record with JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)
