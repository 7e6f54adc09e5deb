"""Input models for Netention MCP tools."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from netention_mcp.enums import NoteStatus, NoteType, ResponseFormat

# ============================================================================
# Note Input Models
# ============================================================================


class AddNoteInput(BaseModel):
    """Input model for adding a note."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., description="Note title (required)", min_length=1, max_length=500)
    type: NoteType = Field(default=NoteType.TASK, description="Note type: Task, Tool, Template, ...")
    note_id: str | None = Field(default=None, description="Explicit id; generated when omitted")
    content: str | None = Field(default=None, description="Free text; the default tool input for tasks")
    description: str | None = Field(default=None, description="Short description")
    priority: float = Field(default=0, description="Higher runs first", allow_inf_nan=False)
    references: list[str] | None = Field(default=None, description="Ids of notes this note links to")
    tool_id: str | None = Field(default=None, description="Tool this task runs (stored as config.toolId)")
    tool_input: dict[str, Any] | None = Field(
        default=None, description="Input passed to the tool (stored as config.input); defaults to {input: content}"
    )
    config: dict[str, Any] | None = Field(default=None, description="Extra tool-kind specific configuration")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'concise', 'markdown' or 'json'",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class GetNoteInput(BaseModel):
    """Input model for getting a single note."""

    model_config = ConfigDict(str_strip_whitespace=True)

    note_id: str = Field(..., description="Note id to retrieve", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'concise', 'markdown' or 'json'",
    )


class ListNotesInput(BaseModel):
    """Input model for listing notes."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: NoteType | None = Field(default=None, description="Only notes of this type")
    status: NoteStatus | None = Field(default=None, description="Only notes with this status")
    limit: int | None = Field(default=50, description="Maximum number of notes to return", ge=1, le=500)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'concise', 'markdown' or 'json'",
    )


class UpdateNoteInput(BaseModel):
    """Input model for updating a note. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    note_id: str = Field(..., description="Note id to update", min_length=1)
    title: str | None = Field(default=None, description="New title", min_length=1, max_length=500)
    content: str | None = Field(default=None, description="New content")
    description: str | None = Field(default=None, description="New description")
    priority: float | None = Field(default=None, description="New priority", allow_inf_nan=False)
    status: NoteStatus | None = Field(default=None, description="New status; 'pending' re-queues a task")
    references: list[str] | None = Field(default=None, description="Replacement reference list")
    config: dict[str, Any] | None = Field(default=None, description="Keys merged into the note's config")


class DeleteNoteInput(BaseModel):
    """Input model for deleting a note."""

    model_config = ConfigDict(str_strip_whitespace=True)

    note_id: str = Field(..., description="Note id to delete", min_length=1)


class RequeueTaskInput(BaseModel):
    """Input model for re-queueing a finished task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    note_id: str = Field(..., description="Id of a completed or failed task", min_length=1)


# ============================================================================
# Tool & Scheduler Input Models
# ============================================================================


class RegisterHttpToolInput(BaseModel):
    """Input model for registering an HTTP API tool."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., description="Tool title", min_length=1, max_length=500)
    url: str = Field(..., description="Endpoint URL the tool calls", min_length=1)
    tool_id: str | None = Field(default=None, description="Explicit tool id; generated when omitted")
    method: str = Field(default="POST", description="HTTP method")
    headers: dict[str, str] | None = Field(default=None, description="Request headers")
    description: str | None = Field(default=None, description="What the tool does")
    timeout: float | None = Field(default=None, description="Request timeout in seconds", gt=0)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        method = v.upper()
        if method not in {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"}:
            raise ValueError(f"Unsupported HTTP method: {v}")
        return method


class ExecuteToolInput(BaseModel):
    """Input model for executing a tool directly."""

    model_config = ConfigDict(str_strip_whitespace=True)

    tool_id: str = Field(..., description="Id of the Tool note to execute", min_length=1)
    tool_input: dict[str, Any] = Field(default_factory=dict, description="Input passed to the tool")


class SchedulerStatusInput(BaseModel):
    """Input model for scheduler status."""

    model_config = ConfigDict(str_strip_whitespace=True)

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'concise', 'markdown' or 'json'",
    )


class SetConcurrencyInput(BaseModel):
    """Input model for changing the concurrency limit."""

    limit: int = Field(..., description="Maximum number of simultaneously active tasks", ge=1, le=100)


class SystemLogInput(BaseModel):
    """Input model for reading the system log."""

    limit: int = Field(default=50, description="Number of most recent lines to return", ge=1, le=1000)
