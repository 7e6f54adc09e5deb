"""Pydantic models for Netention MCP."""

from netention_mcp.models.inputs import (
    AddNoteInput,
    DeleteNoteInput,
    ExecuteToolInput,
    GetNoteInput,
    ListNotesInput,
    RegisterHttpToolInput,
    RequeueTaskInput,
    SchedulerStatusInput,
    SetConcurrencyInput,
    SystemLogInput,
    UpdateNoteInput,
)
from netention_mcp.models.note import Note
from netention_mcp.models.tools import ChainTool, FunctionTool, HttpApiTool, SandboxedFileTool, ToolDescriptor

__all__ = [
    # Note model
    "Note",
    # Tool descriptors
    "FunctionTool",
    "ChainTool",
    "HttpApiTool",
    "SandboxedFileTool",
    "ToolDescriptor",
    # Note input models
    "AddNoteInput",
    "GetNoteInput",
    "ListNotesInput",
    "UpdateNoteInput",
    "DeleteNoteInput",
    "RequeueTaskInput",
    # Tool & scheduler input models
    "RegisterHttpToolInput",
    "ExecuteToolInput",
    "SchedulerStatusInput",
    "SetConcurrencyInput",
    "SystemLogInput",
]
