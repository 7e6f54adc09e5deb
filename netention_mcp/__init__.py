"""
Netention note engine with an MCP server.

Notes (tasks, tools, templates, ...) form a graph held in a swappable store.
Pending Task notes are run automatically by priority under a concurrency
limit, each through its associated tool: an in-process function, a chain
handle, an HTTP API or the sandboxed file tool. Every mutation raises a change
signal for observers.
"""

# Re-export enums
from netention_mcp.enums import FileAction, NoteStatus, NoteType, ResponseFormat

# Re-export errors
from netention_mcp.errors import (
    ApiError,
    EngineError,
    EngineValidationError,
    ErrorCategory,
    NoteConflictError,
    NoteNotFoundError,
    SandboxViolationError,
    ToolExecutionError,
    ToolNotRegisteredError,
)

# Re-export models
from netention_mcp.models import (
    AddNoteInput,
    ChainTool,
    DeleteNoteInput,
    ExecuteToolInput,
    FunctionTool,
    GetNoteInput,
    HttpApiTool,
    ListNotesInput,
    Note,
    RegisterHttpToolInput,
    RequeueTaskInput,
    SandboxedFileTool,
    SchedulerStatusInput,
    SetConcurrencyInput,
    SystemLogInput,
    ToolDescriptor,
    UpdateNoteInput,
)

# Re-export engine components
from netention_mcp.backends import InMemoryNoteBackend, Neo4jNoteBackend, NoteBackend
from netention_mcp.config import EngineSettings
from netention_mcp.engine import Engine
from netention_mcp.events import ChangeBus
from netention_mcp.executor import ToolExecutor
from netention_mcp.ids import IdService
from netention_mcp.migration import migrate_notes
from netention_mcp.planning import STANDARD_RULES, PlanningRule
from netention_mcp.registry import ToolRegistry
from netention_mcp.sandbox import FileSandbox
from netention_mcp.scheduler import Scheduler
from netention_mcp.store import NoteStore
from netention_mcp.system_log import SystemLog, configure_logging

# Re-export server factory
from netention_mcp.server import create_server, run

# Re-export tools
from netention_mcp.tools import (
    note_add,
    note_delete,
    note_get,
    note_list,
    note_requeue,
    note_update,
    read_system_log,
    scheduler_set_concurrency,
    scheduler_status,
    tool_execute,
    tool_register_http,
)

__all__ = [
    # Enums
    "ResponseFormat",
    "NoteType",
    "NoteStatus",
    "FileAction",
    # Errors
    "ErrorCategory",
    "EngineError",
    "EngineValidationError",
    "NoteNotFoundError",
    "NoteConflictError",
    "ToolNotRegisteredError",
    "SandboxViolationError",
    "ToolExecutionError",
    "ApiError",
    # Models
    "Note",
    "FunctionTool",
    "ChainTool",
    "HttpApiTool",
    "SandboxedFileTool",
    "ToolDescriptor",
    # Input models
    "AddNoteInput",
    "GetNoteInput",
    "ListNotesInput",
    "UpdateNoteInput",
    "DeleteNoteInput",
    "RequeueTaskInput",
    "RegisterHttpToolInput",
    "ExecuteToolInput",
    "SchedulerStatusInput",
    "SetConcurrencyInput",
    "SystemLogInput",
    # Engine components
    "Engine",
    "EngineSettings",
    "NoteStore",
    "NoteBackend",
    "InMemoryNoteBackend",
    "Neo4jNoteBackend",
    "ToolRegistry",
    "ToolExecutor",
    "Scheduler",
    "ChangeBus",
    "IdService",
    "FileSandbox",
    "SystemLog",
    "configure_logging",
    "migrate_notes",
    "PlanningRule",
    "STANDARD_RULES",
    # Server
    "create_server",
    "run",
    # Tools
    "note_add",
    "note_get",
    "note_list",
    "note_update",
    "note_delete",
    "note_requeue",
    "tool_register_http",
    "tool_execute",
    "scheduler_status",
    "scheduler_set_concurrency",
    "read_system_log",
]
