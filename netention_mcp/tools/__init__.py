"""MCP tool implementations for Netention."""

from netention_mcp.tools.execution import (
    read_system_log,
    scheduler_set_concurrency,
    scheduler_status,
    tool_execute,
    tool_register_http,
)
from netention_mcp.tools.notes import (
    note_add,
    note_delete,
    note_get,
    note_list,
    note_requeue,
    note_update,
)

__all__ = [
    # Note tools
    "note_add",
    "note_get",
    "note_list",
    "note_update",
    "note_delete",
    "note_requeue",
    # Execution tools
    "tool_register_http",
    "tool_execute",
    "scheduler_status",
    "scheduler_set_concurrency",
    "read_system_log",
]
