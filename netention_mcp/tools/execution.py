"""Tool execution, scheduler and log MCP tool implementations."""

import json
from typing import Any

from netention_mcp.engine import Engine
from netention_mcp.enums import ResponseFormat
from netention_mcp.errors import EngineError
from netention_mcp.models.inputs import (
    ExecuteToolInput,
    RegisterHttpToolInput,
    SchedulerStatusInput,
    SetConcurrencyInput,
    SystemLogInput,
)
from netention_mcp.models.tools import HttpApiTool
from netention_mcp.scheduler import queue_order
from netention_mcp.utils.formatters import _format_scheduler_markdown
from netention_mcp.utils.parsers import _note_from_http_tool_input


async def tool_register_http(engine: Engine, params: RegisterHttpToolInput) -> str:
    """
    Register a Tool note that calls an HTTP API.

    The tool input is sent as the JSON body (not for GET/HEAD) and the JSON
    response becomes the tool result. Registering an existing tool id replaces it.

    Args:
        params: RegisterHttpToolInput with title, url and optional method, headers, timeout

    Returns:
        Confirmation with the tool id to use in note_add(tool_id=...)
    """
    try:
        note = await engine.register_tool_definition(
            _note_from_http_tool_input(params),
            HttpApiTool(timeout=params.timeout),
        )
    except EngineError as e:
        return f"Error: {e}"
    return f"Tool registered successfully.\nID: {note.id}\n{params.method} {params.url}"


async def tool_execute(engine: Engine, params: ExecuteToolInput) -> str:
    """
    Run a tool immediately, outside the task queue.

    USE THIS WHEN:
    - Testing a tool before queueing tasks against it
    - Needing a tool result right away

    DO NOT USE WHEN:
    - The work should respect priorities and the concurrency limit → add a Task with note_add

    Built-in tools: echo-tool ({"input": ...}), file-operations-tool
    ({"action": "read|write|createDirectory|deleteFile", "filename": ..., "content": ...}),
    summarization-tool ({"text": ...}, only when an LLM is configured).

    Args:
        params: ExecuteToolInput with tool_id and tool_input

    Returns:
        The tool result as JSON
    """
    try:
        result = await engine.execute_tool(params.tool_id, params.tool_input)
    except EngineError as e:
        return f"Error: {e}"
    return json.dumps(result, indent=2, default=str)


async def _scheduler_status(engine: Engine) -> dict[str, Any]:
    scheduler = engine.scheduler
    queue = queue_order(await engine.get_all_notes())
    return {
        "started": scheduler.started,
        "concurrency_limit": scheduler.concurrency_limit,
        "active": scheduler.active_count,
        "active_ids": scheduler.active_ids,
        "queue": [{"id": n.id, "title": n.title, "priority": n.priority} for n in queue],
    }


async def scheduler_status(engine: Engine, params: SchedulerStatusInput) -> str:
    """
    Show whether the scheduler runs, how many tasks are active and the pending queue in admission order.

    Args:
        params: SchedulerStatusInput with response_format

    Returns:
        Scheduler state and queue
    """
    status = await _scheduler_status(engine)
    if params.response_format == ResponseFormat.JSON:
        return json.dumps(status, indent=2)
    if params.response_format == ResponseFormat.CONCISE:
        state = "running" if status["started"] else "stopped"
        return f"{state} | active {status['active']}/{status['concurrency_limit']} | pending {len(status['queue'])}"
    return _format_scheduler_markdown(status)


async def scheduler_set_concurrency(engine: Engine, params: SetConcurrencyInput) -> str:
    """
    Change how many tasks may be active at once. Running tasks are never interrupted.

    Args:
        params: SetConcurrencyInput with limit

    Returns:
        Confirmation listing any tasks admitted as a result
    """
    try:
        promoted = await engine.set_concurrency_limit(params.limit)
    except EngineError as e:
        return f"Error: {e}"
    message = f"Concurrency limit set to {params.limit}."
    if promoted:
        message += f"\nAdmitted: {', '.join(promoted)}"
    return message


async def read_system_log(engine: Engine, params: SystemLogInput) -> str:
    """
    Read the most recent engine log lines, including task failures.

    Args:
        params: SystemLogInput with limit

    Returns:
        Log lines, oldest first
    """
    lines = engine.system_log.history(params.limit)
    if not lines:
        return "Log is empty."
    return "\n".join(lines)
