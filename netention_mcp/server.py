"""FastMCP server initialization for Netention MCP."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from netention_mcp.config import EngineSettings
from netention_mcp.engine import Engine
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
from netention_mcp.system_log import configure_logging
from netention_mcp.tools import execution, notes

logger = logging.getLogger(__name__)


def _annotations(title: str, read_only: bool, destructive: bool = False, idempotent: bool = False) -> ToolAnnotations:
    return ToolAnnotations(
        title=title,
        readOnlyHint=read_only,
        destructiveHint=destructive,
        idempotentHint=idempotent,
        openWorldHint=False,
    )


def create_server(engine: Engine | None = None, settings: EngineSettings | None = None) -> FastMCP:
    """
    Build the MCP server around an engine.

    With no ``engine`` one is created from ``settings`` when the server starts
    and closed when it stops; ``auto_run`` then starts its scheduler. A given
    engine is used as is and left open.
    """
    settings = settings or (engine.settings if engine is not None else EngineSettings())
    current = engine

    def _engine() -> Engine:
        if current is None:
            raise RuntimeError("Engine is not running")
        return current

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        nonlocal current
        owned = current is None
        if owned:
            current = await Engine.create(settings)
            if settings.auto_run:
                await current.start_scheduler()
        try:
            yield
        finally:
            if owned and current is not None:
                await current.close()
                current = None

    mcp = FastMCP("netention_mcp", lifespan=lifespan)

    @mcp.tool(
        name="note_add",
        description=notes.note_add.__doc__,
        annotations=_annotations("Add Note", read_only=False),
    )
    async def note_add(params: AddNoteInput) -> str:
        return await notes.note_add(_engine(), params)

    @mcp.tool(
        name="note_get",
        description=notes.note_get.__doc__,
        annotations=_annotations("Get Note", read_only=True, idempotent=True),
    )
    async def note_get(params: GetNoteInput) -> str:
        return await notes.note_get(_engine(), params)

    @mcp.tool(
        name="note_list",
        description=notes.note_list.__doc__,
        annotations=_annotations("List Notes", read_only=True, idempotent=True),
    )
    async def note_list(params: ListNotesInput) -> str:
        return await notes.note_list(_engine(), params)

    @mcp.tool(
        name="note_update",
        description=notes.note_update.__doc__,
        annotations=_annotations("Update Note", read_only=False, idempotent=True),
    )
    async def note_update(params: UpdateNoteInput) -> str:
        return await notes.note_update(_engine(), params)

    @mcp.tool(
        name="note_delete",
        description=notes.note_delete.__doc__,
        annotations=_annotations("Delete Note", read_only=False, destructive=True, idempotent=True),
    )
    async def note_delete(params: DeleteNoteInput) -> str:
        return await notes.note_delete(_engine(), params)

    @mcp.tool(
        name="note_requeue",
        description=notes.note_requeue.__doc__,
        annotations=_annotations("Re-queue Task", read_only=False),
    )
    async def note_requeue(params: RequeueTaskInput) -> str:
        return await notes.note_requeue(_engine(), params)

    @mcp.tool(
        name="tool_register_http",
        description=execution.tool_register_http.__doc__,
        annotations=_annotations("Register HTTP Tool", read_only=False, idempotent=True),
    )
    async def tool_register_http(params: RegisterHttpToolInput) -> str:
        return await execution.tool_register_http(_engine(), params)

    @mcp.tool(
        name="tool_execute",
        description=execution.tool_execute.__doc__,
        annotations=ToolAnnotations(
            title="Execute Tool",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=True,
        ),
    )
    async def tool_execute(params: ExecuteToolInput) -> str:
        return await execution.tool_execute(_engine(), params)

    @mcp.tool(
        name="scheduler_status",
        description=execution.scheduler_status.__doc__,
        annotations=_annotations("Scheduler Status", read_only=True, idempotent=True),
    )
    async def scheduler_status(params: SchedulerStatusInput) -> str:
        return await execution.scheduler_status(_engine(), params)

    @mcp.tool(
        name="scheduler_set_concurrency",
        description=execution.scheduler_set_concurrency.__doc__,
        annotations=_annotations("Set Concurrency Limit", read_only=False, idempotent=True),
    )
    async def scheduler_set_concurrency(params: SetConcurrencyInput) -> str:
        return await execution.scheduler_set_concurrency(_engine(), params)

    @mcp.tool(
        name="system_log",
        description=execution.read_system_log.__doc__,
        annotations=_annotations("System Log", read_only=True, idempotent=True),
    )
    async def system_log(params: SystemLogInput) -> str:
        return await execution.read_system_log(_engine(), params)

    return mcp


def run() -> None:
    """Run the MCP server."""
    settings = EngineSettings()
    configure_logging(settings.log_level)
    logger.info("Starting netention_mcp server")
    create_server(settings=settings).run()


if __name__ == "__main__":
    run()
