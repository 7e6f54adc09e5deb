"""Tools every engine starts with."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any

from netention_mcp.enums import NoteStatus, NoteType
from netention_mcp.errors import EngineValidationError, ToolExecutionError
from netention_mcp.models.note import Note
from netention_mcp.models.tools import FunctionTool, SandboxedFileTool, ToolDescriptor
from netention_mcp.sandbox import FileSandbox

logger = logging.getLogger(__name__)

ECHO_TOOL_ID = "echo-tool"
FILE_TOOL_ID = "file-operations-tool"
SUMMARIZATION_TOOL_ID = "summarization-tool"
TASK_LOGIC_TOOL_ID = "generate-task-logic-tool"
WEB_SEARCH_TOOL_ID = "web-search-tool"

SUMMARIZE_PROMPT = "Summarize the following text: {text}"
TASK_LOGIC_PROMPT = (
    "Generate a LangChain Runnable steps array (JSON format) for the following task: {description}. "
    'Include a step to use the "web-search-tool" if appropriate.'
)


@dataclass(frozen=True)
class BuiltinTool:
    note: Note
    descriptor: ToolDescriptor


def _schema(properties: dict[str, Any], required: list[str]) -> str:
    return json.dumps({"type": "object", "properties": properties, "required": required})


def _tool_note(tool_id: str, title: str, description: str, input_schema: str, output_schema: str) -> Note:
    return Note(
        id=tool_id,
        type=NoteType.TOOL,
        title=title,
        content=description,
        description=description,
        status=NoteStatus.ACTIVE,
        priority=50,
        input_schema=input_schema,
        output_schema=output_schema,
    )


async def echo(payload: Any) -> dict[str, Any]:
    """Return ``{"output": payload["input"]}``."""
    if not isinstance(payload, dict) or "input" not in payload:
        raise EngineValidationError("Echo tool expects an object with an 'input' field", field="input")
    return {"output": payload["input"]}


async def _invoke(handle: Any, prompt: str, tool_id: str) -> Any:
    """Call an opaque model or search handle through ``ainvoke`` or ``invoke``."""
    call = getattr(handle, "ainvoke", None) or getattr(handle, "invoke", None)
    if not callable(call):
        raise ToolExecutionError("Handle has no invoke method", tool_id=tool_id)
    reply = call(prompt)
    if inspect.isawaitable(reply):
        reply = await reply
    # Chat-model replies carry their text in ``content``.
    return getattr(reply, "content", reply)


def _required_text(payload: Any, field: str, tool: str) -> str:
    text = payload.get(field) if isinstance(payload, dict) else None
    if not isinstance(text, str) or not text.strip():
        raise EngineValidationError(f"{tool} expects a non-empty '{field}' field", field=field)
    return text


def make_summarizer(llm: Any):
    """Build the summarization function over an opaque LLM handle.

    The handle needs an ``ainvoke`` or ``invoke`` method taking a prompt string.
    """

    async def summarize(payload: Any) -> dict[str, Any]:
        text = _required_text(payload, "text", "Summarization tool")
        return {"summary": await _invoke(llm, SUMMARIZE_PROMPT.format(text=text), SUMMARIZATION_TOOL_ID)}

    return summarize


def make_task_logic_generator(llm: Any):
    """Build the function that asks the LLM for a step list implementing a task description."""

    async def generate(payload: Any) -> dict[str, Any]:
        description = _required_text(payload, "description", "Generate task logic tool")
        logger.info(f"Generating task logic for: {description}")
        logic = await _invoke(llm, TASK_LOGIC_PROMPT.format(description=description), TASK_LOGIC_TOOL_ID)
        return {"logic": logic}

    return generate


def make_web_searcher(search: Any):
    """Build the web search function over an opaque search handle.

    Accepts ``{"query": ...}``; a task's default ``{"input": ...}`` is read as
    the query too.
    """

    async def web_search(payload: Any) -> dict[str, Any]:
        if isinstance(payload, dict) and "query" not in payload and "input" in payload:
            payload = {"query": payload["input"]}
        query = _required_text(payload, "query", "Web search tool")
        logger.info(f"Web search: {query}")
        return {"results": await _invoke(search, query, WEB_SEARCH_TOOL_ID)}

    return web_search


def builtin_tools(sandbox: FileSandbox, llm: Any = None, search: Any = None) -> list[BuiltinTool]:
    """Tool notes and their bindings for a fresh engine.

    LLM-backed tools need ``llm``; the web search tool needs ``search``.
    """
    tools = [
        BuiltinTool(
            note=_tool_note(
                ECHO_TOOL_ID,
                "Echo Tool",
                "Echoes the input text.",
                _schema({"input": {"type": "string", "description": "Text to echo"}}, ["input"]),
                _schema({"output": {"type": "string", "description": "Echoed text"}}, ["output"]),
            ),
            descriptor=FunctionTool(func=echo),
        ),
        BuiltinTool(
            note=_tool_note(
                FILE_TOOL_ID,
                "File Operations Tool",
                "Reads, writes and deletes files inside the safe directory.",
                _schema(
                    {
                        "action": {
                            "type": "string",
                            "enum": ["read", "write", "createDirectory", "deleteFile"],
                        },
                        "filename": {"type": "string", "description": "Path relative to the safe directory"},
                        "content": {"type": "string", "description": "Content to write"},
                    },
                    ["action", "filename"],
                ),
                _schema({"result": {"type": "string"}}, ["result"]),
            ),
            descriptor=SandboxedFileTool(sandbox=sandbox),
        ),
    ]
    if llm is not None:
        tools.append(
            BuiltinTool(
                note=_tool_note(
                    SUMMARIZATION_TOOL_ID,
                    "Summarization Tool",
                    "Summarizes text using the LLM.",
                    _schema({"text": {"type": "string", "description": "Text to summarize"}}, ["text"]),
                    _schema({"summary": {"type": "string", "description": "Summary of the text"}}, ["summary"]),
                ),
                descriptor=FunctionTool(func=make_summarizer(llm)),
            )
        )
        tools.append(
            BuiltinTool(
                note=_tool_note(
                    TASK_LOGIC_TOOL_ID,
                    "Generate Task Logic Tool",
                    "Generates task logic based on a description.",
                    _schema(
                        {"description": {"type": "string", "description": "The task description"}}, ["description"]
                    ),
                    _schema({"logic": {"type": "string", "description": "The generated task logic"}}, ["logic"]),
                ),
                descriptor=FunctionTool(func=make_task_logic_generator(llm)),
            )
        )
    else:
        logger.info("No LLM configured, summarization and task logic tools not registered")

    if search is not None:
        tools.append(
            BuiltinTool(
                note=_tool_note(
                    WEB_SEARCH_TOOL_ID,
                    "Web Search Tool",
                    "Searches the web for a query.",
                    _schema({"query": {"type": "string", "description": "Search query"}}, ["query"]),
                    _schema({"results": {"type": "array", "description": "Search results"}}, []),
                ),
                descriptor=FunctionTool(func=make_web_searcher(search)),
            )
        )
    return tools
