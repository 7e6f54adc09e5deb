"""Tool execution: resolve a Tool note and dispatch on its descriptor."""

from __future__ import annotations

import inspect
import logging
from typing import Any

import httpx

from netention_mcp.errors import EngineError, EngineValidationError, ToolExecutionError, ToolNotRegisteredError
from netention_mcp.models.note import Note
from netention_mcp.models.tools import ChainTool, FunctionTool, HttpApiTool, SandboxedFileTool, ToolDescriptor
from netention_mcp.registry import ToolRegistry
from netention_mcp.store import NoteStore
from netention_mcp.utils.http import DEFAULT_METHOD, _call_http_api, _parse_headers

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ToolExecutor:
    """
    Runs tools on behalf of the scheduler and external callers.

    Failures always surface as EngineError subclasses; deciding what a
    failure means for a task is left to the caller.
    """

    def __init__(self, store: NoteStore, registry: ToolRegistry, http_client: httpx.AsyncClient):
        self.store = store
        self.registry = registry
        self.http_client = http_client

    async def execute(self, tool_id: str, payload: Any) -> Any:
        """
        Execute the tool ``tool_id`` with ``payload``.

        Raises:
            NoteNotFoundError: if no Tool note has this id
            ToolNotRegisteredError: if nothing is bound and the id is not a built-in
            EngineError: whatever the dispatched implementation failed with
        """
        note = await self.store.require(tool_id)
        descriptor = self.registry.resolve(tool_id)
        if descriptor is None:
            raise ToolNotRegisteredError(tool_id)

        logger.info(f"Executing tool {tool_id} ({descriptor.kind})")
        try:
            return await self._dispatch(note, descriptor, payload)
        except EngineError as e:
            logger.warning(f"Tool {tool_id} failed: {e}")
            raise

    async def _dispatch(self, note: Note, descriptor: ToolDescriptor, payload: Any) -> Any:
        tool_id = note.id or ""
        match descriptor:
            case FunctionTool(func=func):
                try:
                    return await _maybe_await(func(payload))
                except EngineError:
                    raise
                except Exception as e:
                    raise ToolExecutionError(str(e) or type(e).__name__, tool_id=tool_id) from e
            case ChainTool(handle=handle, method=method):
                call = getattr(handle, method, None)
                if not callable(call):
                    raise ToolExecutionError(f"Chain handle has no callable '{method}'", tool_id=tool_id)
                try:
                    return await _maybe_await(call(payload))
                except EngineError:
                    raise
                except Exception as e:
                    raise ToolExecutionError(str(e) or type(e).__name__, tool_id=tool_id) from e
            case HttpApiTool(timeout=timeout):
                return await self._call_api(note, payload, timeout)
            case SandboxedFileTool(sandbox=sandbox):
                return await sandbox.run(payload)
            case _:
                raise ToolExecutionError(f"Unsupported tool kind: {descriptor!r}", tool_id=tool_id)

    async def _call_api(self, note: Note, payload: Any, timeout: float | None) -> Any:
        if not isinstance(note.logic, str) or not note.logic.strip():
            raise EngineValidationError(f"Tool {note.id} has no endpoint URL in its logic field", field="logic")
        method = note.config.get("method") or DEFAULT_METHOD
        if not isinstance(method, str):
            raise EngineValidationError("HTTP method must be a string", field="method")
        headers = _parse_headers(note.config.get("headers"))
        return await _call_http_api(
            self.http_client,
            note.logic.strip(),
            payload,
            method=method,
            headers=headers,
            timeout=timeout,
            tool_id=note.id,
        )
