"""Utility functions for Netention MCP."""

from netention_mcp.utils.formatters import (
    _format_note_concise,
    _format_note_markdown,
    _format_notes_concise,
    _format_notes_markdown,
    _format_scheduler_markdown,
)
from netention_mcp.utils.http import _call_http_api, _parse_headers
from netention_mcp.utils.parsers import (
    _apply_note_update,
    _note_from_add_input,
    _note_from_http_tool_input,
    _parse_note,
    _parse_notes,
)

__all__ = [
    "_call_http_api",
    "_parse_headers",
    "_parse_note",
    "_parse_notes",
    "_note_from_add_input",
    "_note_from_http_tool_input",
    "_apply_note_update",
    "_format_note_concise",
    "_format_note_markdown",
    "_format_notes_concise",
    "_format_notes_markdown",
    "_format_scheduler_markdown",
]
