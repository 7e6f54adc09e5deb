"""Formatting utilities for note output."""

import json
from typing import Any

from netention_mcp.models.note import Note


def _short(value: Any, width: int = 50) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text if len(text) <= width else text[: width - 3] + "..."


def _format_note_concise(note: Note) -> str:
    """
    Format a single note in concise format for token efficiency.

    Output: "[id] Title (Task, pending, p:50)"
    """
    meta = [note.type.value, note.status.value]
    if note.priority:
        meta.append(f"p:{note.priority:g}")
    line = f"[{note.id}] {_short(note.title)} ({', '.join(meta)})"
    if note.error:
        line += f" error: {_short(note.error)}"
    return line


def _format_notes_concise(notes: list[Note], title: str | None = None) -> str:
    """
    Format a list of notes in concise format.

    Output:
    2 note(s) | Task
    [a1] First (Task, pending)
    [b2] Second (Task, completed, p:10)
    """
    if not notes:
        return "0 notes"

    header = f"{len(notes)} note(s)"
    if title:
        header = f"{len(notes)} note(s) | {title}"
    return "\n".join([header] + [_format_note_concise(n) for n in notes])


def _format_note_markdown(note: Note) -> str:
    """Format a single note as markdown."""
    lines = [f"### [{note.id}] {note.title}"]

    details = [f"**Type**: {note.type.value}", f"**Status**: {note.status.value}"]
    if note.priority:
        details.append(f"**Priority**: {note.priority:g}")
    if note.created_at:
        details.append(f"**Created**: {note.created_at.isoformat(timespec='seconds')}")
    if note.updated_at:
        details.append(f"**Updated**: {note.updated_at.isoformat(timespec='seconds')}")
    lines.append(" | ".join(details))

    if note.description:
        lines.append(note.description)
    if note.content not in (None, "") and note.content != note.description:
        lines.append(f"**Content**: {_short(note.content, 200)}")
    if note.references:
        lines.append(f"**References**: {', '.join(note.references)}")
    if tool_id := note.config.get("toolId"):
        lines.append(f"**Tool**: {tool_id}")
    if note.result is not None:
        lines.append(f"**Result**: `{_short(note.result, 200)}`")
    if note.error:
        lines.append(f"**Error**: {note.error}")

    return "\n".join(lines)


def _format_notes_markdown(notes: list[Note], title: str = "Notes") -> str:
    """Format a list of notes as markdown."""
    if not notes:
        return f"# {title}\n\nNo notes found."

    lines = [f"# {title}", f"*{len(notes)} note(s)*", ""]
    for note in notes:
        lines.append(_format_note_markdown(note))
        lines.append("")

    return "\n".join(lines)


def _format_scheduler_markdown(status: dict[str, Any]) -> str:
    """Format scheduler status as markdown."""
    state = "running" if status["started"] else "stopped"
    lines = [
        "# Scheduler",
        f"**State**: {state} | **Active**: {status['active']}/{status['concurrency_limit']}"
        f" | **Pending**: {len(status['queue'])}",
    ]
    if status["active_ids"]:
        lines.append("")
        lines.append("## Active")
        lines.extend(f"- {note_id}" for note_id in status["active_ids"])
    if status["queue"]:
        lines.append("")
        lines.append("## Queue")
        lines.extend(
            f"{i}. [{item['id']}] {item['title']} (p:{item['priority']:g})"
            for i, item in enumerate(status["queue"], start=1)
        )
    return "\n".join(lines)
