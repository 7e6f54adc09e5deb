"""Note MCP tool implementations."""

import json

from netention_mcp.engine import Engine
from netention_mcp.enums import ResponseFormat
from netention_mcp.errors import EngineError, NoteNotFoundError
from netention_mcp.models.inputs import (
    AddNoteInput,
    DeleteNoteInput,
    GetNoteInput,
    ListNotesInput,
    RequeueTaskInput,
    UpdateNoteInput,
)
from netention_mcp.models.note import Note
from netention_mcp.utils.formatters import (
    _format_note_concise,
    _format_note_markdown,
    _format_notes_concise,
    _format_notes_markdown,
)
from netention_mcp.utils.parsers import _apply_note_update, _note_from_add_input


def _render_note(note: Note, response_format: ResponseFormat) -> str:
    if response_format == ResponseFormat.JSON:
        return json.dumps(note.to_record(), indent=2)
    if response_format == ResponseFormat.CONCISE:
        return _format_note_concise(note)
    return _format_note_markdown(note)


async def note_add(engine: Engine, params: AddNoteInput) -> str:
    """
    Create a note in the graph.

    USE THIS WHEN:
    - Queueing work: add a Task with tool_id (and optionally tool_input)
    - Recording a plan, memory or template note
    - Linking notes together via references

    DO NOT USE WHEN:
    - Changing an existing note → use note_update instead
    - Adding an HTTP tool → use tool_register_http instead

    Tasks start as pending and run automatically when the scheduler has a free
    slot, highest priority first.

    Args:
        params: AddNoteInput with title and optional type, content, priority, references, tool_id

    Returns:
        The created note

    Examples:
        - Echo task: title="Say hi", tool_id="echo-tool", content="hi"
        - Urgent task: title="Fetch report", tool_id="<http tool id>", priority=50
    """
    try:
        note = await engine.add_note(_note_from_add_input(params))
    except EngineError as e:
        return f"Error: {e}"

    # The scheduler may already have picked the task up.
    note = await engine.get_note(note.id or "") or note
    return f"Note created successfully.\n{_render_note(note, params.response_format)}"


async def note_get(engine: Engine, params: GetNoteInput) -> str:
    """
    Get a single note by id, including its status, result and error.

    Args:
        params: GetNoteInput with note_id and response_format

    Returns:
        The note, or an error message when it does not exist
    """
    note = await engine.get_note(params.note_id)
    if note is None:
        return f"Error: Note '{params.note_id}' not found."
    return _render_note(note, params.response_format)


async def note_list(engine: Engine, params: ListNotesInput) -> str:
    """
    List notes in creation order, optionally filtered by type and status.

    USE THIS WHEN:
    - Looking for notes you don't know the ids of
    - Checking which tasks are pending, running, done or failed

    DO NOT USE WHEN:
    - You have a specific id → use note_get instead
    - You want the admission order → use scheduler_status instead

    Args:
        params: ListNotesInput with optional type, status, limit and response_format

    Returns:
        Formatted list of notes
    """
    notes = await engine.get_all_notes()
    if params.type is not None:
        notes = [n for n in notes if n.type == params.type]
    if params.status is not None:
        notes = [n for n in notes if n.status == params.status]
    total_count = len(notes)

    if params.limit and len(notes) > params.limit:
        notes = notes[: params.limit]

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(
            {"total": total_count, "count": len(notes), "notes": [n.to_record() for n in notes]},
            indent=2,
        )

    filters = [f.value for f in (params.type, params.status) if f is not None]
    if params.response_format == ResponseFormat.CONCISE:
        return _format_notes_concise(notes, " ".join(filters) or None)

    title = "Notes"
    if filters:
        title = f"Notes ({', '.join(filters)})"
    return _format_notes_markdown(notes, title)


async def note_update(engine: Engine, params: UpdateNoteInput) -> str:
    """
    Change fields of an existing note. Omitted fields stay as they are.

    Setting status to 'pending' on a finished task puts it back in the queue;
    note_requeue does the same with a check that the note is a finished task.
    The status of a running task cannot be changed here.

    Args:
        params: UpdateNoteInput with note_id and the fields to change

    Returns:
        The updated note in markdown
    """
    try:
        updated = await engine.edit_note(params.note_id, lambda note: _apply_note_update(note, params))
    except NoteNotFoundError:
        return f"Error: Note '{params.note_id}' not found."
    except EngineError as e:
        return f"Error: {e}"
    except ValueError as e:
        return f"Error: Invalid update - {e}"
    return f"Note updated successfully.\n{_format_note_markdown(updated)}"


async def note_delete(engine: Engine, params: DeleteNoteInput) -> str:
    """
    Delete a note. References held by other notes are left in place.

    Args:
        params: DeleteNoteInput with note_id

    Returns:
        Confirmation message
    """
    if await engine.delete_note(params.note_id):
        return f"Note '{params.note_id}' deleted."
    return f"Note '{params.note_id}' did not exist; nothing deleted."


async def note_requeue(engine: Engine, params: RequeueTaskInput) -> str:
    """
    Put a completed or failed task back in the queue.

    There are no automatic retries: a failed task stays failed until re-queued.

    Args:
        params: RequeueTaskInput with note_id

    Returns:
        Confirmation message
    """
    try:
        note = await engine.requeue_task(params.note_id)
    except EngineError as e:
        return f"Error: {e}"
    return f"Task re-queued.\n{_format_note_concise(note)}"
