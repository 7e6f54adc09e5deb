"""Parser helpers turning tool input into notes."""

from typing import Any

from netention_mcp.enums import NoteStatus, NoteType
from netention_mcp.models.inputs import AddNoteInput, RegisterHttpToolInput, UpdateNoteInput
from netention_mcp.models.note import Note


def _parse_note(note_dict: dict[str, Any]) -> Note:
    """
    Parse a note record (camelCase or snake_case keys) into a Note.

    Args:
        note_dict: Flat note record

    Returns:
        Note instance with validated data
    """
    return Note.model_validate(note_dict)


def _parse_notes(notes: list[dict[str, Any]]) -> list[Note]:
    return [Note.model_validate(n) for n in notes]


def _note_from_add_input(params: AddNoteInput) -> Note:
    """
    Build the note described by an add request.

    ``tool_id`` and ``tool_input`` land in ``config`` under ``toolId`` and
    ``input``, where the scheduler looks for them.
    """
    config = dict(params.config or {})
    if params.tool_id:
        config["toolId"] = params.tool_id
    if params.tool_input is not None:
        config["input"] = params.tool_input

    return Note(
        id=params.note_id,
        type=params.type,
        title=params.title,
        content=params.content,
        description=params.description,
        priority=params.priority,
        references=list(params.references or []),
        config=config,
        status=NoteStatus.ACTIVE if params.type == NoteType.TOOL else NoteStatus.PENDING,
    )


def _apply_note_update(note: Note, params: UpdateNoteInput) -> Note:
    """
    Return a copy of ``note`` with the fields set in ``params`` applied.

    ``config`` keys are merged rather than replaced.
    """
    changes = params.model_dump(exclude_unset=True, exclude_none=True, exclude={"note_id", "config"})
    updated = note.model_copy(update=changes, deep=True)
    if params.config:
        updated.config = {**updated.config, **params.config}
    return Note.model_validate(updated.model_dump())


def _note_from_http_tool_input(params: RegisterHttpToolInput) -> Note:
    """Tool note for an HTTP API tool: URL in ``logic``, method and headers in ``config``."""
    config: dict[str, Any] = {"method": params.method}
    if params.headers:
        config["headers"] = params.headers
    return Note(
        id=params.tool_id,
        type=NoteType.TOOL,
        title=params.title,
        description=params.description,
        content=params.description,
        logic=params.url,
        config=config,
        status=NoteStatus.ACTIVE,
    )
