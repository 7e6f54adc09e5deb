from __future__ import annotations

from netention_mcp.models.note import Note


class InMemoryNoteBackend:
    """Ephemeral storage in a dict, kept in insertion order."""

    def __init__(self) -> None:
        self._notes: dict[str, Note] = {}

    async def get(self, note_id: str) -> Note | None:
        note = self._notes.get(note_id)
        return note.model_copy(deep=True) if note is not None else None

    async def put(self, note: Note) -> None:
        if note.id is None:
            raise ValueError("Cannot store a note without an id")
        self._notes[note.id] = note.model_copy(deep=True)

    async def remove(self, note_id: str) -> bool:
        return self._notes.pop(note_id, None) is not None

    async def list(self) -> list[Note]:
        return [n.model_copy(deep=True) for n in self._notes.values()]

    async def close(self) -> None:
        return
