from __future__ import annotations

from typing import Protocol

from netention_mcp.models.note import Note


class NoteBackend(Protocol):
    """Storage interface behind the note store.

    Backends only persist; id conflicts, timestamps and notifications are the
    store's job. Returned notes are copies the caller may mutate.

    Concrete implementations:
    - InMemoryNoteBackend (ephemeral, default)
    - Neo4jNoteBackend (persistent graph)
    """

    async def get(self, note_id: str) -> Note | None: ...

    async def put(self, note: Note) -> None: ...

    async def remove(self, note_id: str) -> bool: ...

    async def list(self) -> list[Note]: ...

    async def close(self) -> None: ...
