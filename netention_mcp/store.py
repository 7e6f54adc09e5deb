"""
Note store: the single source of truth for notes.

Wraps a storage backend with id assignment, timestamps, conflict detection,
per-id write serialization and change notifications.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable
from datetime import datetime, timezone

from netention_mcp.backends.base import NoteBackend
from netention_mcp.errors import NoteConflictError, NoteNotFoundError
from netention_mcp.events import ChangeBus
from netention_mcp.ids import IdService
from netention_mcp.models.note import Note

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class NoteStore:
    """
    Async CRUD over notes.

    Every completed mutation publishes exactly one signal on the change bus,
    after the backend write and before returning. Writes to the same id never
    interleave.
    """

    def __init__(self, backend: NoteBackend, bus: ChangeBus | None = None, id_service: IdService | None = None):
        self.backend = backend
        self.bus = bus or ChangeBus()
        self.ids = id_service or IdService()
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, note_id: str) -> asyncio.Lock:
        lock = self._locks.get(note_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[note_id] = lock
        return lock

    async def add(self, note: Note) -> Note:
        """
        Create a note.

        Assigns an id when absent and stamps ``created_at`` when absent.

        Raises:
            NoteConflictError: if a note with the same id exists
        """
        note = note.model_copy(deep=True)
        if not note.id:
            note.id = self.ids.generate()
        if note.created_at is None:
            note.created_at = utc_now()
        note.updated_at = None

        lock = self._lock_for(note.id)
        async with lock:
            if await self.backend.get(note.id) is not None:
                raise NoteConflictError(note.id)
            await self.backend.put(note)
        logger.info(f"Added note {note.id}: {note.title}")
        self.bus.publish()
        return note.model_copy(deep=True)

    async def get(self, note_id: str) -> Note | None:
        """Return the note, or None when absent."""
        return await self.backend.get(note_id)

    async def require(self, note_id: str) -> Note:
        """
        Return the note.

        Raises:
            NoteNotFoundError: if absent
        """
        note = await self.backend.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def update(self, note: Note) -> Note:
        """
        Replace a stored note wholesale.

        The stored ``created_at`` is kept and ``updated_at`` refreshed.

        Raises:
            NoteNotFoundError: if no note has this id
        """
        if not note.id:
            raise NoteNotFoundError("<missing id>")
        note = note.model_copy(deep=True)

        lock = self._lock_for(note.id)
        async with lock:
            current = await self.backend.get(note.id)
            if current is None:
                raise NoteNotFoundError(note.id)
            note.created_at = current.created_at
            note.updated_at = utc_now()
            await self.backend.put(note)
        logger.debug(f"Updated note {note.id}: {note.title} [{note.status.value}]")
        self.bus.publish()
        return note.model_copy(deep=True)

    async def delete(self, note_id: str) -> bool:
        """
        Delete a note. Deleting an absent id is a no-op.

        References to the note held by other notes are left in place.

        Returns:
            True if a note was removed
        """
        lock = self._lock_for(note_id)
        async with lock:
            removed = await self.backend.remove(note_id)
        if removed:
            logger.info(f"Deleted note {note_id}")
            self.bus.publish()
        return removed

    async def list(self) -> list[Note]:
        """All notes in creation order."""
        return await self.backend.list()

    async def modify(self, note_id: str, change: Callable[[Note], None]) -> Note:
        """
        Apply ``change`` to the stored note under its write lock and save it.

        Same contract as :meth:`update`, without losing concurrent edits made
        between a read and a write.

        Raises:
            NoteNotFoundError: if absent
        """
        lock = self._lock_for(note_id)
        async with lock:
            note = await self.backend.get(note_id)
            if note is None:
                raise NoteNotFoundError(note_id)
            created_at = note.created_at
            change(note)
            note.id = note_id
            note.created_at = created_at
            note.updated_at = utc_now()
            await self.backend.put(note)
        self.bus.publish()
        return note.model_copy(deep=True)

    async def get_references(self, note_id: str) -> list[str]:
        note = await self.require(note_id)
        return list(note.references)

    async def add_reference(self, source_id: str, target_id: str) -> Note:
        def _add(note: Note) -> None:
            if target_id not in note.references:
                note.references.append(target_id)

        return await self.modify(source_id, _add)

    async def remove_reference(self, source_id: str, target_id: str) -> Note:
        def _remove(note: Note) -> None:
            note.references = [ref for ref in note.references if ref != target_id]

        return await self.modify(source_id, _remove)

    async def close(self) -> None:
        await self.backend.close()
