"""Copy notes between storage backends."""

import logging

from netention_mcp.backends.base import NoteBackend

logger = logging.getLogger(__name__)


async def migrate_notes(source: NoteBackend, target: NoteBackend, overwrite: bool = False) -> int:
    """
    Copy every note from ``source`` into ``target`` in creation order.

    Notes already present in ``target`` are skipped unless ``overwrite`` is set.
    Writes go straight to the backend: nothing is published and timestamps are
    kept as they are.

    Returns:
        Number of notes written
    """
    notes = await source.list()
    logger.info(f"Migrating {len(notes)} notes")
    written = 0
    for note in notes:
        if note.id is None:
            continue
        if not overwrite and await target.get(note.id) is not None:
            logger.debug(f"Skipping note {note.id}: already present")
            continue
        await target.put(note)
        written += 1
    logger.info(f"Migrated {written} of {len(notes)} notes")
    return written
