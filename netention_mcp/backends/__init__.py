"""Storage backends for the note store."""

from netention_mcp.backends.base import NoteBackend
from netention_mcp.backends.memory import InMemoryNoteBackend
from netention_mcp.backends.neo4j_notes import Neo4jNoteBackend

__all__ = [
    "NoteBackend",
    "InMemoryNoteBackend",
    "Neo4jNoteBackend",
]
