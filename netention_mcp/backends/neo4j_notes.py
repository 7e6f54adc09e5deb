from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any

from neo4j import Driver, GraphDatabase

from netention_mcp.models.note import Note

logger = logging.getLogger(__name__)

# Opaque or nested fields are stored as JSON strings.
_JSON_FIELDS = ("content", "input_schema", "output_schema", "config", "logic", "references", "result")
_SEQUENCE_NAME = "notes"


class Neo4jNoteBackend:
    """Neo4j-backed persistent note storage.

    Storage model:
    - (:Note {id, seq, type, title, description, status, priority, created_at,
      updated_at, requires_web_search, error, *_json})
    - (:Note)-[:REFERENCES {position}]->(:Note) for references whose target exists
    - (:NoteSequence {id, value}) issuing ``seq`` so listing keeps creation order

    The ordered ``references_json`` property is authoritative; edges exist for
    graph queries and are rebuilt on every write. Each write runs in a single
    transaction. The driver is synchronous, so calls run in a worker thread.
    """

    def __init__(
        self,
        *,
        uri: str | None = None,
        user: str | None = None,
        password: str | None = None,
        driver: Driver | None = None,
    ) -> None:
        if driver is None:
            if uri is None:
                raise ValueError("Either a driver or a uri is required")
            driver = GraphDatabase.driver(uri, auth=(user or "", password or ""))
        self._driver = driver
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def ensure_schema(self) -> None:
        """Create the id constraint and sequence index once, before first use."""
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                await asyncio.to_thread(self._create_schema)
                self._schema_ready = True

    def _create_schema(self) -> None:
        statements = [
            "CREATE CONSTRAINT note_id IF NOT EXISTS FOR (n:Note) REQUIRE n.id IS UNIQUE",
            "CREATE INDEX note_seq IF NOT EXISTS FOR (n:Note) ON (n.seq)",
        ]
        with self._driver.session() as session:
            for q in statements:
                session.run(q)

    async def get(self, note_id: str) -> Note | None:
        await self.ensure_schema()
        return await asyncio.to_thread(self._get, note_id)

    async def put(self, note: Note) -> None:
        if note.id is None:
            raise ValueError("Cannot store a note without an id")
        await self.ensure_schema()
        await asyncio.to_thread(self._put, note)

    async def remove(self, note_id: str) -> bool:
        await self.ensure_schema()
        return await asyncio.to_thread(self._remove, note_id)

    async def list(self) -> list[Note]:
        await self.ensure_schema()
        return await asyncio.to_thread(self._list)

    async def close(self) -> None:
        await asyncio.to_thread(self._driver.close)

    # --- sync implementations ---

    def _get(self, note_id: str) -> Note | None:
        with self._driver.session() as session:
            rec = session.run("MATCH (n:Note {id: $id}) RETURN n", id=note_id).single()
        if rec is None:
            return None
        return _node_to_note(dict(rec["n"]))

    def _list(self) -> list[Note]:
        with self._driver.session() as session:
            rows = session.run("MATCH (n:Note) RETURN n ORDER BY n.seq").data()
        return [_node_to_note(dict(row["n"])) for row in rows]

    def _put(self, note: Note) -> None:
        props = _note_to_props(note)
        with self._driver.session() as session:
            session.execute_write(_write_note, note.id, props, list(note.references))
        logger.debug(f"Persisted note {note.id}")

    def _remove(self, note_id: str) -> bool:
        with self._driver.session() as session:
            removed = session.execute_write(_delete_note, note_id)
        return removed > 0


def _write_note(tx: Any, note_id: str, props: dict[str, Any], references: list[str]) -> None:
    existing = tx.run("MATCH (n:Note {id: $id}) RETURN n.seq AS seq", id=note_id).single()
    if existing is not None:
        seq = existing["seq"]
    else:
        seq = tx.run(
            "MERGE (c:NoteSequence {id: $name}) "
            "ON CREATE SET c.value = 0 "
            "SET c.value = c.value + 1 "
            "RETURN c.value AS value",
            name=_SEQUENCE_NAME,
        ).single()["value"]

    # SET n = $props replaces every property, so id and seq are carried along.
    tx.run("MERGE (n:Note {id: $id}) SET n = $props", id=note_id, props={**props, "id": note_id, "seq": seq})
    tx.run("MATCH (n:Note {id: $id})-[r:REFERENCES]->() DELETE r", id=note_id)
    if references:
        tx.run(
            "UNWIND $refs AS ref "
            "MATCH (n:Note {id: $id}) "
            "MATCH (t:Note {id: ref.target}) "
            "CREATE (n)-[:REFERENCES {position: ref.position}]->(t)",
            id=note_id,
            refs=[{"target": target, "position": i} for i, target in enumerate(references)],
        )


def _delete_note(tx: Any, note_id: str) -> int:
    rec = tx.run("MATCH (n:Note {id: $id}) DETACH DELETE n RETURN count(*) AS removed", id=note_id).single()
    return int(rec["removed"]) if rec is not None else 0


def _note_to_props(note: Note) -> dict[str, Any]:
    data = note.model_dump(mode="json")
    props: dict[str, Any] = {}
    for key, value in data.items():
        if key in _JSON_FIELDS:
            props[f"{key}_json"] = json.dumps(value)
        elif value is not None:
            props[key] = value
    return props


def _node_to_note(node: dict[str, Any]) -> Note:
    data: dict[str, Any] = {}
    for key, value in node.items():
        if key == "seq":
            continue
        if key.endswith("_json"):
            data[key[: -len("_json")]] = json.loads(value) if value is not None else None
        else:
            data[key] = value
    for key in ("created_at", "updated_at"):
        if isinstance(data.get(key), str):
            data[key] = datetime.fromisoformat(data[key])
    if data.get("references") is None:
        data["references"] = []
    if data.get("config") is None:
        data["config"] = {}
    return Note.model_validate(data)
