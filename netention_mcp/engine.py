"""
Engine: the composition root.

One Engine instance is built at process start and handed to every consumer.
It owns the note store, the tool registry and executor, the scheduler, the
change bus and the system log, and exposes the API external clients use.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx

from netention_mcp.backends import InMemoryNoteBackend, Neo4jNoteBackend, NoteBackend
from netention_mcp.builtin_tools import builtin_tools
from netention_mcp.config import EngineSettings
from netention_mcp.enums import NoteStatus, NoteType
from netention_mcp.errors import NoteNotFoundError
from netention_mcp.events import ChangeBus, ChangeListener
from netention_mcp.executor import ToolExecutor
from netention_mcp.migration import migrate_notes
from netention_mcp.models.note import Note
from netention_mcp.models.tools import ToolDescriptor
from netention_mcp.planning import STANDARD_RULES, PlanningRule
from netention_mcp.registry import ToolRegistry
from netention_mcp.sandbox import FileSandbox
from netention_mcp.scheduler import Scheduler
from netention_mcp.store import NoteStore
from netention_mcp.system_log import SystemLog

logger = logging.getLogger(__name__)


def build_backend(settings: EngineSettings) -> NoteBackend:
    """Storage backend selected by ``use_persistence``."""
    if settings.use_persistence:
        logger.info(f"Using Neo4j note storage at {settings.neo4j_uri}")
        return Neo4jNoteBackend(
            uri=settings.neo4j_uri,
            user=settings.neo4j_user,
            password=settings.neo4j_password,
        )
    logger.info("Using in-memory note storage")
    return InMemoryNoteBackend()


def _as_note(note: Note | dict[str, Any]) -> Note:
    return note if isinstance(note, Note) else Note.model_validate(note)


# Default for handles that carry over on reinitialize.
_KEEP: Any = object()

# Set by the store, never copied from an edit.
_STORE_FIELDS = frozenset({"id", "created_at", "updated_at"})
# Owned by the scheduler while a task runs and when it settles.
_OUTCOME_FIELDS = frozenset({"status", "result", "error"})


def _merge_edit(stored: Note, incoming: Note) -> None:
    """
    Copy the fields of ``incoming`` onto ``stored`` in place.

    For a task, status, result and error are kept as stored when either side
    is active: a running task cannot be sent back to pending, and a snapshot
    taken while it ran cannot undo the outcome recorded since. Putting a
    finished task back to pending clears its error.
    """
    previous = stored.status
    locked = stored.is_task and NoteStatus.ACTIVE in (previous, incoming.status)
    if locked and incoming.status != previous:
        logger.debug(f"Task {stored.id}: status change {previous.value} -> {incoming.status.value} ignored")
    for name in Note.model_fields:
        if name in _STORE_FIELDS or (locked and name in _OUTCOME_FIELDS):
            continue
        setattr(stored, name, getattr(incoming, name))
    if not locked and stored.is_task and stored.status == NoteStatus.PENDING and previous != NoteStatus.PENDING:
        stored.error = None


class Engine:
    """
    Note engine.

    Prefer :meth:`create`, which also installs the built-in tools and settles
    tasks a previous process left active. The constructor only wires
    components together.
    """

    def __init__(
        self,
        settings: EngineSettings,
        llm: Any = None,
        backend: NoteBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
        system_log: SystemLog | None = None,
        search: Any = None,
        planning_rules: Sequence[PlanningRule] | None = None,
    ):
        self.settings = settings
        self._llm = llm
        self._search = search
        self._planning_rules = planning_rules
        self.bus = ChangeBus()
        self.backend = backend if backend is not None else build_backend(settings)
        self.store = NoteStore(self.backend, self.bus)
        self.sandbox = FileSandbox.create(settings.sandbox_dir)
        self.registry = ToolRegistry()

        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.http_timeout)
        self.executor = ToolExecutor(self.store, self.registry, self.http_client)
        if planning_rules is None:
            planning_rules = STANDARD_RULES if settings.use_planning_rules else ()
        self.scheduler = Scheduler(self.store, self.executor, settings.concurrency_limit, planning_rules)

        self.system_log = system_log or SystemLog()
        self.system_log.attach()
        self._closed = False

    @classmethod
    async def create(
        cls,
        settings: EngineSettings | None = None,
        llm: Any = None,
        backend: NoteBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
        system_log: SystemLog | None = None,
        search: Any = None,
        planning_rules: Sequence[PlanningRule] | None = None,
    ) -> Engine:
        """Build an engine, settle leftover active tasks and bind the built-in tools."""
        engine = cls(settings or EngineSettings(), llm, backend, http_client, system_log, search, planning_rules)
        await engine.scheduler.recover_interrupted()
        await engine._install_builtins()
        logger.info("Engine initialized")
        return engine

    async def _install_builtins(self) -> None:
        for tool in builtin_tools(self.sandbox, self._llm, self._search):
            tool_id = tool.note.id or ""
            self.registry.register_builtin(tool_id, tool.descriptor)
            if await self.store.get(tool_id) is None:
                await self.store.add(tool.note)
            logger.info(f"Registered built-in tool {tool_id}: {tool.note.title}")

    # --- notes ---

    async def add_note(self, note: Note | dict[str, Any]) -> Note:
        created = await self.store.add(_as_note(note))
        if created.is_task and created.status == NoteStatus.PENDING:
            await self.scheduler.pump()
        return created

    async def get_note(self, note_id: str) -> Note | None:
        return await self.store.get(note_id)

    async def update_note(self, note: Note | dict[str, Any]) -> Note:
        """
        Replace a note. A task put back to pending is offered to the scheduler.

        The status, result and error of a task stay as stored while either the
        stored or the given note is active; see :func:`_merge_edit`.

        Raises:
            NoteNotFoundError: if no note has this id
        """
        incoming = _as_note(note)
        if not incoming.id:
            raise NoteNotFoundError("<missing id>")
        updated = await self.store.modify(incoming.id, lambda stored: _merge_edit(stored, incoming))
        return await self._offer(updated)

    async def edit_note(self, note_id: str, change: Callable[[Note], Note]) -> Note:
        """
        Apply ``change`` to the stored note atomically.

        ``change`` gets a copy of the current note and returns the edited note,
        which is merged like :meth:`update_note`.
        """

        def _edit(stored: Note) -> None:
            _merge_edit(stored, change(stored.model_copy(deep=True)))

        updated = await self.store.modify(note_id, _edit)
        return await self._offer(updated)

    async def _offer(self, note: Note) -> Note:
        if note.is_task and note.status == NoteStatus.PENDING:
            await self.scheduler.pump()
        return note

    async def delete_note(self, note_id: str) -> bool:
        return await self.store.delete(note_id)

    async def get_all_notes(self) -> list[Note]:
        return await self.store.list()

    async def add_reference(self, source_id: str, target_id: str) -> Note:
        return await self.store.add_reference(source_id, target_id)

    async def remove_reference(self, source_id: str, target_id: str) -> Note:
        return await self.store.remove_reference(source_id, target_id)

    async def get_references(self, note_id: str) -> list[str]:
        return await self.store.get_references(note_id)

    # --- tools ---

    async def register_tool_definition(self, note: Note | dict[str, Any], descriptor: ToolDescriptor) -> Note:
        """
        Store a Tool note and bind ``descriptor`` to it.

        An existing note with the same id is replaced; an earlier binding is
        overwritten.
        """
        note = _as_note(note).model_copy(update={"type": NoteType.TOOL})
        if note.id and await self.store.get(note.id) is not None:
            stored = await self.store.update(note)
        else:
            stored = await self.store.add(note)
        self.registry.register(stored.id or "", descriptor)
        return stored

    async def execute_tool(self, tool_id: str, payload: Any) -> Any:
        return await self.executor.execute(tool_id, payload)

    def get_llm(self) -> Any:
        """The configured LLM handle, or None when none was given."""
        return self._llm

    # --- notifications ---

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        return self.bus.subscribe(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        self.bus.unsubscribe(listener)

    # --- scheduling ---

    async def start_scheduler(self) -> list[str]:
        return await self.scheduler.start()

    def stop_scheduler(self) -> None:
        self.scheduler.stop()

    async def set_concurrency_limit(self, limit: int) -> list[str]:
        return await self.scheduler.set_concurrency_limit(limit)

    async def requeue_task(self, note_id: str) -> Note:
        return await self.scheduler.requeue(note_id)

    async def wait_idle(self) -> None:
        await self.scheduler.wait_idle()

    # --- lifecycle ---

    async def reinitialize(
        self,
        settings: EngineSettings | None = None,
        llm: Any = _KEEP,
        search: Any = _KEEP,
    ) -> Engine:
        """
        Tear this engine down and build a replacement.

        Admission stops and running tasks finish before anything is torn
        down, so no task is left active in a reused store. The storage backend
        is reused while the persistence toggle is unchanged. Turning
        persistence on copies the current notes into the new store. The LLM
        and search handles carry over unless given (pass None to drop one).
        Built-ins are bound again and the scheduler keeps its started state.
        """
        settings = settings or self.settings
        llm = self._llm if llm is _KEEP else llm
        search = self._search if search is _KEEP else search
        was_started = self.scheduler.started

        self.scheduler.stop()
        await self.scheduler.wait_idle()

        switch_backend = settings.use_persistence != self.settings.use_persistence
        backend = self.backend
        if switch_backend:
            backend = build_backend(settings)
            if settings.use_persistence:
                await migrate_notes(self.backend, backend)

        await self._teardown(close_backend=switch_backend)
        engine = await Engine.create(
            settings,
            llm=llm,
            backend=backend,
            http_client=None if self._owns_http_client else self.http_client,
            system_log=self.system_log,
            search=search,
            planning_rules=self._planning_rules,
        )
        if was_started:
            await engine.start_scheduler()
        return engine

    async def close(self) -> None:
        """Release everything. Tasks still running are interrupted and recorded as failed."""
        await self._teardown(close_backend=True)

    async def _teardown(self, close_backend: bool) -> None:
        if self._closed:
            return
        self._closed = True
        await self.scheduler.shutdown()
        self.bus.clear()
        if self._owns_http_client:
            await self.http_client.aclose()
        if close_backend:
            await self.store.close()
        self.system_log.detach()
        logger.debug("Engine closed")
