"""
Task scheduler.

Admits pending Task notes by priority under a concurrency ceiling and runs
their tools. Admission runs to a fixed point whenever something can free or
add work: a task finishing, the limit changing, a task being added or
re-queued. There is no polling loop.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Sequence
from typing import Any

from netention_mcp.builtin_tools import WEB_SEARCH_TOOL_ID
from netention_mcp.enums import NoteStatus
from netention_mcp.errors import EngineValidationError, NoteNotFoundError
from netention_mcp.executor import ToolExecutor
from netention_mcp.models.note import Note
from netention_mcp.planning import PlanningRule, apply_rules
from netention_mcp.store import NoteStore

logger = logging.getLogger(__name__)

# Error recorded on a task whose run was cut short by shutdown or a restart.
INTERRUPTED = "interrupted"


class _NotPending(Exception):
    """Raised inside a store mutation to abandon a promotion."""


def queue_order(notes: list[Note]) -> list[Note]:
    """
    Pending tasks in admission order.

    Highest priority first, then earliest ``created_at``, then store order.
    """
    pending = [(i, n) for i, n in enumerate(notes) if n.is_task and n.status == NoteStatus.PENDING]
    pending.sort(
        key=lambda item: (
            -item[1].priority,
            item[1].created_at.timestamp() if item[1].created_at else math.inf,
            item[0],
        )
    )
    return [n for _, n in pending]


class Scheduler:
    """Concurrency-bounded runner for Task notes."""

    def __init__(
        self,
        store: NoteStore,
        executor: ToolExecutor,
        concurrency_limit: int = 5,
        rules: Sequence[PlanningRule] = (),
    ):
        self.store = store
        self.executor = executor
        self.rules = tuple(rules)
        self._limit = self._validate_limit(concurrency_limit)
        self._running: dict[str, asyncio.Task[None]] = {}
        self._admission = asyncio.Lock()
        self._started = False

    @staticmethod
    def _validate_limit(limit: Any) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise EngineValidationError(
                f"Concurrency limit must be an integer >= 1, got {limit!r}", field="concurrency_limit"
            )
        return limit

    @property
    def started(self) -> bool:
        return self._started

    @property
    def concurrency_limit(self) -> int:
        return self._limit

    @property
    def active_count(self) -> int:
        return len(self._running)

    @property
    def active_ids(self) -> list[str]:
        return list(self._running)

    async def start(self) -> list[str]:
        """Enable admission and admit whatever fits."""
        self._started = True
        logger.info(f"Scheduler started (limit {self._limit})")
        return await self.pump()

    def stop(self) -> None:
        """Disable admission. Tasks already running finish normally."""
        self._started = False
        logger.info("Scheduler stopped")

    async def set_concurrency_limit(self, limit: int) -> list[str]:
        """
        Change the ceiling and re-run admission.

        Lowering it never interrupts running tasks; new admissions wait until
        the active count drops below the new limit.

        Raises:
            EngineValidationError: if ``limit`` is not an integer >= 1
        """
        self._limit = self._validate_limit(limit)
        logger.info(f"Concurrency limit set to {limit}")
        return await self.pump()

    async def next_candidate(self) -> Note | None:
        """The pending task that would be admitted next, if any.

        A task whose previous run has not returned yet is never a candidate.
        """
        for note in queue_order(await self.store.list()):
            if note.id not in self._running:
                return note
        return None

    async def pump(self) -> list[str]:
        """
        Admit pending tasks until the ceiling is reached or none remain.

        Returns:
            Ids of the tasks promoted by this pass
        """
        promoted: list[str] = []
        async with self._admission:
            while self._started and len(self._running) < self._limit:
                candidate = await self.next_candidate()
                if candidate is None or candidate.id is None:
                    break
                note = await self._promote(candidate.id)
                if note is None:
                    continue
                promoted.append(candidate.id)
                self._running[candidate.id] = asyncio.create_task(
                    self._run(note), name=f"netention-task-{candidate.id}"
                )
        return promoted

    async def _promote(self, note_id: str) -> Note | None:
        def _activate(note: Note) -> None:
            if note.status != NoteStatus.PENDING:
                raise _NotPending(note_id)
            note.status = NoteStatus.ACTIVE
            note.error = None

        try:
            note = await self.store.modify(note_id, _activate)
        except (NoteNotFoundError, _NotPending):
            return None
        logger.info(f"Task {note_id} active: {note.title} (priority {note.priority:g})")
        return note

    async def resolve_tool_id(self, note: Note) -> str | None:
        """
        Tool that runs ``note``.

        ``config["toolId"]`` wins. A task flagged ``requires_web_search`` goes
        to the web search tool when one is bound. Otherwise the first
        reference that is a Tool note, or None.
        """
        tool_id = note.config.get("toolId")
        if tool_id:
            return str(tool_id)
        if note.requires_web_search:
            if self.executor.registry.resolve(WEB_SEARCH_TOOL_ID) is not None:
                return WEB_SEARCH_TOOL_ID
            logger.debug(f"Task {note.id} wants web search but no search tool is bound")
        for ref in note.references:
            target = await self.store.get(ref)
            if target is not None and target.is_tool:
                return ref
        return None

    @staticmethod
    def task_input(note: Note, tool_id: str | None = None) -> Any:
        if "input" in note.config:
            return note.config["input"]
        if tool_id == WEB_SEARCH_TOOL_ID:
            return {"query": note.content or note.description or note.title}
        return {"input": note.content}

    async def _run(self, note: Note) -> None:
        note_id = note.id or ""
        try:
            if self.rules:
                await apply_rules(self.rules, "before", note, self.store)
                note = await self.store.get(note_id) or note
            tool_id = await self.resolve_tool_id(note)
            result = None
            if tool_id is not None:
                result = await self.executor.execute(tool_id, self.task_input(note, tool_id))
        except asyncio.CancelledError:
            logger.warning(f"Task {note_id} interrupted")
            await self._settle(note_id, NoteStatus.FAILED, error=INTERRUPTED)
            raise
        except Exception as e:
            logger.error(f"Task {note_id} failed: {e}")
            await self._settle(note_id, NoteStatus.FAILED, error=str(e) or type(e).__name__)
        else:
            logger.info(f"Task {note_id} completed")
            settled = await self._settle(note_id, NoteStatus.COMPLETED, result=result)
            if settled is not None and self.rules:
                await apply_rules(self.rules, "after", settled, self.store)
        finally:
            self._running.pop(note_id, None)
            await self.pump()

    async def _settle(
        self, note_id: str, status: NoteStatus, result: Any = None, error: str | None = None
    ) -> Note | None:
        def _apply(note: Note) -> None:
            note.status = status
            note.result = result
            note.error = error

        try:
            return await self.store.modify(note_id, _apply)
        except NoteNotFoundError:
            logger.info(f"Task {note_id} was deleted while running, outcome dropped")
        except Exception:
            logger.exception(f"Could not record outcome of task {note_id}")
        return None

    async def recover_interrupted(self) -> list[str]:
        """
        Mark tasks left active by an earlier run as failed.

        Only tasks this scheduler is not running are touched. Called once when
        an engine starts over a backend that may hold such leftovers.
        """
        recovered: list[str] = []
        for note in await self.store.list():
            if not note.is_task or note.status != NoteStatus.ACTIVE or note.id in self._running:
                continue
            if await self._settle(note.id or "", NoteStatus.FAILED, error=INTERRUPTED) is not None:
                recovered.append(note.id or "")
        if recovered:
            logger.warning(f"Marked {len(recovered)} interrupted task(s) as failed: {', '.join(recovered)}")
        return recovered

    async def requeue(self, note_id: str) -> Note:
        """
        Reset a completed or failed task to pending and re-run admission.

        Raises:
            NoteNotFoundError: if absent
            EngineValidationError: if the note is not a task or is still active
        """

        def _reset(note: Note) -> None:
            if not note.is_task:
                raise EngineValidationError(f"Note {note_id} is not a task", field="type")
            if note.status == NoteStatus.ACTIVE or note_id in self._running:
                raise EngineValidationError(f"Task {note_id} is still active", field="status")
            note.status = NoteStatus.PENDING
            note.error = None

        note = await self.store.modify(note_id, _reset)
        logger.info(f"Task {note_id} re-queued")
        await self.pump()
        return note

    async def wait_idle(self) -> None:
        """Wait until no task is running, including ones admitted meanwhile."""
        while self._running:
            await asyncio.gather(*list(self._running.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Stop admission and cancel outstanding runs. Teardown only."""
        self.stop()
        tasks = list(self._running.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._running.clear()
