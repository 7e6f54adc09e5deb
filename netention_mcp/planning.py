"""
Planning rules.

A rule runs around a task's execution: ``before`` rules see the task right
after it is promoted, ``after`` rules see it once its outcome is recorded.
Rules may add notes and edit the task's links; they never change its status.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Literal

from netention_mcp.enums import NoteStatus, NoteType
from netention_mcp.models.note import Note
from netention_mcp.store import NoteStore

logger = logging.getLogger(__name__)

RuleOrder = Literal["before", "after"]

# Tasks above this priority that have no links yet get a sub-task.
DECOMPOSE_PRIORITY = 75


@dataclass(frozen=True)
class PlanningRule:
    name: str
    order: RuleOrder
    condition: Callable[[Note], bool]
    action: Callable[[Note, NoteStore], Awaitable[None]]


async def apply_rules(rules: Sequence[PlanningRule], order: RuleOrder, note: Note, store: NoteStore) -> None:
    """Run every ``order`` rule whose condition holds. A failing rule is logged and skipped."""
    for rule in rules:
        if rule.order != order:
            continue
        try:
            if not rule.condition(note):
                continue
            logger.info(f"[{order.upper()}] {rule.name}: {note.title}")
            await rule.action(note, store)
        except Exception:
            logger.exception(f"Planning rule '{rule.name}' failed for task {note.id}")


async def _spawn_linked_task(parent: Note, store: NoteStore, title: str, description: str, priority: float) -> Note:
    child = await store.add(
        Note(
            type=NoteType.TASK,
            title=title,
            description=description,
            priority=priority,
            status=NoteStatus.PENDING,
            references=[parent.id or ""],
        )
    )
    await store.add_reference(parent.id or "", child.id or "")
    logger.info(f"Created task {child.id}: {child.title}")
    return child


async def _decompose(note: Note, store: NoteStore) -> None:
    await _spawn_linked_task(
        note, store, f"Sub-task 1 of {note.title}", f"A subtask of {note.title}", note.priority - 10
    )


async def _follow_up(note: Note, store: NoteStore) -> None:
    await _spawn_linked_task(
        note, store, f"Follow-up task for {note.title}", f"A follow-up task for {note.title}", note.priority - 5
    )


DECOMPOSE_COMPLEX_TASK = PlanningRule(
    name="Decompose Complex Task",
    order="before",
    condition=lambda note: note.priority > DECOMPOSE_PRIORITY and not note.references,
    action=_decompose,
)

FOLLOW_UP_SUBTASK = PlanningRule(
    name="Reflect and Create Subtasks",
    order="after",
    condition=lambda note: note.status == NoteStatus.COMPLETED and not note.references,
    action=_follow_up,
)

STANDARD_RULES: tuple[PlanningRule, ...] = (DECOMPOSE_COMPLEX_TASK, FOLLOW_UP_SUBTASK)
