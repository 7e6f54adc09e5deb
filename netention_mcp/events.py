"""Change notification bus.

Subscribers get a payload-free "something changed" signal after every
completed mutation and re-read whatever state they need.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], Any]


class ChangeBus:
    """In-memory fan-out of change signals."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` and return a disposer that removes it.

        Calling the disposer more than once is a no-op.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def unsubscribe(self, listener: ChangeListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self) -> None:
        for listener in list(self._listeners):
            try:
                result = listener()
            except Exception:
                logger.exception("Change listener %r raised", listener)
                continue
            if inspect.isawaitable(result):
                self._schedule_async_listener(result)

    def clear(self) -> None:
        self._listeners.clear()

    @staticmethod
    def _schedule_async_listener(awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Async change listener dropped: no running event loop")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        asyncio.ensure_future(awaitable, loop=loop)
