"""System log stream.

``SystemLog`` is a logging handler that keeps the most recent engine log lines
in memory and tells its listeners when a line arrives. It is how failures reach
observers besides the note's own status.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections import deque
from collections.abc import Callable
from datetime import datetime, timezone

ROOT_LOGGER = "netention_mcp"
MAX_HISTORY = 1000


class SystemLog(logging.Handler):
    """Bounded in-memory history of formatted log lines."""

    def __init__(self, max_history: int = MAX_HISTORY, level: int = logging.INFO):
        super().__init__(level=level)
        self._buffer: deque[str] = deque(maxlen=max_history)
        self._listeners: list[Callable[[], object]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format_line(record)
        except Exception:
            self.handleError(record)
            return
        self._buffer.append(line)
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                # Logging from here would re-enter this handler.
                self.handleError(record)

    @staticmethod
    def format_line(record: logging.LogRecord) -> str:
        """Render ``[timestamp] - LEVEL - [source] message``."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        source = record.name.rsplit(".", 1)[-1]
        return f"[{timestamp}] - {record.levelname} - [{source}] {record.getMessage()}"

    def history(self, limit: int | None = None) -> list[str]:
        lines = list(self._buffer)
        if limit is not None:
            lines = lines[-limit:] if limit > 0 else []
        return lines

    def clear(self) -> None:
        self._buffer.clear()

    def add_listener(self, listener: Callable[[], object]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    def attach(self, logger_name: str = ROOT_LOGGER) -> None:
        logger = logging.getLogger(logger_name)
        if self not in logger.handlers:
            logger.addHandler(self)
        if logger.level == logging.NOTSET:
            logger.setLevel(self.level)

    def detach(self, logger_name: str = ROOT_LOGGER) -> None:
        logging.getLogger(logger_name).removeHandler(self)


def configure_logging(level: str = "INFO") -> None:
    """Install a console handler on the package logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    if any(getattr(h, "_netention_console", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
    handler._netention_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
