"""Runtime bindings from Tool note ids to execution descriptors."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

from pydantic import TypeAdapter

from netention_mcp.models.tools import ToolDescriptor

logger = logging.getLogger(__name__)

_descriptor_adapter: TypeAdapter[ToolDescriptor] = TypeAdapter(ToolDescriptor)


class ToolRegistry:
    """
    Tool id -> descriptor map.

    Explicit registrations shadow built-ins. Nothing here is persisted; the
    engine binds its built-ins again each time it is created.
    """

    def __init__(self, builtins: Mapping[str, ToolDescriptor] | None = None):
        self._builtins: dict[str, ToolDescriptor] = dict(builtins or {})
        self._bindings: dict[str, ToolDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, tool_id: str, descriptor: ToolDescriptor) -> None:
        """Bind ``descriptor`` to ``tool_id``, replacing any earlier binding."""
        descriptor = _descriptor_adapter.validate_python(descriptor)
        with self._lock:
            replaced = tool_id in self._bindings
            self._bindings[tool_id] = descriptor
        logger.info(f"{'Rebound' if replaced else 'Registered'} tool {tool_id} ({descriptor.kind})")

    def register_builtin(self, tool_id: str, descriptor: ToolDescriptor) -> None:
        descriptor = _descriptor_adapter.validate_python(descriptor)
        with self._lock:
            self._builtins[tool_id] = descriptor

    def unregister(self, tool_id: str) -> bool:
        with self._lock:
            return self._bindings.pop(tool_id, None) is not None

    def resolve(self, tool_id: str) -> ToolDescriptor | None:
        """Explicit binding, else built-in, else None."""
        with self._lock:
            return self._bindings.get(tool_id) or self._builtins.get(tool_id)

    def is_builtin(self, tool_id: str) -> bool:
        with self._lock:
            return tool_id in self._builtins

    def list(self) -> dict[str, str]:
        """Tool id -> descriptor kind for everything resolvable."""
        with self._lock:
            merged = {**self._builtins, **self._bindings}
        return {tool_id: d.kind for tool_id, d in merged.items()}

    def __contains__(self, tool_id: object) -> bool:
        return isinstance(tool_id, str) and self.resolve(tool_id) is not None
