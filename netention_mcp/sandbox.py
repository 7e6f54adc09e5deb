"""Sandboxed file operations for the built-in file tool."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from netention_mcp.config import ALLOWED_EXTENSIONS
from netention_mcp.enums import FileAction
from netention_mcp.errors import EngineValidationError, SandboxViolationError, ToolExecutionError

logger = logging.getLogger(__name__)

OUTSIDE_SAFE_DIRECTORY = "Filename is outside the safe directory."


def invalid_extension_message(allowed: tuple[str, ...]) -> str:
    return f"Invalid file extension. Allowed extensions are: {', '.join(allowed)}"


@dataclass(frozen=True)
class FileSandbox:
    """A safe root directory plus an extension allow-list, fixed at startup."""

    root: Path
    allowed_extensions: tuple[str, ...] = ALLOWED_EXTENSIONS

    @classmethod
    def create(cls, root: Path | str, allowed_extensions: tuple[str, ...] = ALLOWED_EXTENSIONS) -> FileSandbox:
        """Resolve ``root``, creating it if missing."""
        resolved = Path(root).expanduser().resolve()
        resolved.mkdir(parents=True, exist_ok=True)
        return cls(root=resolved, allowed_extensions=tuple(e.lower() for e in allowed_extensions))

    def resolve(self, filename: str) -> Path:
        """
        Resolve ``filename`` against the root.

        Raises:
            SandboxViolationError: if the result is not strictly below the root
        """
        traverses = ".." in PurePosixPath(filename.replace("\\", "/")).parts
        candidate = (self.root / filename).resolve()
        if traverses or candidate == self.root or not candidate.is_relative_to(self.root):
            logger.warning(f"File operation denied, outside safe directory: {filename}")
            raise SandboxViolationError(OUTSIDE_SAFE_DIRECTORY, filename=filename)
        return candidate

    def check_extension(self, path: Path, filename: str) -> None:
        if path.suffix.lower() not in self.allowed_extensions:
            logger.warning(f"File operation denied, invalid extension: {filename}")
            raise SandboxViolationError(invalid_extension_message(self.allowed_extensions), filename=filename)

    async def run(self, payload: Any) -> dict[str, str]:
        """
        Perform one file action.

        Args:
            payload: Mapping with ``action``, ``filename`` and, for writes, ``content``

        Returns:
            ``{"result": ...}`` with the file contents or a confirmation message
        """
        if not isinstance(payload, dict) or not payload.get("action") or not payload.get("filename"):
            raise EngineValidationError("Invalid input: Action and filename are required.")

        try:
            action = FileAction(payload["action"])
        except ValueError:
            raise EngineValidationError(f"Invalid action: {payload['action']}", field="action") from None

        filename = str(payload["filename"])
        path = self.resolve(filename)
        if action in (FileAction.READ, FileAction.WRITE):
            self.check_extension(path, filename)

        if action == FileAction.READ:
            if not path.is_file():
                raise ToolExecutionError("File not found.")
            logger.info(f"File operation: reading {filename}")
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
            return {"result": content}

        if action == FileAction.WRITE:
            if payload.get("content") is None:
                raise EngineValidationError("Invalid input: Content is required for write action.", field="content")
            logger.info(f"File operation: writing {filename}")
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_text, str(payload["content"]), encoding="utf-8")
            return {"result": "File written successfully"}

        if action == FileAction.CREATE_DIRECTORY:
            if path.exists():
                raise ToolExecutionError("Directory already exists.")
            logger.info(f"File operation: creating directory {filename}")
            await asyncio.to_thread(path.mkdir, parents=True)
            return {"result": "Directory created successfully"}

        if not path.is_file():
            raise ToolExecutionError("File not found.")
        logger.info(f"File operation: deleting {filename}")
        await asyncio.to_thread(path.unlink)
        return {"result": "File deleted successfully"}
