"""
Error taxonomy for the engine.

Every failure raised by the note store, the tool executor and the sandbox is an
EngineError subclass, so callers can tell the categories apart:
- validation: malformed settings, config or tool input
- not_found: missing note or tool id
- conflict: duplicate id on create
- sandbox: path escape or disallowed extension
- execution: a tool implementation failed, including non-success HTTP responses
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SANDBOX = "sandbox"
    EXECUTION = "execution"


@dataclass(eq=False)
class EngineError(Exception):
    """
    Base class for engine errors.

    ``str(error)`` is the bare message: the sandbox messages are matched
    verbatim by callers.
    """

    code: str
    message: str
    category: ErrorCategory = ErrorCategory.EXECUTION
    details: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }
        if self.details:
            result["details"] = self.details
        return result


class EngineValidationError(EngineError):
    """Malformed settings, config or input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            category=ErrorCategory.VALIDATION,
            details={"field": field} if field else None,
        )
        self.field = field


class NoteNotFoundError(EngineError):
    """No note with the given id."""

    def __init__(self, note_id: str, resource_type: str = "Note"):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource_type} with id {note_id} not found.",
            category=ErrorCategory.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": note_id},
        )
        self.note_id = note_id


class NoteConflictError(EngineError):
    """A note with the given id already exists."""

    def __init__(self, note_id: str):
        super().__init__(
            code="CONFLICT",
            message=f"Note with id {note_id} already exists.",
            category=ErrorCategory.CONFLICT,
            details={"resource_id": note_id},
        )
        self.note_id = note_id


class ToolNotRegisteredError(EngineError):
    """The tool note exists but nothing is bound to execute it."""

    def __init__(self, tool_id: str):
        super().__init__(
            code="TOOL_NOT_REGISTERED",
            message=f"No implementation registered for tool {tool_id}.",
            category=ErrorCategory.NOT_FOUND,
            details={"tool_id": tool_id},
        )
        self.tool_id = tool_id


class SandboxViolationError(EngineError):
    """The file tool refused a path or an extension."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(
            code="SANDBOX_VIOLATION",
            message=message,
            category=ErrorCategory.SANDBOX,
            details={"filename": filename} if filename else None,
        )


class ToolExecutionError(EngineError):
    """A tool implementation raised or reported failure."""

    def __init__(self, message: str, tool_id: str | None = None, code: str = "EXECUTION_ERROR"):
        super().__init__(
            code=code,
            message=message,
            category=ErrorCategory.EXECUTION,
            details={"tool_id": tool_id} if tool_id else None,
        )
        self.tool_id = tool_id


class ApiError(ToolExecutionError):
    """An HTTP tool call failed or answered with a non-success status."""

    def __init__(self, message: str, tool_id: str | None = None, status_code: int | None = None):
        super().__init__(message, tool_id=tool_id, code="API_ERROR")
        self.status_code = status_code
        if status_code is not None:
            self.details = {**(self.details or {}), "status_code": status_code}
