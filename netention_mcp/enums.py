"""Enums for Netention MCP."""

from enum import Enum


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    CONCISE = "concise"  # One line per note, for chaining
    MARKDOWN = "markdown"  # Human-readable (default)
    JSON = "json"  # Machine-readable with all fields


class NoteType(str, Enum):
    """Kinds of note held in the graph."""

    ROOT = "Root"
    TASK = "Task"
    PLAN = "Plan"
    STEP = "Step"
    TOOL = "Tool"
    MEMORY = "Memory"
    SYSTEM = "System"
    DATA = "Data"
    PROMPT = "Prompt"
    CONFIG = "Config"
    TEMPLATE = "Template"


class NoteStatus(str, Enum):
    """Note status. Tasks move pending -> active -> completed | failed."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class FileAction(str, Enum):
    """Actions understood by the sandboxed file tool."""

    READ = "read"
    WRITE = "write"
    CREATE_DIRECTORY = "createDirectory"
    DELETE_FILE = "deleteFile"
