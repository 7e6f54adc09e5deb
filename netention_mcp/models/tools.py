"""Execution descriptors bound to Tool notes at runtime.

Bindings are never persisted: they close over live objects (callables,
clients, the sandbox) and are registered again on every engine start.
"""

from collections.abc import Callable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, InstanceOf

from netention_mcp.sandbox import FileSandbox


class FunctionTool(BaseModel):
    """In-process callable, sync or async, taking the tool input."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["function"] = "function"
    func: Callable[[Any], Any]


class ChainTool(BaseModel):
    """Opaque agent/chain handle invoked through a single-argument method."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["chain"] = "chain"
    handle: Any
    method: str = "invoke"


class HttpApiTool(BaseModel):
    """HTTP endpoint described by the tool note's ``logic`` (URL) and ``config``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["http"] = "http"
    timeout: float | None = Field(default=None, gt=0)


class SandboxedFileTool(BaseModel):
    """Built-in file operations confined to the sandbox."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    sandbox: InstanceOf[FileSandbox]


ToolDescriptor = Annotated[
    Union[FunctionTool, ChainTool, HttpApiTool, SandboxedFileTool],
    Field(discriminator="kind"),
]
