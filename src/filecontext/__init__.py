"""file-context - ask language models about files in a sandboxed folder."""

__version__ = "0.1.0"

from .config import Config
from .errors import (
    FileContextError,
    InvalidRequest,
    NotFound,
    ReadFailure,
    SandboxViolation,
)
from .models import (
    ContextItem,
    DirectoryEntry,
    FileEntry,
    FileNode,
    QueryRequest,
    QueryResponse,
    UploadedFile,
)
from .sandbox import PathSandbox
from .filesystem import FileTreeReader
from .context import ContextAssembler
from .prompts import PromptFormatter
from .backends import BackendId, ModelRouter
from .service import QueryService

__all__ = [
    "Config",
    "FileContextError",
    "InvalidRequest",
    "NotFound",
    "ReadFailure",
    "SandboxViolation",
    "ContextItem",
    "DirectoryEntry",
    "FileEntry",
    "FileNode",
    "QueryRequest",
    "QueryResponse",
    "UploadedFile",
    "PathSandbox",
    "FileTreeReader",
    "ContextAssembler",
    "PromptFormatter",
    "BackendId",
    "ModelRouter",
    "QueryService",
]
