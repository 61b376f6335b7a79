"""Core data models for file-context."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class FileEntry(BaseModel):
    """A file in a listing.

    ``content`` is None when the file could not be read as text. Serialized
    with ``exclude_none`` the key is then absent, which is how callers tell
    "unreadable" apart from "empty".
    """

    name: str
    path: str
    type: Literal["file"] = "file"
    content: Optional[str] = None


class DirectoryEntry(BaseModel):
    """A directory in a listing; ``children`` only for recursive listings."""

    name: str
    path: str
    type: Literal["directory"] = "directory"
    children: Optional[List[FileNode]] = None


FileNode = Annotated[Union[FileEntry, DirectoryEntry], Field(discriminator="type")]

DirectoryEntry.model_rebuild()


class ContextItem(BaseModel):
    """One file as it appears in the assembled context."""

    label: str
    text: str


class QueryRequest(BaseModel):
    """Question plus the paths whose content should be used as context.

    ``path`` is the older single-path form; it is only consulted when
    ``paths`` is empty.
    """

    paths: List[str] = Field(default_factory=list)
    path: Optional[str] = None
    query: str = ""
    model: Optional[str] = None

    def targets(self) -> List[str]:
        if self.paths:
            return list(self.paths)
        if self.path:
            return [self.path]
        return []


class QueryResponse(BaseModel):
    """Normalized answer from any backend.

    A backend-level failure is reported here with ``text == ""`` and
    ``error`` set, not raised.
    """

    text: str
    model: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadedFile(BaseModel):
    """Summary of a stored upload."""

    name: str
    size: str
    path: str
