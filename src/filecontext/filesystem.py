"""File tree reader and the few mutating operations on the storage root."""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .errors import InvalidRequest, NotFound, ReadFailure, SandboxViolation
from .filetypes import format_file_size
from .models import DirectoryEntry, FileEntry, FileNode, UploadedFile
from .sandbox import PathSandbox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Readable:
    """A file whose content was decoded as text."""

    content: str


@dataclass(frozen=True)
class Unreadable:
    """A file that exists but could not be read as text."""

    reason: str


ReadResult = Union[Readable, Unreadable]


class FileTreeReader:
    """Lists and reads files below the sandbox root.

    Every public method takes client paths and runs them through
    :class:`PathSandbox` before touching the filesystem. Nothing is cached:
    each call builds fresh :class:`FileEntry`/:class:`DirectoryEntry` objects.

    Usage:
        reader = FileTreeReader(PathSandbox("storage"))
        nodes = reader.list("src", recursive=True)
        entry = reader.read_one("notes.txt")
    """

    def __init__(self, sandbox: PathSandbox, max_workers: int = 8):
        self._sandbox = sandbox
        self._max_workers = max(1, max_workers)

    @property
    def sandbox(self) -> PathSandbox:
        return self._sandbox

    def list(self, dir_ref: str | None = "", recursive: bool = False) -> List[FileNode]:
        """List a directory.

        Args:
            dir_ref: Directory relative to the storage root
            recursive: Descend into subdirectories and fill ``children``

        Returns:
            Entries sorted by name. Files carry their text content when it
            could be read; otherwise ``content`` is None.

        Raises:
            SandboxViolation: Path escapes the root
            NotFound: Directory does not exist
            InvalidRequest: Path is not a directory
        """
        dir_path = self._sandbox.resolve(dir_ref)
        if not dir_path.exists():
            raise NotFound(f"Directory not found: {dir_ref}")
        if not dir_path.is_dir():
            raise InvalidRequest(f"Not a directory: {dir_ref}")
        self._require_real(dir_path, dir_ref)

        logger.debug("Reading directory %s (recursive=%s)", dir_path, recursive)
        nodes = self._read_directory(dir_path, recursive)
        logger.debug("Directory read: %s, %d entries", dir_path, len(nodes))
        return nodes

    def read_one(self, file_ref: str) -> FileEntry:
        """Read a single file; unlike listings, a read failure fails the call.

        Raises:
            SandboxViolation: Path escapes the root (or is a symlink leaving it)
            NotFound: File does not exist
            InvalidRequest: Path is a directory
            ReadFailure: File exists but is not readable text
        """
        file_path = self._sandbox.resolve(file_ref)
        if not file_path.exists():
            raise NotFound(f"File not found: {file_ref}")
        if file_path.is_dir():
            raise InvalidRequest(f"Not a file: {file_ref}")
        self._require_real(file_path, file_ref)

        result = self._read_text(file_path)
        if isinstance(result, Unreadable):
            logger.error("Failed to read file %s: %s", file_path, result.reason)
            raise ReadFailure(f"Failed to read file: {result.reason}")

        logger.debug("File read: %s (%d chars)", file_path, len(result.content))
        return FileEntry(
            name=file_path.name,
            path=self._sandbox.relative(file_path),
            content=result.content,
        )

    def context_from(self, ref: str) -> List[FileNode]:
        """Entries to use as query context: a directory's listing, or one file."""
        target = self._sandbox.resolve(ref)
        if not target.exists():
            raise NotFound(f"Path not found: {ref}")

        if target.is_dir():
            nodes = self.list(ref)
        else:
            nodes = [self.read_one(ref)]

        logger.debug("Context from %s: %d entries", ref, len(nodes))
        return nodes

    def create_folder(self, folder_ref: str) -> DirectoryEntry:
        """Create a folder (and missing parents) below the root."""
        folder_path = self._sandbox.resolve(folder_ref)
        if folder_path == self._sandbox.root:
            raise InvalidRequest("Invalid folder path")
        if folder_path.exists() and not folder_path.is_dir():
            raise InvalidRequest(f"A file already exists at {folder_ref}")
        self._require_real(folder_path, folder_ref)

        try:
            folder_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidRequest(f"Failed to create folder: {e}") from e

        logger.info("Folder created: %s", folder_path)
        return DirectoryEntry(name=folder_path.name, path=self._sandbox.relative(folder_path))

    def ensure_folder(self, folder_ref: str | None) -> Path:
        """Return the folder's absolute path, creating it when missing."""
        folder_path = self._sandbox.resolve(folder_ref)
        self._require_real(folder_path, folder_ref)
        if not folder_path.is_dir():
            self.create_folder(folder_ref or "")
        return folder_path

    def delete_file(self, file_ref: str) -> None:
        """Delete a regular file below the root."""
        file_path = self._sandbox.resolve(file_ref)
        if not file_path.exists() and not file_path.is_symlink():
            raise NotFound(f"File not found: {file_ref}")
        if not file_path.is_file():
            raise InvalidRequest("Path is not a file")
        self._require_real(file_path, file_ref)

        file_path.unlink()
        logger.info("File deleted: %s", file_path)

    def save_upload(
        self,
        folder_ref: str | None,
        filename: str,
        data: bytes,
        unique: bool = False,
    ) -> UploadedFile:
        """Write uploaded bytes into a folder below the root.

        Args:
            folder_ref: Target folder, created if missing ("" for the root)
            filename: Client supplied file name; only its last component is used
            data: File content
            unique: Append a millisecond timestamp to the stem

        Returns:
            UploadedFile with the original name, formatted size and stored path
        """
        base_name = os.path.basename(filename.replace("\\", "/"))
        if base_name in ("", ".", ".."):
            raise InvalidRequest(f"Invalid file name: {filename!r}")

        folder_path = self.ensure_folder(folder_ref)
        stored_name = base_name
        if unique:
            stem, suffix = os.path.splitext(base_name)
            stored_name = f"{stem}-{int(time.time() * 1000)}{suffix}"

        # base_name has no separators, so the target stays inside folder_path
        target = folder_path / stored_name
        if target.is_dir():
            raise InvalidRequest(f"A folder already exists at {self._sandbox.relative(target)}")
        self._require_real(target, filename)
        target.write_bytes(data)

        logger.info("Stored upload %s (%d bytes) at %s", base_name, len(data), target)
        return UploadedFile(
            name=base_name,
            size=format_file_size(len(data)),
            path=self._sandbox.relative(target),
        )

    def _require_real(self, path: Path, ref: str | None) -> None:
        if not self._sandbox.contains_real(path):
            logger.warning("Rejected symlinked path leaving storage root: %r", ref)
            raise SandboxViolation(f"Path escapes storage root: {ref}")

    def _read_directory(self, dir_path: Path, recursive: bool) -> List[FileNode]:
        try:
            entries = sorted(dir_path.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.error("Failed to read directory %s: %s", dir_path, e)
            raise ReadFailure(f"Failed to read directory: {e}") from e

        files = [p for p in entries if not p.is_dir()]
        results: dict[Path, ReadResult] = {}
        if files:
            # Sibling files are read in parallel; order is restored from ``entries``
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(files))) as pool:
                for path, result in zip(files, pool.map(self._read_entry, files)):
                    results[path] = result

        nodes: List[FileNode] = []
        for entry in entries:
            rel_path = self._sandbox.relative(entry)
            if entry in results:
                result = results[entry]
                if isinstance(result, Unreadable):
                    logger.warning("Failed to read file content %s: %s", entry, result.reason)
                    nodes.append(FileEntry(name=entry.name, path=rel_path))
                else:
                    nodes.append(FileEntry(name=entry.name, path=rel_path, content=result.content))
                continue

            directory = DirectoryEntry(name=entry.name, path=rel_path)
            if recursive:
                if self._sandbox.contains_real(entry):
                    directory.children = self._read_directory(entry, recursive=True)
                else:
                    logger.warning("Skipping directory symlink leaving storage root: %s", entry)
                    directory.children = []
            nodes.append(directory)

        return nodes

    def _read_entry(self, path: Path) -> ReadResult:
        if not self._sandbox.contains_real(path):
            return Unreadable("symlink target outside storage root")
        return self._read_text(path)

    @staticmethod
    def _read_text(path: Path) -> ReadResult:
        try:
            return Readable(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError:
            return Unreadable("not valid UTF-8 text")
        except OSError as e:
            return Unreadable(str(e))
