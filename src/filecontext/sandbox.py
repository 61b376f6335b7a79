"""Path sandbox: every client supplied path is resolved against one storage root."""

import logging
import os
import re
from pathlib import Path

from .errors import InvalidRequest, SandboxViolation

logger = logging.getLogger(__name__)

STORAGE_ALIAS = "storage"

_REPEATED_SEPARATORS = re.compile(r"/{2,}")


def normalize_path_ref(path_ref: str) -> str:
    """Normalize a client path into a root-relative, forward-slash form.

    Backslashes become ``/``, repeated separators collapse, and leading ``/``,
    ``./`` and ``storage/`` prefixes are stripped. Any ``..`` segment raises
    :class:`SandboxViolation`, even one that would climb back into the root.
    """
    if "\x00" in path_ref:
        raise InvalidRequest("Invalid path: contains NUL byte")

    cleaned = path_ref.strip().replace("\\", "/")
    cleaned = _REPEATED_SEPARATORS.sub("/", cleaned)
    cleaned = cleaned.lstrip("/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    if cleaned == STORAGE_ALIAS:
        cleaned = ""
    elif cleaned.startswith(STORAGE_ALIAS + "/"):
        cleaned = cleaned[len(STORAGE_ALIAS) + 1:]

    segments = cleaned.split("/")
    if ".." in segments:
        raise SandboxViolation(f"Path escapes storage root: {path_ref}")

    return "/".join(s for s in segments if s and s != ".")


class PathSandbox:
    """Resolves relative paths inside a fixed storage root.

    The check is purely lexical and happens before any filesystem access,
    so a rejected path is never stat'ed, listed, read, written or deleted.
    """

    def __init__(self, storage_root: str | Path):
        """Bind the sandbox to a storage root.

        Args:
            storage_root: Directory all paths resolve against. Made absolute
                once here and never changed afterwards.
        """
        self._root = Path(os.path.abspath(storage_root))
        self._root_str = str(self._root)

    @property
    def root(self) -> Path:
        """Absolute storage root."""
        return self._root

    def resolve(self, path_ref: str | None) -> Path:
        """Resolve a client path to an absolute path inside the root.

        Args:
            path_ref: Path relative to the storage root. ``None``, ``""``
                and ``"."`` mean the root itself.

        Returns:
            Absolute path equal to or below the root

        Raises:
            SandboxViolation: If the path would leave the root
            InvalidRequest: If the path is syntactically unusable
        """
        if path_ref is None or path_ref.strip() in ("", "."):
            return self._root

        relative = normalize_path_ref(path_ref)
        if not relative:
            return self._root

        candidate = os.path.normpath(os.path.join(self._root_str, relative))
        if not self._is_within(candidate):
            logger.warning("Rejected path outside storage root: %r", path_ref)
            raise SandboxViolation(f"Path escapes storage root: {path_ref}")

        return Path(candidate)

    def relative(self, abs_path: str | Path) -> str:
        """Forward-slash path relative to the root ("" for the root itself)."""
        rel = os.path.relpath(os.fspath(abs_path), self._root_str)
        if rel == ".":
            return ""
        return Path(rel).as_posix()

    def contains_real(self, abs_path: str | Path) -> bool:
        """Check that the path's real location (symlinks followed) stays inside the root."""
        real_root = os.path.realpath(self._root_str)
        real_path = os.path.realpath(os.fspath(abs_path))
        return real_path == real_root or real_path.startswith(real_root.rstrip(os.sep) + os.sep)

    def _is_within(self, candidate: str) -> bool:
        # Exact prefix plus separator, so "/data/storageX" is not inside "/data/storage"
        return candidate == self._root_str or candidate.startswith(
            self._root_str.rstrip(os.sep) + os.sep
        )
