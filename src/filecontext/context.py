"""Context assembly: turn selected file entries into one bounded context string."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from .filetypes import is_text_file
from .models import ContextItem, DirectoryEntry, FileEntry, FileNode

logger = logging.getLogger(__name__)

FILE_TRUNCATION_MARKER = "... [content truncated]"
LINE_TRUNCATION_MARKER = "\n... (truncated)"
HARD_TRUNCATION_MARKER = "... (truncated)"
MAX_TOTAL_MARKER_LENGTH = max(len(LINE_TRUNCATION_MARKER), len(HARD_TRUNCATION_MARKER))

# A newline cut is only used when it keeps more than this share of the limit
NATURAL_BREAK_RATIO = 0.8


def flatten(nodes: Iterable[FileNode]) -> Iterator[FileEntry]:
    """Yield file entries depth-first, in input order."""
    for node in nodes:
        if isinstance(node, DirectoryEntry):
            yield from flatten(node.children or [])
        else:
            yield node


def truncate_total(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, preferring the last line break.

    The cut happens at the last newline when that newline lies beyond 80% of
    the limit; otherwise at the hard limit. A marker is appended either way,
    so the result is at most ``limit + MAX_TOTAL_MARKER_LENGTH`` long.
    """
    if not text or len(text) <= limit:
        return text

    truncated = text[:limit]
    last_newline = truncated.rfind("\n")
    if last_newline > limit * NATURAL_BREAK_RATIO:
        return truncated[:last_newline] + LINE_TRUNCATION_MARKER

    return truncated + HARD_TRUNCATION_MARKER


class ContextAssembler:
    """Filters, truncates and renders file entries as prompt context.

    Two truncation stages bound both a single huge file (``per_file_limit``)
    and many small files (``total_limit``). Lengths are counted in characters.
    """

    def __init__(self, per_file_limit: int = 1000, total_limit: int = 4000):
        self.per_file_limit = per_file_limit
        self.total_limit = total_limit

    def items(
        self, nodes: Iterable[FileNode], per_file_limit: Optional[int] = None
    ) -> List[ContextItem]:
        """Eligible files as context items, per-file truncation applied.

        Eligible means: a file entry, content present, text-like extension.
        Unsupported files are dropped silently.
        """
        limit = self.per_file_limit if per_file_limit is None else per_file_limit
        items: List[ContextItem] = []
        skipped = 0

        for entry in flatten(nodes):
            if entry.content is None or not is_text_file(entry.path):
                skipped += 1
                continue

            text = entry.content
            if len(text) > limit:
                text = text[:limit] + FILE_TRUNCATION_MARKER
            items.append(ContextItem(label=entry.path, text=text))

        if skipped:
            logger.debug("Excluded %d entries from context (no content or not text)", skipped)
        return items

    def render(self, items: Iterable[ContextItem]) -> str:
        return "\n\n".join(f"File: {item.label}\n{item.text}" for item in items)

    def assemble(
        self,
        nodes: Iterable[FileNode],
        per_file_limit: Optional[int] = None,
        total_limit: Optional[int] = None,
    ) -> str:
        """Build the context string for a set of entries.

        Args:
            nodes: Entries, possibly nested
            per_file_limit: Character cap per file (default: instance setting)
            total_limit: Character cap for the joined text (default: instance setting)

        Returns:
            ``"File: <path>\\n<content>"`` blocks separated by blank lines
        """
        items = self.items(nodes, per_file_limit)
        joined = self.render(items)
        limit = self.total_limit if total_limit is None else total_limit
        context = truncate_total(joined, limit)

        logger.debug(
            "Assembled context: %d files, %d chars (truncated=%s)",
            len(items),
            len(context),
            len(joined) > limit,
        )
        return context
