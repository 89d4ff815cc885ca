"""Editing surfaces that summaries can be inserted into."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class Editor(Protocol):
    """The parts of an editor the inline summarizer needs."""

    def cursor_line(self) -> int:
        """Zero-based line of the cursor or end of selection."""

    def get_selection(self) -> str:
        ...

    def insert_at_line(self, line: int, text: str) -> None:
        """Insert ``text`` at the start of ``line`` (end of document if past it)."""


def insert_at_line(document: str, line: int, text: str) -> str:
    """Return ``document`` with ``text`` inserted at the start of ``line``."""
    lines = document.splitlines(keepends=True)
    if line >= len(lines):
        return document + text
    offset = sum(len(part) for part in lines[: max(line, 0)])
    return document[:offset] + text + document[offset:]


class MarkdownFileEditor:
    """Treats a Markdown note on disk as the editor.

    The cursor is a line number; the selection defaults to that line.
    """

    def __init__(self, path: str | Path, line: int = 0, selection: str | None = None):
        self.path = Path(path)
        self.line = line
        self._selection = selection

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def cursor_line(self) -> int:
        return self.line

    def get_selection(self) -> str:
        if self._selection is not None:
            return self._selection
        lines = self.read().splitlines()
        if 0 <= self.line < len(lines):
            return lines[self.line]
        return ""

    def insert_at_line(self, line: int, text: str) -> None:
        self.path.write_text(insert_at_line(self.read(), line, text), encoding="utf-8")
        logger.debug("Inserted %d characters at line %d of %s", len(text), line, self.path)
