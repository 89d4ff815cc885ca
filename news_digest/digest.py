"""Dated Markdown digest file written one section at a time."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from .models import DigestHandle

logger = logging.getLogger(__name__)

DIGEST_FOLDER = "News Summaries"


def format_date(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def digest_relative_path(day: date) -> Path:
    return Path(DIGEST_FOLDER) / f"{format_date(day)} News Summary.md"


def render_section(category: str, body: str) -> str:
    return f"## {category}\n\n{body}\n\n---\n"


class DigestWriter:
    """Owns the digest file under ``root`` for a single run.

    Every section goes straight to disk so completed categories survive a
    crash later in the run.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def open(self, day: date) -> DigestHandle:
        label = format_date(day)
        path = self.root / digest_relative_path(day)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# Today's News Summary - {label}\n\n", encoding="utf-8")
        logger.info("Started digest %s", path)
        return DigestHandle(path=path, date_label=label)

    def append_section(self, handle: DigestHandle, category: str, body: str) -> None:
        with handle.path.open("a", encoding="utf-8") as fh:
            fh.write(render_section(category, body))
        logger.debug("Appended section '%s' to %s", category, handle.path)
