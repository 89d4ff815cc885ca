"""Shared data models for news_digest."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class FeedItemSummary:
    """Simplified feed item used to build category prompts."""

    title: str
    link: str
    snippet: str = ""

    @property
    def bullet(self) -> str:
        return f"- **[{self.title}]({self.link})**: {self.snippet}"


@dataclass
class CategoryBlock:
    """One category's items and the Markdown generated for them."""

    category: str
    items: List[FeedItemSummary] = field(default_factory=list)
    markdown: str = ""
    failed: bool = False


@dataclass
class DigestHandle:
    """Open digest artifact for a single run."""

    path: Path
    date_label: str
