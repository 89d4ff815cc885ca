"""High-level orchestration of the daily digest run."""

from __future__ import annotations

import enum
import logging
from datetime import date
from typing import Callable, List, Optional

from .commands import Notifier
from .config import PluginSettings, parse_feed_config
from .digest import DigestWriter
from .errors import GenerationError, PipelineCategoryError
from .feeds import FeedFetcher
from .models import CategoryBlock, DigestHandle, FeedItemSummary
from .summaries import SummaryComposer

logger = logging.getLogger(__name__)

GENERATION_FALLBACK = "- Error generating summary."
CATEGORY_ERROR_PLACEHOLDER = "- Error processing this category."


class PipelineState(enum.Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    PROCESSING = "processing"
    COMPLETED = "completed"


class SummaryPipeline:
    """Builds today's digest one category at a time.

    A category that fails to fetch or summarise gets a placeholder section
    and the run moves on to the next one.
    """

    def __init__(
        self,
        settings: PluginSettings,
        writer: DigestWriter,
        notifier: Notifier,
        fetcher: Optional[FeedFetcher] = None,
        composer: Optional[SummaryComposer] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings
        self.writer = writer
        self.notifier = notifier
        self.fetcher = fetcher or FeedFetcher()
        self.composer = composer or SummaryComposer(settings)
        self._today = today
        self.state = PipelineState.IDLE
        self.current_category: Optional[str] = None

    def run(self, day: Optional[date] = None) -> DigestHandle:
        self.state = PipelineState.INITIALIZING
        handle = self.writer.open(day or self._today())
        feed_config = parse_feed_config(self.settings.feeds)
        logger.info(
            "Generating digest %s for %d categories", handle.path, len(feed_config)
        )

        self.state = PipelineState.PROCESSING
        failures = 0
        for category, feeds in feed_config.items():
            self.current_category = category
            try:
                block = self._summarize_category(category, feeds)
            except PipelineCategoryError as exc:
                failures += 1
                logger.error("%s", exc, exc_info=exc.__cause__)
                block = CategoryBlock(
                    category=category, markdown=CATEGORY_ERROR_PLACEHOLDER, failed=True
                )

            self.writer.append_section(handle, block.category, block.markdown)
            if not block.failed:
                self.notifier.notify(f'Added "{category}" section to the summary.')

        self.current_category = None
        self.state = PipelineState.COMPLETED
        logger.info(
            "Digest %s complete (%d categories, %d failed)",
            handle.path,
            len(feed_config),
            failures,
        )
        self.notifier.notify("News summary generation complete!")
        return handle

    def _summarize_category(self, category: str, feeds: List[str]) -> CategoryBlock:
        try:
            items: List[FeedItemSummary] = []
            for feed_url in feeds:
                items.extend(self.fetcher.fetch(feed_url, self.settings.max_items))

            try:
                markdown = self.composer.summarize_category(category, items)
            except GenerationError as exc:
                logger.warning("Empty summary for category '%s': %s", category, exc)
                markdown = GENERATION_FALLBACK
        except Exception as exc:  # noqa: BLE001
            raise PipelineCategoryError(
                category, f'Failed to process category "{category}": {exc}'
            ) from exc

        return CategoryBlock(category=category, items=items, markdown=markdown)
