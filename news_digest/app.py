"""Wires settings, services and commands together."""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from .commands import (
    EDITOR_MENU,
    FILE_MENU,
    Command,
    CommandContext,
    CommandRegistry,
    Notifier,
)
from .config import AppConfig, SettingsStore, save_settings
from .content import ContentFetcher
from .digest import DigestWriter
from .feeds import FeedFetcher
from .inline import InlineSummarizer, extract_first_url
from .runner import SummaryPipeline
from .summaries import SummaryComposer

logger = logging.getLogger(__name__)

GENERATE_COMMAND = "generate-news-summary"
SUMMARIZE_URL_COMMAND = "summarize-url-inline"


class NewsDigestApp:
    """Owns the settings and registers the user-facing commands."""

    def __init__(
        self,
        config: AppConfig,
        notifier: Notifier,
        config_path: Optional[str] = None,
        composer: Optional[SummaryComposer] = None,
        feed_fetcher: Optional[FeedFetcher] = None,
        content_fetcher: Optional[ContentFetcher] = None,
    ):
        self.config = config
        self.settings = config.settings
        self.notifier = notifier
        self.composer = composer or SummaryComposer(self.settings)
        self.feed_fetcher = feed_fetcher or FeedFetcher()
        self.content_fetcher = content_fetcher or ContentFetcher()
        self.store = SettingsStore(self.settings, self._persist_settings(config_path))
        self.registry = CommandRegistry()
        self._register_commands()

    def _persist_settings(self, config_path: Optional[str]):
        if config_path is None:
            return lambda settings: None
        return partial(save_settings, config_path, prompt_file=self.config.prompt_file)

    def _register_commands(self) -> None:
        self.registry.register(
            Command(
                command_id=GENERATE_COMMAND,
                name="Generate Today's News Summary",
                handler=lambda context: self.generate_news_summary(),
                menus=(FILE_MENU,),
            )
        )
        self.registry.register(
            Command(
                command_id=SUMMARIZE_URL_COMMAND,
                name="Summarize URL Inline",
                handler=self._summarize_selection,
                menus=(EDITOR_MENU,),
                is_available=lambda context: extract_first_url(context.selection)
                is not None,
            )
        )

    def generate_news_summary(self):
        pipeline = SummaryPipeline(
            self.settings,
            DigestWriter(self.config.vault),
            self.notifier,
            fetcher=self.feed_fetcher,
            composer=self.composer,
        )
        return pipeline.run()

    def _summarize_selection(self, context: CommandContext) -> bool:
        if context.editor is None:
            raise ValueError("Summarize URL Inline needs an editor.")
        summarizer = InlineSummarizer(
            self.composer, self.notifier, fetcher=self.content_fetcher
        )
        return summarizer.run(extract_first_url(context.selection), context.editor)
