"""Summarise a single URL and insert the result below the cursor."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .commands import Notifier
from .content import ContentFetcher, clean_url
from .editor import Editor
from .errors import GenerationError
from .summaries import SummaryComposer

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"(https?://[^\s]+)")

SUMMARY_FALLBACK = "Error: Unable to summarize the content."


def extract_first_url(text: str) -> Optional[str]:
    """Return the first http(s) URL in ``text``, if any."""
    match = URL_PATTERN.search(text or "")
    return match.group(1) if match else None


def format_error_block(url: str) -> str:
    return (
        f"\n\n> **Error:** Unable to fetch meaningful content from [{url}]({url}). "
        "Please check the URL.\n"
    )


def format_summary_block(summary: str) -> str:
    quoted = "\n> ".join(summary.split("\n"))
    return f"\n\n> **Summary:**\n>\n> {quoted}\n"


class InlineSummarizer:
    def __init__(
        self,
        composer: SummaryComposer,
        notifier: Notifier,
        fetcher: Optional[ContentFetcher] = None,
    ):
        self.composer = composer
        self.notifier = notifier
        self.fetcher = fetcher or ContentFetcher()

    def run_for_selection(self, selection: str, editor: Editor) -> bool:
        url = extract_first_url(selection)
        if url is None:
            self.notifier.notify("No URL found in the selection.")
            return False
        return self.run(url, editor)

    def run(self, url: str, editor: Editor) -> bool:
        """Insert a summary of ``url``; return True when one was inserted.

        Failures are reported through the notifier and never raised.
        """
        try:
            url = clean_url(url)
            logger.info("Cleaned URL: %s", url)

            content = self.fetcher.fetch(url)
            insert_line = editor.cursor_line() + 1
            if not content.usable:
                editor.insert_at_line(insert_line, format_error_block(url))
                return False

            try:
                summary = self.composer.summarize_document(content.text)
            except GenerationError as exc:
                logger.warning("Empty summary for %s: %s", url, exc)
                summary = SUMMARY_FALLBACK

            editor.insert_at_line(insert_line, format_summary_block(summary))
            logger.debug("Generated summary: %s...", summary[:500])
            self.notifier.notify("URL summarized and inserted below the URL.")
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Error summarizing URL: %s", url)
            self.notifier.notify(
                "Failed to summarize the URL. Check the console for details."
            )
            return False
