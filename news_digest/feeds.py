"""Feed download and item extraction."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import feedparser
import requests
from bs4 import BeautifulSoup

from .errors import FeedFetchError
from .models import FeedItemSummary

logger = logging.getLogger(__name__)


def _strip_html(raw_value: str) -> str:
    """Return text content extracted from HTML fragments."""
    soup = BeautifulSoup(raw_value, "html.parser")
    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+([.,;:!?])", r"\1", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()


def _raw_content(entry) -> Optional[str]:
    content = getattr(entry, "content", None)
    if not content:
        return None
    try:
        return content[0].get("value")
    except (TypeError, KeyError, IndexError, AttributeError):
        return None


def select_snippet(entry) -> str:
    """Pick the best available text for an entry.

    Order: content snippet (tag-free content), summary, raw content.
    """
    raw_content = _raw_content(entry)
    if raw_content:
        snippet = _strip_html(raw_content)
        if snippet:
            return snippet

    summary = getattr(entry, "summary", None)
    if not summary:
        summary_detail = getattr(entry, "summary_detail", None)
        if summary_detail:
            summary = summary_detail.get("value")
    if summary:
        stripped = _strip_html(summary)
        if stripped:
            return stripped

    return (raw_content or "").strip()


class FeedFetcher:
    """Downloads a feed and returns its first items in feed order."""

    def __init__(self, timeout: float = 10.0, session=None):
        self.timeout = timeout
        self._http = session or requests

    def fetch(self, feed_url: str, max_items: int) -> List[FeedItemSummary]:
        if max_items < 1:
            raise ValueError("max_items must be at least 1.")

        logger.info("Fetching feed %s", feed_url)
        try:
            response = self._http.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FeedFetchError(f"Failed to fetch feed {feed_url}: {exc}") from exc

        parsed = feedparser.parse(response.content)
        if getattr(parsed, "bozo", False) and not parsed.entries:
            raise FeedFetchError(
                f"Feed {feed_url} could not be parsed: {getattr(parsed, 'bozo_exception', None)}"
            )

        items: List[FeedItemSummary] = []
        for entry in parsed.entries[:max_items]:
            items.append(
                FeedItemSummary(
                    title=getattr(entry, "title", "") or "",
                    link=getattr(entry, "link", "") or "",
                    snippet=select_snippet(entry),
                )
            )

        logger.info(
            "Collected %d of %d entries from feed %s",
            len(items),
            len(parsed.entries),
            feed_url,
        )
        return items
