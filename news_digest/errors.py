"""Exception types raised by news_digest."""

from __future__ import annotations


class NewsDigestError(Exception):
    """Base class for news_digest errors."""


class FeedFetchError(NewsDigestError):
    """Raised when a feed cannot be downloaded or parsed."""


class ContentFetchError(NewsDigestError):
    """Raised when a content transport fails to retrieve a page."""


class GenerationError(NewsDigestError):
    """Raised when the completion service returns no content."""


class PipelineCategoryError(NewsDigestError):
    """Raised when a category cannot be fetched or summarised."""

    def __init__(self, category: str, message: str):
        super().__init__(message)
        self.category = category
