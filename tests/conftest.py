from types import SimpleNamespace

import pytest

from news_digest.config import PluginSettings
from news_digest.content import FetchedContent
from news_digest.errors import FeedFetchError
from news_digest.models import FeedItemSummary


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, message):
        self.messages.append(message)


class StubFeedFetcher:
    """Returns canned items per URL; URLs mapped to an exception raise it."""

    def __init__(self, feeds):
        self.feeds = feeds
        self.calls = []

    def fetch(self, feed_url, max_items):
        self.calls.append((feed_url, max_items))
        result = self.feeds[feed_url]
        if isinstance(result, Exception):
            raise result
        return list(result)[:max_items]


class StubComposer:
    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def summarize_category(self, category, items):
        self.calls.append((category, [item.bullet for item in items]))
        response = self.responses.get(category)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return f"Summary of {len(items)} items"
        return response

    def summarize_document(self, content):
        self.calls.append(("document", content))
        response = self.responses.get("document", "- point one\n- point two")
        if isinstance(response, BaseException):
            raise response
        return response


class StubContentFetcher:
    def __init__(self, result):
        self.result = result
        self.urls = []

    def fetch(self, url):
        self.urls.append(url)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


def completion(content):
    """Shape of an OpenAI chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    return PluginSettings(
        feeds=[
            "# Tech",
            "https://tech.example.com/rss",
            "# World",
            "https://world.example.com/rss",
        ],
        max_items=2,
        model="gpt-4o-mini",
        prompt="Summarise these.",
        api_key="sk-test-1234",
    )


@pytest.fixture
def feed_items():
    return {
        "https://tech.example.com/rss": [
            FeedItemSummary("Chip news", "https://tech.example.com/1", "New chips"),
            FeedItemSummary("AI news", "https://tech.example.com/2", "New models"),
            FeedItemSummary("Old news", "https://tech.example.com/3", "Stale"),
        ],
        "https://world.example.com/rss": [
            FeedItemSummary("Summit", "https://world.example.com/1", "Leaders met"),
        ],
        "https://broken.example.com/rss": FeedFetchError("HTTP 500"),
    }


@pytest.fixture
def usable_content():
    return FetchedContent(
        url="https://example.com/a",
        text="Title: Example\n\nMarkdown Content:\nBody text",
        usable=True,
    )
