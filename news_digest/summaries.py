"""Prompt building and chat-completion summaries."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from openai import OpenAI

from .config import PluginSettings
from .errors import GenerationError
from .models import FeedItemSummary
from .templating import render

logger = logging.getLogger(__name__)

CATEGORY_TEMPLATE = "category_prompt.txt.j2"
DOCUMENT_TEMPLATE = "document_prompt.txt.j2"


def build_category_prompt(
    category: str, items: Sequence[FeedItemSummary], instructions: str
) -> str:
    """Prompt asking for a digest of one category's items."""
    return render(
        CATEGORY_TEMPLATE,
        category=category,
        items=list(items),
        instructions=instructions.strip(),
    )


def build_document_prompt(content: str) -> str:
    """Prompt asking for a Markdown summary of a single fetched page."""
    return render(DOCUMENT_TEMPLATE, content=content)


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "<unset>"
    return "***" + value[-4:]


class SummaryComposer:
    """Sends one prompt per call to the chat-completion API."""

    def __init__(self, settings: PluginSettings, client: Optional[OpenAI] = None):
        self.settings = settings
        self._client = client
        self._injected = client is not None
        self._client_key: Optional[str] = None

    @property
    def client(self) -> OpenAI:
        if self._injected:
            return self._client
        # Falls back to OPENAI_API_KEY when the settings carry no key.
        api_key = self.settings.api_key or None
        if self._client is None or api_key != self._client_key:
            logger.info("Using API key: %s", mask_secret(api_key))
            self._client = OpenAI(api_key=api_key)
            self._client_key = api_key
        return self._client

    def summarize(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or self.settings.model
        logger.debug("Completion request payload (model=%s): %s", model, prompt)
        response = self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )

        content = None
        if response.choices:
            content = response.choices[0].message.content
        logger.debug("Completion response text: %s", content)

        if not content:
            raise GenerationError(f"Model {model} returned no content.")
        return content

    def summarize_category(
        self, category: str, items: Sequence[FeedItemSummary]
    ) -> str:
        prompt = build_category_prompt(category, items, self.settings.prompt)
        logger.info(
            "Requesting summary for category '%s' with %d items", category, len(items)
        )
        return self.summarize(prompt)

    def summarize_document(self, content: str) -> str:
        return self.summarize(build_document_prompt(content))
