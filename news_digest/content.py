"""Page content retrieval through the Jina reader proxy."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import requests

from .errors import ContentFetchError

logger = logging.getLogger(__name__)

READER_ENDPOINT = "https://r.jina.ai/"

_CONTENT_MARKERS = re.compile(r"^(Title|Markdown Content|Published Time):", re.MULTILINE)


def clean_url(url: str) -> str:
    """Drop trailing ``)`` left behind by Markdown link syntax."""
    return url.strip().rstrip(")")


def build_reader_url(url: str) -> str:
    return f"{READER_ENDPOINT}{clean_url(url)}"


def has_usable_content(text: str) -> bool:
    """Return True when reader output carries at least one section label."""
    return bool(_CONTENT_MARKERS.search(text or ""))


class Transport(Protocol):
    """Minimal protocol for retrieving a URL as text."""

    name: str

    def get(self, url: str) -> str:
        """Return the body of ``url`` or raise ``ContentFetchError``."""


@dataclass
class RequestsTransport:
    """HTTP GET through requests; non-success statuses are errors."""

    timeout: float = 30.0
    name: str = "requests"

    def get(self, url: str) -> str:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ContentFetchError(f"HTTP fetch failed for {url}: {exc}") from exc
        return response.text


@dataclass
class CurlTransport:
    """Shell fallback that runs ``curl -s`` and returns its stdout."""

    executable: str = "curl"
    name: str = "curl"

    def get(self, url: str) -> str:
        logger.info("Executing curl fallback for URL: %s", url)
        try:
            result = subprocess.run(
                [self.executable, "-s", url],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise ContentFetchError(f"Could not run {self.executable}: {exc}") from exc

        if result.returncode != 0:
            raise ContentFetchError(
                f"curl failed for {url} (exit {result.returncode}): "
                f"{result.stderr.strip() or 'Unknown error occurred with curl.'}"
            )
        logger.info("Curl succeeded for URL: %s", url)
        return result.stdout


@dataclass
class FetchedContent:
    """Reader output for a URL; ``usable`` is False when it failed the checks."""

    url: str
    text: Optional[str]
    usable: bool


class ContentFetcher:
    """Fetch reader output trying each transport in order."""

    def __init__(self, transports: Optional[Sequence[Transport]] = None):
        if transports is None:
            transports = (RequestsTransport(), CurlTransport())
        if not transports:
            raise ValueError("At least one transport is required.")
        self.transports = list(transports)

    def fetch(self, url: str) -> FetchedContent:
        target = clean_url(url)
        reader_url = build_reader_url(target)
        logger.info("Fetching from reader proxy URL: %s", reader_url)

        text = self._fetch_text(reader_url)
        logger.debug("Raw Markdown fetched: %s...", text[:500])

        if not has_usable_content(text):
            logger.warning("Reader returned unusable content for URL: %s", target)
            return FetchedContent(url=target, text=None, usable=False)
        return FetchedContent(url=target, text=text, usable=True)

    def _fetch_text(self, reader_url: str) -> str:
        *earlier, last = self.transports
        for transport in earlier:
            try:
                return transport.get(reader_url)
            except ContentFetchError as exc:
                logger.warning(
                    "Transport %s failed for %s, falling back: %s",
                    transport.name,
                    reader_url,
                    exc,
                )
        return last.get(reader_url)
