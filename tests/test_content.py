import sys
from types import SimpleNamespace

import pytest
import requests

from news_digest import content
from news_digest.content import (
    ContentFetcher,
    CurlTransport,
    RequestsTransport,
    build_reader_url,
    clean_url,
    has_usable_content,
)
from news_digest.errors import ContentFetchError

READER_TEXT = "Title: Example\nURL Source: https://example.com/a\n\nMarkdown Content:\nHello"


class FakeTransport:
    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_clean_url_strips_trailing_parentheses():
    assert clean_url("https://example.com/a))") == "https://example.com/a"
    assert clean_url("https://example.com/(a)") == "https://example.com/(a"


def test_build_reader_url_prefixes_proxy_endpoint():
    assert build_reader_url("https://example.com/a)") == "https://r.jina.ai/https://example.com/a"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Title: Something", True),
        ("intro\nPublished Time: 2024-01-01", True),
        ("noise\nMarkdown Content:\nbody", True),
        ("<html>Just a page</html>", False),
        ("The Title: is not at line start", False),
        ("", False),
    ],
)
def test_has_usable_content(text, expected):
    assert has_usable_content(text) is expected


def test_fetch_uses_primary_transport_when_it_succeeds():
    primary = FakeTransport("primary", READER_TEXT)
    fallback = FakeTransport("fallback", AssertionError("fallback should not run"))

    result = ContentFetcher([primary, fallback]).fetch("https://example.com/a)")

    assert result.usable
    assert result.text == READER_TEXT
    assert result.url == "https://example.com/a"
    assert primary.urls == ["https://r.jina.ai/https://example.com/a"]
    assert fallback.urls == []


def test_fetch_falls_back_once_when_primary_fails():
    primary = FakeTransport("primary", ContentFetchError("HTTP 503"))
    fallback = FakeTransport("fallback", READER_TEXT)

    result = ContentFetcher([primary, fallback]).fetch("https://example.com/a")

    assert result.usable
    assert fallback.urls == ["https://r.jina.ai/https://example.com/a"]


def test_fetch_propagates_fallback_failure():
    primary = FakeTransport("primary", ContentFetchError("HTTP 503"))
    fallback = FakeTransport("fallback", ContentFetchError("curl exit 6"))

    with pytest.raises(ContentFetchError, match="curl exit 6"):
        ContentFetcher([primary, fallback]).fetch("https://example.com/a")


def test_fetch_flags_unusable_content_even_on_success():
    primary = FakeTransport("primary", "<html><body>Access denied</body></html>")

    result = ContentFetcher([primary]).fetch("https://example.com/a")

    assert result.usable is False
    assert result.text is None


def test_content_fetcher_requires_a_transport():
    with pytest.raises(ValueError):
        ContentFetcher([])


def test_requests_transport_raises_on_error_status(monkeypatch):
    def fake_get(url, timeout=None):
        def raise_for_status():
            raise requests.HTTPError("404 Client Error")

        return SimpleNamespace(text="Title: x", raise_for_status=raise_for_status)

    monkeypatch.setattr(content.requests, "get", fake_get)

    with pytest.raises(ContentFetchError, match="404"):
        RequestsTransport().get("https://r.jina.ai/https://example.com/a")


def test_requests_transport_returns_body(monkeypatch):
    captured = {}

    def fake_get(url, timeout=None):
        captured["url"] = url
        captured["timeout"] = timeout
        return SimpleNamespace(text=READER_TEXT, raise_for_status=lambda: None)

    monkeypatch.setattr(content.requests, "get", fake_get)

    assert RequestsTransport(timeout=5).get("https://r.jina.ai/x") == READER_TEXT
    assert captured == {"url": "https://r.jina.ai/x", "timeout": 5}


def test_curl_transport_returns_stdout(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return SimpleNamespace(returncode=0, stdout=READER_TEXT, stderr="")

    monkeypatch.setattr(content.subprocess, "run", fake_run)

    assert CurlTransport().get("https://r.jina.ai/x") == READER_TEXT
    assert calls == [["curl", "-s", "https://r.jina.ai/x"]]


def test_curl_transport_decodes_output_as_utf8_with_replacement(monkeypatch):
    captured = {}

    def fake_run(args, **kwargs):
        captured.update(kwargs)
        return SimpleNamespace(returncode=0, stdout=READER_TEXT, stderr="")

    monkeypatch.setattr(content.subprocess, "run", fake_run)

    CurlTransport().get("https://r.jina.ai/x")

    assert captured["encoding"] == "utf-8"
    assert captured["errors"] == "replace"
    assert "text" not in captured


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_curl_transport_survives_invalid_utf8(tmp_path):
    script = tmp_path / "fake-curl"
    script.write_text(
        "#!/bin/sh\nprintf 'Title: caf\\351\\n'\n", encoding="utf-8"
    )
    script.chmod(0o755)

    text = CurlTransport(executable=str(script)).get("https://r.jina.ai/x")

    assert text == "Title: caf\ufffd\n"


def test_curl_transport_raises_on_non_zero_exit(monkeypatch):
    monkeypatch.setattr(
        content.subprocess,
        "run",
        lambda args, **kwargs: SimpleNamespace(returncode=6, stdout="", stderr=""),
    )

    with pytest.raises(ContentFetchError, match="exit 6"):
        CurlTransport().get("https://r.jina.ai/x")


def test_curl_transport_raises_when_executable_missing(monkeypatch):
    def fake_run(args, **kwargs):
        raise FileNotFoundError("curl")

    monkeypatch.setattr(content.subprocess, "run", fake_run)

    with pytest.raises(ContentFetchError, match="Could not run curl"):
        CurlTransport().get("https://r.jina.ai/x")


def test_default_transports_try_requests_then_curl(monkeypatch):
    monkeypatch.setattr(
        content.requests,
        "get",
        lambda url, timeout=None: (_ for _ in ()).throw(requests.ConnectionError("down")),
    )
    monkeypatch.setattr(
        content.subprocess,
        "run",
        lambda args, **kwargs: SimpleNamespace(returncode=0, stdout=READER_TEXT, stderr=""),
    )

    result = ContentFetcher().fetch("https://example.com/a")

    assert result.usable
    assert result.text == READER_TEXT
