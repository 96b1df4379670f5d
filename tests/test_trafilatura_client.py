import asyncio
import threading
import time
from types import SimpleNamespace

import httpx
import pytest

from conftest import OWNER
from readlater.db import InMemoryItemRepository
from readlater.extraction import ExtractionError, ExtractionResult, TrafilaturaClient
from readlater.extraction import trafilatura_client as module
from readlater.pipeline import BatchOrchestrator, SnapshotStatus

URL = "https://blog.test/post"
HTML = "<html><head><title>Post</title></head><body><article>Hello</article></body></html>"


def _extract(handler):
    async def runner():
        client = TrafilaturaClient(transport=httpx.MockTransport(handler))
        try:
            return await client.extract(URL)
        finally:
            await client.aclose()

    return asyncio.run(runner())


@pytest.fixture
def fake_trafilatura(monkeypatch):
    calls = {}

    def fake_extract(html, **kwargs):
        calls["extract"] = kwargs
        return calls.get("markdown", "Hello")

    def fake_metadata(html, default_url=None):
        calls["default_url"] = default_url
        return calls.get(
            "metadata",
            SimpleNamespace(
                title="Post",
                image="https://blog.test/cover.png",
                author="Linus",
                date="2023-07-04",
            ),
        )

    monkeypatch.setattr(module.trafilatura, "extract", fake_extract)
    monkeypatch.setattr(module.trafilatura, "extract_metadata", fake_metadata)
    return calls


def test_extracts_markdown_and_metadata(fake_trafilatura):
    result = _extract(lambda request: httpx.Response(200, text=HTML))

    assert isinstance(result, ExtractionResult)
    assert result.markdown == "Hello"
    assert result.title == "Post"
    assert result.image == "https://blog.test/cover.png"
    assert result.author == "Linus"
    assert result.published_at == "2023-07-04"
    assert fake_trafilatura["extract"]["output_format"] == "markdown"
    assert fake_trafilatura["default_url"] == URL


def test_missing_metadata_leaves_fields_null(fake_trafilatura):
    fake_trafilatura["metadata"] = None
    result = _extract(lambda request: httpx.Response(200, text=HTML))

    assert isinstance(result, ExtractionResult)
    assert result.title is None
    assert result.published_at is None


def test_nothing_extracted_is_a_failure(fake_trafilatura):
    fake_trafilatura["markdown"] = None
    result = _extract(lambda request: httpx.Response(200, text=HTML))

    assert isinstance(result, ExtractionError)
    assert result.error == "Failed to extract article content"


def test_not_found(fake_trafilatura):
    result = _extract(lambda request: httpx.Response(404))

    assert isinstance(result, ExtractionError)
    assert result.status_code == 404
    assert result.error == "Page not found (404)"


def test_follows_redirects(fake_trafilatura):
    def handler(request):
        if request.url.path == "/post":
            return httpx.Response(301, headers={"Location": "https://blog.test/final"})
        return httpx.Response(200, text=HTML)

    result = _extract(handler)

    assert isinstance(result, ExtractionResult)
    assert result.url == URL
    assert fake_trafilatura["default_url"] == "https://blog.test/final"


def test_parsing_runs_off_the_event_loop_thread(fake_trafilatura, monkeypatch):
    threads = []
    original = module.trafilatura.extract

    def recording_extract(html, **kwargs):
        threads.append(threading.get_ident())
        return original(html, **kwargs)

    monkeypatch.setattr(module.trafilatura, "extract", recording_extract)

    result = _extract(lambda request: httpx.Response(200, text=HTML))

    assert isinstance(result, ExtractionResult)
    assert threads and threads[0] != threading.get_ident()


def test_slow_parsing_does_not_defeat_item_timeout(fake_trafilatura, monkeypatch):
    def slow_extract(html, **kwargs):
        time.sleep(0.3)
        return "Hello"

    monkeypatch.setattr(module.trafilatura, "extract", slow_extract)
    repository = InMemoryItemRepository()
    orchestrator = BatchOrchestrator(
        repository,
        TrafilaturaClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, text=HTML))),
        item_timeout=0.05,
    )

    async def runner():
        try:
            return await orchestrator.run_batch([URL], OWNER).collect()
        finally:
            await orchestrator.aclose()

    (snapshot,) = asyncio.run(runner())

    assert snapshot.status == SnapshotStatus.FAILED
    assert snapshot.error == "Timed out after 0.05s"
