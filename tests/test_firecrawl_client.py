import asyncio
import json

import httpx
import pytest

from readlater.extraction import ExtractionError, ExtractionResult, FirecrawlClient
from readlater.extraction.firecrawl import METADATA_PROMPT

URL = "https://news.test/story"


def _extract(handler, **kwargs):
    seen = []

    def recording(request):
        seen.append(request)
        return handler(request)

    async def runner():
        client = FirecrawlClient(
            api_key="fc-test",
            transport=httpx.MockTransport(recording),
            **kwargs,
        )
        try:
            return await client.extract(URL)
        finally:
            await client.aclose()

    return asyncio.run(runner()), seen


def _document(**data):
    return {"success": True, "data": data}


def test_successful_scrape_maps_all_fields():
    body = _document(
        markdown="# Story\n\nText",
        metadata={"title": "Story", "ogImage": "https://news.test/hero.jpg"},
        json={"author": "Ada Lovelace", "publishedAt": "2024-03-01"},
    )

    result, seen = _extract(lambda request: httpx.Response(200, json=body))

    assert isinstance(result, ExtractionResult)
    assert result.url == URL
    assert result.markdown == "# Story\n\nText"
    assert result.title == "Story"
    assert result.image == "https://news.test/hero.jpg"
    assert result.author == "Ada Lovelace"
    assert result.published_at == "2024-03-01"

    (request,) = seen
    assert request.method == "POST"
    assert request.url == httpx.URL("https://api.firecrawl.dev/v2/scrape")
    assert request.headers["Authorization"] == "Bearer fc-test"


def test_request_asks_for_markdown_and_structured_metadata():
    _, seen = _extract(
        lambda request: httpx.Response(200, json=_document(markdown="x")),
        country="DE",
        languages=["de", "en"],
        proxy=None,
    )

    payload = json.loads(seen[0].content)
    assert payload["url"] == URL
    assert payload["formats"] == ["markdown", {"type": "json", "prompt": METADATA_PROMPT}]
    assert payload["onlyMainContent"] is True
    assert payload["location"] == {"country": "DE", "languages": ["de", "en"]}
    assert "proxy" not in payload


def test_custom_base_url():
    _, seen = _extract(
        lambda request: httpx.Response(200, json=_document(markdown="x")),
        base_url="http://firecrawl.internal:3002/",
    )
    assert seen[0].url == httpx.URL("http://firecrawl.internal:3002/v2/scrape")


def test_list_valued_metadata_takes_first_entry():
    body = _document(
        markdown="x",
        metadata={"title": ["", "Real title", "Other"], "ogImage": []},
    )
    result, _ = _extract(lambda request: httpx.Response(200, json=body))

    assert result.title == "Real title"
    assert result.image is None


def test_missing_structured_block_is_not_a_failure():
    body = _document(markdown="x", metadata={"title": "T"})
    result, _ = _extract(lambda request: httpx.Response(200, json=body))

    assert isinstance(result, ExtractionResult)
    assert result.author is None
    assert result.published_at is None


def test_non_string_structured_values_are_ignored():
    body = _document(markdown="x", json={"author": {"name": "Ada"}, "publishedAt": 20240301})
    result, _ = _extract(lambda request: httpx.Response(200, json=body))

    assert result.author is None
    assert result.published_at is None


def test_http_errors_become_extraction_errors():
    result, _ = _extract(lambda request: httpx.Response(402, json={"error": "no credits"}))

    assert isinstance(result, ExtractionError)
    assert result.status_code == 402
    assert "credits" in result.error


def test_server_error():
    result, _ = _extract(lambda request: httpx.Response(503))
    assert result.error == "Server error (503)"


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    result, _ = _extract(handler)
    assert isinstance(result, ExtractionError)
    assert result.error == "Request timed out"


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result, _ = _extract(handler)
    assert isinstance(result, ExtractionError)
    assert result.error.startswith("HTTP error")


def test_unsuccessful_body():
    result, _ = _extract(
        lambda request: httpx.Response(200, json={"success": False, "error": "blocked by robots"})
    )
    assert isinstance(result, ExtractionError)
    assert result.error == "blocked by robots"


def test_invalid_json_body():
    result, _ = _extract(lambda request: httpx.Response(200, text="<html>oops</html>"))
    assert isinstance(result, ExtractionError)
    assert "Invalid JSON" in result.error


@pytest.mark.parametrize("data", [["oops"], "oops", 42])
def test_non_object_document_is_an_extraction_error(data):
    result, _ = _extract(lambda request: httpx.Response(200, json={"success": True, "data": data}))

    assert isinstance(result, ExtractionError)
    assert result.error == "Malformed scrape response"
