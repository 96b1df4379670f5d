"""Local extraction: fetch HTML with httpx and extract with trafilatura."""

import asyncio
import logging
from typing import Any, Optional, Tuple

import httpx
import trafilatura

from .client import ExtractionClient, build_http_client, describe_status, first_text
from .models import ExtractionError, ExtractionOutcome, ExtractionResult

logger = logging.getLogger(__name__)


def parse_html(html: str, url: str) -> Tuple[Optional[str], Any]:
    """Extract markdown and metadata from a fetched page."""
    markdown = trafilatura.extract(
        html,
        output_format="markdown",
        include_comments=False,
        include_tables=False,
        deduplicate=True,
        favor_precision=True,
        url=url,
    )
    if not markdown:
        return None, None
    return markdown, trafilatura.extract_metadata(html, default_url=url)


class TrafilaturaClient(ExtractionClient):
    """Fetch HTML and extract article text without a hosted service."""

    name = "trafilatura"

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "readlater/0.1 (save-for-later library)",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize local extractor."""
        self._client = build_http_client(
            timeout=timeout,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
            transport=transport,
        )

    async def extract(self, url: str) -> ExtractionOutcome:
        """Fetch and extract a single page."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            # Parsing is CPU bound; keep it off the event loop
            markdown, metadata = await asyncio.to_thread(
                parse_html, response.text, str(response.url)
            )
            if not markdown:
                return ExtractionError(url=url, error="Failed to extract article content")

        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            return ExtractionError(url=url, error=describe_status(code), status_code=code)
        except httpx.TimeoutException:
            return ExtractionError(url=url, error="Request timed out")
        except httpx.HTTPError as e:
            return ExtractionError(url=url, error=f"HTTP error: {e}")
        except Exception as e:
            logger.debug("Unexpected extraction failure for %s", url, exc_info=True)
            return ExtractionError(url=url, error=f"Unexpected error: {e}")

        return ExtractionResult(
            url=url,
            markdown=markdown,
            title=first_text(getattr(metadata, "title", None)),
            image=first_text(getattr(metadata, "image", None)),
            author=first_text(getattr(metadata, "author", None)),
            published_at=first_text(getattr(metadata, "date", None)),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
