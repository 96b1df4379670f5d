"""Extraction through the Firecrawl scrape API."""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .client import ExtractionClient, build_http_client, describe_status, first_text
from .models import ExtractionError, ExtractionOutcome, ExtractionResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.firecrawl.dev"
SCRAPE_PATH = "/v2/scrape"
METADATA_PROMPT = "Extract the author and published date of the article"


class FirecrawlClient(ExtractionClient):
    """Scrape a URL to markdown plus an author/date side channel."""

    name = "firecrawl"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        country: str = "US",
        languages: Sequence[str] = ("en",),
        only_main_content: bool = True,
        proxy: Optional[str] = "auto",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize Firecrawl client.

        Args:
            api_key: Firecrawl API key
            base_url: API root (override for self-hosted instances)
            timeout: Request timeout in seconds
            country: Location country code sent with each scrape
            languages: Preferred content languages
            only_main_content: Strip navigation, footers and sidebars
            proxy: Proxy mode ("basic", "stealth", "auto"), None to omit
            transport: Optional httpx transport (for testing)
        """
        self.country = country
        self.languages: List[str] = list(languages)
        self.only_main_content = only_main_content
        self.proxy = proxy
        self._client = build_http_client(
            timeout=timeout,
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    def build_payload(self, url: str) -> Dict[str, Any]:
        """Build the scrape request body."""
        payload: Dict[str, Any] = {
            "url": url,
            "formats": [
                "markdown",
                {"type": "json", "prompt": METADATA_PROMPT},
            ],
            "onlyMainContent": self.only_main_content,
            "location": {
                "country": self.country,
                "languages": self.languages,
            },
        }
        if self.proxy:
            payload["proxy"] = self.proxy
        return payload

    async def extract(self, url: str) -> ExtractionOutcome:
        """Scrape a single URL."""
        try:
            response = await self._client.post(SCRAPE_PATH, json=self.build_payload(url))
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            return ExtractionError(url=url, error=describe_status(code), status_code=code)
        except httpx.TimeoutException:
            return ExtractionError(url=url, error="Request timed out")
        except httpx.HTTPError as e:
            return ExtractionError(url=url, error=f"HTTP error: {e}")
        except ValueError:
            return ExtractionError(url=url, error="Invalid JSON in scrape response")
        except Exception as e:
            logger.debug("Unexpected scrape failure for %s", url, exc_info=True)
            return ExtractionError(url=url, error=f"Unexpected error: {e}")

        if not isinstance(body, dict) or not body.get("success", False):
            error = body.get("error") if isinstance(body, dict) else None
            return ExtractionError(url=url, error=first_text(error) or "Scrape failed")

        data = body.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return ExtractionError(url=url, error="Malformed scrape response")

        return self._parse_document(url, data)

    def _parse_document(self, url: str, data: Dict[str, Any]) -> ExtractionResult:
        """Map a scrape document onto an ExtractionResult."""
        metadata = data.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}

        # The structured block is best effort; a missing one only loses author/date
        extracted = data.get("json")
        if not isinstance(extracted, dict):
            extracted = {}

        return ExtractionResult(
            url=url,
            markdown=first_text(data.get("markdown")),
            title=first_text(metadata.get("title")),
            image=first_text(metadata.get("ogImage")),
            author=first_text(extracted.get("author")),
            published_at=first_text(extracted.get("publishedAt")),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
