"""Content extraction backends."""

from .client import ExtractionClient
from .firecrawl import FirecrawlClient
from .models import ExtractionError, ExtractionOutcome, ExtractionResult
from .trafilatura_client import TrafilaturaClient

__all__ = [
    "ExtractionClient",
    "FirecrawlClient",
    "TrafilaturaClient",
    "ExtractionResult",
    "ExtractionError",
    "ExtractionOutcome",
]
