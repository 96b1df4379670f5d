"""Extraction client interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from .models import ExtractionOutcome


class ExtractionClient(ABC):
    """Abstract base class for content extraction backends.

    Implementations must never raise from ``extract``: every transport,
    timeout or upstream failure is returned as an ``ExtractionError``.
    """

    name = "base"

    @abstractmethod
    async def extract(self, url: str) -> ExtractionOutcome:
        """
        Extract readable content from a URL.

        Args:
            url: Absolute http(s) URL

        Returns:
            ExtractionResult on success, ExtractionError otherwise
        """

    async def aclose(self) -> None:
        """Release network resources."""


def describe_status(status_code: int) -> str:
    """Turn an upstream HTTP status into a short error message."""
    if status_code == 404:
        return "Page not found (404)"
    if status_code in (401, 403):
        return f"Access denied ({status_code})"
    if status_code == 402:
        return "Extraction credits exhausted (402)"
    if status_code == 429:
        return "Rate limited (429)"
    if status_code >= 500:
        return f"Server error ({status_code})"
    return f"HTTP {status_code}"


def first_text(value: Any) -> Optional[str]:
    """Return value as a non-empty string, taking the first entry of a list."""
    if isinstance(value, (list, tuple)):
        value = next((v for v in value if isinstance(v, str) and v.strip()), None)
    if isinstance(value, str) and value.strip():
        return value
    return None


def build_http_client(
    timeout: float,
    headers: Optional[dict] = None,
    base_url: str = "",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the pooled async client shared by every call of one adapter."""
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers=headers,
        follow_redirects=True,
        transport=transport,
    )
