"""Data models for content extraction."""

from typing import Optional, Union

from pydantic import BaseModel, Field


class ExtractionResult(BaseModel):
    """Structured content extracted from a URL."""

    url: str = Field(..., description="Requested URL")
    markdown: Optional[str] = Field(None, description="Main content as markdown")
    title: Optional[str] = Field(None, description="Page title")
    image: Optional[str] = Field(None, description="Hero image URL")
    author: Optional[str] = Field(None, description="Author from structured extraction")
    published_at: Optional[str] = Field(
        None, description="Raw publication date from structured extraction, unparsed"
    )


class ExtractionError(BaseModel):
    """Extraction failure, returned rather than raised."""

    url: str = Field(..., description="Requested URL")
    error: str = Field(..., description="Human readable cause")
    status_code: Optional[int] = Field(None, description="Upstream HTTP status, if any")


ExtractionOutcome = Union[ExtractionResult, ExtractionError]
