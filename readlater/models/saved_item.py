"""Saved item model: one row per submitted URL."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import DBModel
from .status import ItemStatus


class ItemContent(BaseModel):
    """Normalized content fields written when an item completes."""

    title: Optional[str] = Field(None, description="Page title")
    content: Optional[str] = Field(None, description="Extracted body as markdown")
    original_image: Optional[str] = Field(None, description="Hero image URL")
    author: Optional[str] = Field(None, description="Article author")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp (UTC)")


class SavedItem(DBModel):
    """Saved item model."""

    user_id: str = Field(..., description="Owning principal")
    url: str = Field(..., description="Source URL as submitted")
    status: ItemStatus = Field(ItemStatus.PENDING, description="Processing status")
    title: Optional[str] = Field(None, description="Page title")
    content: Optional[str] = Field(None, description="Extracted body as markdown")
    original_image: Optional[str] = Field(None, description="Hero image URL")
    author: Optional[str] = Field(None, description="Article author")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    summary: Optional[str] = Field(None, description="AI summary, filled by a separate step")
    tags: Optional[List[str]] = Field(None, description="Tags, filled by a separate step")

    def content_fields(self) -> ItemContent:
        """Return the extraction-owned fields of this item."""
        return ItemContent(
            title=self.title,
            content=self.content,
            original_image=self.original_image,
            author=self.author,
            published_at=self.published_at,
        )
