"""Per-item outcomes of the ingestion step."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..models import SavedItem


class FailureStage(str, Enum):
    """Where in the per-item step a failure happened."""

    CREATE = "create"
    EXTRACT = "extract"
    UPDATE = "update"


class ItemSucceeded(BaseModel):
    """The item was extracted and stored as COMPLETED."""

    url: str
    item: SavedItem


class ItemFailed(BaseModel):
    """The item could not be completed."""

    url: str
    stage: FailureStage
    error: str
    item_id: Optional[str] = Field(None, description="None when creation itself failed")
    item: Optional[SavedItem] = Field(None, description="The FAILED row, when it was written")
    recorded: bool = Field(
        True, description="False when the FAILED status could not be persisted"
    )


ItemOutcome = Union[ItemSucceeded, ItemFailed]
