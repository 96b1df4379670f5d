"""Turn an extraction result into the fields stored on a saved item."""

from datetime import datetime, timezone
from typing import Any, Optional

import pendulum

from ..extraction import ExtractionResult
from ..models import ItemContent


def _text(value: Optional[str], strip: bool = True) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip() if strip else value


def parse_published_at(value: Any) -> Optional[datetime]:
    """
    Parse a publication date leniently.

    Anything that does not parse to a point in time yields None instead of
    raising. Naive values are taken as UTC; the result is always UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = pendulum.parse(text, strict=False)
        except (ValueError, TypeError, OverflowError):
            return None

    if not isinstance(parsed, datetime):
        # Durations, bare times and the like
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    try:
        utc = parsed.astimezone(timezone.utc)
        return datetime(
            utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second, utc.microsecond,
            tzinfo=timezone.utc,
        )
    except (OverflowError, ValueError):
        # Valid offset date that falls outside the datetime range once in UTC
        return None


def build_item_content(result: ExtractionResult) -> ItemContent:
    """Build the normalized content written on success."""
    return ItemContent(
        title=_text(result.title),
        content=_text(result.markdown, strip=False),
        original_image=_text(result.image),
        author=_text(result.author),
        published_at=parse_published_at(result.published_at),
    )
