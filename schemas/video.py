"""
Pydantic schemas for raw trending entries and canonical video records
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Any, Dict
from datetime import datetime


class RawTrendingEntry(BaseModel):
    """
    Provider-native view of one video's trending appearance.

    Lives for a single run. Building one never raises: missing fields stay
    None and it is the normalizer's job to decide what is fatal.
    """

    external_id: Optional[str] = None
    channel_id: Optional[str] = None
    published_at: Optional[str] = None
    title: Optional[str] = None
    duration: Optional[str] = None
    view_count: Optional[Any] = None

    # Bulk export rows only
    trending_date: Optional[str] = None
    category_id: Optional[str] = None

    @classmethod
    def from_api_item(cls, item: Any) -> "RawTrendingEntry":
        """Build from a videos.list item (snippet, statistics, contentDetails)."""
        if not isinstance(item, dict):
            return cls()

        snippet = _section(item, "snippet")
        statistics = _section(item, "statistics")
        content_details = _section(item, "contentDetails")

        return cls(
            external_id=_text(item.get("id")),
            channel_id=_text(snippet.get("channelId")),
            published_at=_text(snippet.get("publishedAt")),
            title=_text(snippet.get("title")),
            duration=_text(content_details.get("duration")),
            view_count=statistics.get("viewCount"),
            category_id=_text(snippet.get("categoryId")),
        )

    @classmethod
    def from_csv_row(cls, row: Dict[str, Any]) -> "RawTrendingEntry":
        """Build from a row of the bulk trending export."""
        return cls(
            external_id=_text(row.get("video_id")),
            channel_id=_text(row.get("channelId")),
            published_at=_text(row.get("publishedAt")),
            title=_text(row.get("title")),
            view_count=row.get("view_count"),
            trending_date=_text(row.get("trending_date")),
            category_id=_text(row.get("categoryId")),
        )


class CanonicalVideoRecord(BaseModel):
    """
    Persisted shape of a trending video.

    Ensures:
    - external_id is present and non-empty
    - counts and durations are never negative
    - title is never None
    """

    model_config = ConfigDict(from_attributes=True)

    external_id: str = Field(..., min_length=1, max_length=64)
    channel_id: Optional[str] = Field(None, max_length=64)
    publish_time: Optional[datetime] = None
    title: str = ""
    duration_seconds: Optional[int] = Field(None, ge=0)
    initial_view_count: int = Field(0, ge=0)
    ingested_at: datetime

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        """Absent titles become an empty string"""
        return "" if v is None else v


def _section(item: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = item.get(key)
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value != value:  # NaN from pandas
        return None
    value = str(value)
    return value if value != "" else None
