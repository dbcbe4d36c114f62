"""
Pydantic schemas for data validation and serialization.

Schemas:
    video: RawTrendingEntry (provider-native) and CanonicalVideoRecord (persisted shape)
    outcome: RunOutcome returned by every ingestion run
    api: Health check and error response models

Example:
    entry = RawTrendingEntry.from_api_item({
        "id": "dQw4w9WgXcQ",
        "snippet": {"channelId": "UC38IQsAvIsxxjztdMZQtwHA", "title": "Never Gonna Give You Up"},
        "statistics": {"viewCount": "1500000000"},
        "contentDetails": {"duration": "PT3M33S"}
    })
    assert entry.duration == "PT3M33S"
"""

__all__ = [
    "RawTrendingEntry",
    "CanonicalVideoRecord",
    "RunOutcome",
    "HealthCheckResponse",
    "ErrorResponse",
]
