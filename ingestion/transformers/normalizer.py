"""
Transform raw trending entries into canonical video records
"""

import re
from typing import Any, Optional, Callable
from pydantic import ValidationError
from datetime import datetime, timezone
from schemas.video import RawTrendingEntry, CanonicalVideoRecord
from core.exceptions import NormalizationError
from models.base import FetchStrategy
import logging

logger = logging.getLogger(__name__)

ISO8601_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_iso8601_duration(token: Any) -> Optional[int]:
    """
    Convert a PT[nH][nM][nS] duration to seconds.

    Any subset of the three components may be present. Tokens that do not
    match the whole pattern (day components, live-stream "P0D", garbage)
    and absent tokens are unknown and return None.
    """
    if not isinstance(token, str):
        return None
    match = ISO8601_DURATION.fullmatch(token.strip())
    if not match:
        return None

    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def parse_view_count(value: Any) -> int:
    """Base-10 integer parse; missing, non-numeric or negative values give 0"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        count = int(str(value).strip(), 10)
    except (ValueError, TypeError):
        return 0
    return max(count, 0)


def parse_publish_time(value: Any) -> Optional[datetime]:
    """Parse a provider timestamp into a UTC instant; unparseable gives None"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable publish time: {value!r}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class VideoNormalizer:
    """
    Normalize raw trending entries into CanonicalVideoRecord.

    Handles:
    - ISO-8601 duration parsing
    - View count parsing
    - Timestamp normalization
    - Defaults for missing optional fields

    Only an entry without an external ID is rejected.
    """

    def __init__(
        self,
        strategy: FetchStrategy,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.strategy = strategy
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def normalize(self, entry: RawTrendingEntry) -> CanonicalVideoRecord:
        """
        Normalize one raw entry.

        Raises:
            NormalizationError: If the entry has no external ID
        """
        external_id = (entry.external_id or "").strip()
        if not external_id:
            raise NormalizationError(
                "Raw item has no video ID",
                context={"field_name": "external_id", "strategy": self.strategy.value}
            )

        try:
            return CanonicalVideoRecord(
                external_id=external_id,
                channel_id=entry.channel_id,
                publish_time=parse_publish_time(entry.published_at),
                title=entry.title,
                duration_seconds=parse_iso8601_duration(entry.duration),
                initial_view_count=parse_view_count(entry.view_count),
                ingested_at=self._clock(),
            )
        except ValidationError as e:
            raise NormalizationError(
                "Raw item failed canonical record validation",
                context={"external_id": external_id, "strategy": self.strategy.value},
                original_exception=e
            )
