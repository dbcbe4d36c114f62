"""
Bulk CSV export extractor with batched metadata lookup
"""

import io
import pandas as pd
from typing import List
from ingestion.base import TrendingSource
from ingestion.window import TrendingWindow
from models.base import FetchStrategy
from schemas.video import RawTrendingEntry
from core.exceptions import FetchError
import logging

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("video_id", "trending_date", "categoryId")


class BulkExportExtractor(TrendingSource):
    """
    Extract trending candidates from the daily trending CSV export.

    The export only identifies which videos trended; statistics, duration
    and publish info come from lookup() against videos.list in batches.

    Supports:
    - Date filter on trending_date (YYYY-MM-DD prefix)
    - Category filter on categoryId
    - "current" window resolving to the newest date in the export
    """

    strategy = FetchStrategy.BULK_EXPORT
    requires_lookup = True

    async def fetch_candidates(self, window: TrendingWindow) -> List[RawTrendingEntry]:
        url = self.config.trending_csv_url
        logger.info(f"Downloading trending export from {url}")

        response = await self._get_with_retry(url)
        df = self._parse(response.text, url)

        dates = df["trending_date"].str.slice(0, 10)
        if window.is_current:
            if df.empty:
                return []
            target_date = dates.max()
            logger.info(f"Current window resolved to latest export date {target_date}")
        else:
            target_date = window.day.isoformat()

        mask = (dates == target_date) & (df["categoryId"].str.strip() == self.config.category_id)
        filtered = df[mask]

        logger.info(
            f"Found {len(filtered)} rows for {target_date} in category {self.config.category_id} "
            f"(export has {len(df)} rows)"
        )
        return [RawTrendingEntry.from_csv_row(row) for row in filtered.to_dict(orient="records")]

    async def lookup(self, video_ids: List[str]) -> List[RawTrendingEntry]:
        """
        Fetch snippet, statistics and contentDetails for one batch of IDs.

        Raises:
            FetchError: If the batch request fails
        """
        data = await self._list_videos({"id": ",".join(video_ids), "maxResults": len(video_ids)})
        items = data.get("items") or []

        if len(items) < len(video_ids):
            logger.debug(f"videos.list returned {len(items)} of {len(video_ids)} requested videos")
        return [RawTrendingEntry.from_api_item(item) for item in items]

    @staticmethod
    def _parse(text: str, url: str) -> pd.DataFrame:
        try:
            df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise FetchError(
                "Trending export is not parseable as CSV",
                context={"url": url},
                original_exception=e
            )

        df.columns = df.columns.str.strip()
        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise FetchError(
                "Trending export is missing required columns",
                context={"url": url, "missing_columns": ", ".join(missing)}
            )
        return df
