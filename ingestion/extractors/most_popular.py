"""
Direct "most popular" chart query against the YouTube Data API
"""

from typing import List, Dict, Any
from ingestion.base import TrendingSource
from ingestion.window import TrendingWindow
from models.base import FetchStrategy
from schemas.video import RawTrendingEntry
from core.exceptions import FetchError
import logging

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50


class MostPopularExtractor(TrendingSource):
    """
    Extract the current trending chart with videos.list?chart=mostPopular.

    One call per page returns snippet, statistics and contentDetails, so no
    lookup pass is needed. Pages are followed with nextPageToken until
    max_results items are collected or the chart ends.
    """

    strategy = FetchStrategy.DIRECT_QUERY

    async def fetch_candidates(self, window: TrendingWindow) -> List[RawTrendingEntry]:
        if not window.is_current:
            logger.warning(
                f"The mostPopular chart has no date filter; returning the current chart "
                f"instead of {window.label}"
            )

        params: Dict[str, Any] = {
            "chart": "mostPopular",
            "regionCode": self.config.region_code,
            "videoCategoryId": self.config.category_id,
        }

        items: List[Any] = []
        page = 1
        while len(items) < self.config.max_results:
            params["maxResults"] = min(MAX_PAGE_SIZE, self.config.max_results - len(items))
            logger.info(f"Fetching mostPopular page {page} ({self.config.region_code}/{self.config.category_id})")

            data = await self._list_videos(params)
            page_items = data.get("items") or []
            if not isinstance(page_items, list):
                raise FetchError(
                    "videos.list returned a non-list items field",
                    context={"page": page, "items_type": type(page_items).__name__}
                )

            items.extend(page_items)

            next_token = data.get("nextPageToken")
            if not page_items or not next_token:
                break
            params["pageToken"] = next_token
            page += 1

        items = items[:self.config.max_results]
        logger.info(f"Fetched {len(items)} chart items over {page} page(s)")
        return [RawTrendingEntry.from_api_item(item) for item in items]
