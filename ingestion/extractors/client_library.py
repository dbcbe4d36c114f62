"""
Most popular chart query through google-api-python-client
"""

import asyncio
from typing import List, Dict, Any, Optional
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from ingestion.base import TrendingSource, VIDEO_PARTS
from ingestion.extractors.most_popular import MAX_PAGE_SIZE
from ingestion.window import TrendingWindow
from models.base import FetchStrategy
from schemas.video import RawTrendingEntry
from core.exceptions import FetchError
import logging

logger = logging.getLogger(__name__)


class ClientLibraryExtractor(TrendingSource):
    """
    Same chart query as MostPopularExtractor, mediated by the Google client.

    The client is synchronous, so the whole paginated query runs in a
    worker thread and the event loop awaits it as one step.
    """

    strategy = FetchStrategy.CLIENT_LIBRARY

    async def fetch_candidates(self, window: TrendingWindow) -> List[RawTrendingEntry]:
        if not window.is_current:
            logger.warning(f"Client chart query ignores window {window.label}; using the current chart")

        try:
            items = await asyncio.to_thread(self._query_chart)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            raise FetchError(
                f"YouTube API error: {status}",
                context={"status_code": int(status) if status else None, "strategy": self.strategy.value},
                original_exception=e
            )
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(
                "Unexpected error during client chart query",
                context={"strategy": self.strategy.value},
                original_exception=e
            )

        logger.info(f"Client library returned {len(items)} chart items")
        return [RawTrendingEntry.from_api_item(item) for item in items]

    def _query_chart(self) -> List[Dict[str, Any]]:
        youtube = build("youtube", "v3", developerKey=self.config.external_api_key, cache_discovery=False)

        items: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while len(items) < self.config.max_results:
            request_args = {
                "part": VIDEO_PARTS,
                "chart": "mostPopular",
                "regionCode": self.config.region_code,
                "videoCategoryId": self.config.category_id,
                "maxResults": min(MAX_PAGE_SIZE, self.config.max_results - len(items)),
            }
            if page_token:
                request_args["pageToken"] = page_token

            response = youtube.videos().list(**request_args).execute()
            page_items = response.get("items") or []
            items.extend(page_items)

            page_token = response.get("nextPageToken")
            if not page_items or not page_token:
                break

        return items[:self.config.max_results]
