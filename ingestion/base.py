"""
Abstract base class for trending data sources with HTTP retry logic
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
import asyncio
import httpx
from core.config import PipelineConfig
from core.exceptions import FetchError, RateLimitError
from ingestion.window import TrendingWindow
from models.base import FetchStrategy
from schemas.video import RawTrendingEntry
import logging

logger = logging.getLogger(__name__)

VIDEO_PARTS = "snippet,statistics,contentDetails"


class TrendingSource(ABC):
    """
    Abstract base class for all trending data sources.

    Responsibilities:
    - Acquire trending candidates for a window
    - Look up full video metadata when the candidates are bare IDs
    - Shared GET with retry and exponential backoff

    Sources that return bare IDs set requires_lookup; the runner then
    deduplicates, batches and calls lookup() for each batch.
    """

    strategy: FetchStrategy
    requires_lookup: bool = False

    def __init__(self, config: PipelineConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.http = http_client

    @abstractmethod
    async def fetch_candidates(self, window: TrendingWindow) -> List[RawTrendingEntry]:
        """
        Fetch trending candidates for the window.

        Raises:
            FetchError: If the upstream call fails
        """
        pass

    async def lookup(self, video_ids: List[str]) -> List[RawTrendingEntry]:
        """Fetch full metadata for a batch of video IDs"""
        raise NotImplementedError(f"{type(self).__name__} does not perform lookups")

    async def _list_videos(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Call the videos.list endpoint and return the decoded body"""
        url = f"{self.config.api_base_url}/videos"
        query = {"part": VIDEO_PARTS, "key": self.config.external_api_key, **params}

        response = await self._get_with_retry(url, params=query)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                "Failed to parse JSON response",
                context={"url": url, "response_body": response.text[:500]},
                original_exception=e
            )

        if not isinstance(data, dict):
            raise FetchError(
                "Unexpected response shape from videos.list",
                context={"url": url, "response_type": type(data).__name__}
            )
        return data

    async def _get_with_retry(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """
        GET with retry logic and exponential backoff.

        429, 5xx, timeouts and transport errors are retried up to
        max_retries attempts in total. Any other non-2xx status fails at once.

        Raises:
            FetchError: For non-retryable statuses or once retries run out
            RateLimitError: When still rate limited after the last attempt
        """
        if self.http is None:
            raise FetchError(
                f"{type(self).__name__} needs an HTTP client",
                context={"url": url}
            )

        max_retries = self.config.max_retries
        retry_delay = self.config.retry_delay

        for attempt in range(max_retries):
            is_last = attempt == max_retries - 1
            delay = retry_delay * (2 ** attempt)

            try:
                logger.debug(f"Request attempt {attempt + 1}/{max_retries} to {url}")
                response = await self.http.get(url, params=params, timeout=self.config.request_timeout)

            except httpx.TimeoutException as e:
                if is_last:
                    raise FetchError(
                        f"Request timeout after {max_retries} attempts",
                        context={"url": url, "timeout": self.config.request_timeout, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Request timeout. Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue

            except httpx.TransportError as e:
                if is_last:
                    raise FetchError(
                        f"Network error after {max_retries} attempts",
                        context={"url": url, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Network error. Retrying in {delay} seconds: {str(e)}")
                await asyncio.sleep(delay)
                continue

            if response.status_code == 429:
                retry_after = _retry_after(response, default=delay)
                if is_last:
                    raise RateLimitError(
                        f"Rate limit exceeded for {url}",
                        context={"url": url, "status_code": 429, "retry_count": attempt + 1},
                        retry_after=retry_after
                    )
                logger.warning(f"Rate limited. Retrying after {retry_after} seconds")
                await asyncio.sleep(retry_after)
                continue

            if response.status_code >= 500:
                if is_last:
                    raise FetchError(
                        f"Server error {response.status_code} after {max_retries} attempts",
                        context={
                            "url": url,
                            "status_code": response.status_code,
                            "retry_count": attempt + 1,
                            "response_body": response.text[:500]
                        }
                    )
                logger.warning(
                    f"Server error {response.status_code}. "
                    f"Retrying in {delay} seconds (attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            if not response.is_success:
                raise FetchError(
                    f"Request failed with status {response.status_code}",
                    context={
                        "url": url,
                        "status_code": response.status_code,
                        "response_body": response.text[:500]
                    }
                )

            return response

        # max_retries >= 1 is enforced by PipelineConfig
        raise FetchError("Max retries exceeded", context={"url": url})


def _retry_after(response: httpx.Response, default: float) -> float:
    try:
        return float(response.headers.get("Retry-After", default))
    except ValueError:
        return default
