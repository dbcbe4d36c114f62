"""
Unit tests for trending data sources
"""

import pytest
import httpx
from datetime import date
from unittest.mock import MagicMock, Mock, patch
from googleapiclient.errors import HttpError
from conftest import FakeYouTube, make_config, video_item
from ingestion.extractors import (
    BulkExportExtractor,
    MostPopularExtractor,
    ClientLibraryExtractor,
    build_extractor,
)
from ingestion.window import TrendingWindow
from core.exceptions import FetchError, RateLimitError
from models.base import FetchStrategy


class TestBuildExtractor:
    """Test strategy selection"""

    @pytest.mark.parametrize("strategy,expected", [
        (FetchStrategy.BULK_EXPORT, BulkExportExtractor),
        (FetchStrategy.DIRECT_QUERY, MostPopularExtractor),
        (FetchStrategy.CLIENT_LIBRARY, ClientLibraryExtractor),
    ])
    def test_selects_extractor(self, strategy, expected):
        extractor = build_extractor(make_config(fetch_strategy=strategy))
        assert isinstance(extractor, expected)

    def test_only_bulk_export_requires_lookup(self):
        assert BulkExportExtractor.requires_lookup is True
        assert MostPopularExtractor.requires_lookup is False
        assert ClientLibraryExtractor.requires_lookup is False


class TestBulkExportExtractor:
    """Test CSV export download, filtering and lookups"""

    @pytest.mark.asyncio
    async def test_filters_by_date_and_category(self, fake_youtube, trending_window):
        """Only music rows for the target date survive, duplicates included"""
        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            entries = await extractor.fetch_candidates(trending_window)

        assert [e.external_id for e in entries] == ["vid_a", "vid_b", "vid_a", "vid_e"]
        assert all(e.category_id == "10" for e in entries)

    @pytest.mark.asyncio
    async def test_current_window_uses_latest_date(self, fake_youtube):
        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert {e.trending_date[:10] for e in entries} == {"2024-01-15"}

    @pytest.mark.asyncio
    async def test_no_rows_for_date(self, fake_youtube):
        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            entries = await extractor.fetch_candidates(TrendingWindow(day=date(2023, 6, 1)))

        assert entries == []

    @pytest.mark.asyncio
    async def test_download_failure_raises(self, fake_youtube, trending_window):
        fake_youtube.csv_status = 404

        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(trending_window)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_unparseable_export_raises(self, trending_window):
        fake = FakeYouTube(csv_text="this is not,a trending\nexport,at all\n")

        async with fake.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(trending_window)

        assert "missing required columns" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_export_raises(self, trending_window):
        fake = FakeYouTube(csv_text="")

        async with fake.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            with pytest.raises(FetchError):
                await extractor.fetch_candidates(trending_window)

    @pytest.mark.asyncio
    async def test_lookup_requests_batch(self, fake_youtube):
        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            entries = await extractor.lookup(["vid_a", "vid_b"])

        assert [e.external_id for e in entries] == ["vid_a", "vid_b"]
        assert entries[0].duration == "PT3M33S"

        request = fake_youtube.lookup_requests[0]
        assert request.url.params["id"] == "vid_a,vid_b"
        assert request.url.params["part"] == "snippet,statistics,contentDetails"
        assert request.url.params["key"] == "test-api-key"

    @pytest.mark.asyncio
    async def test_lookup_missing_videos_are_dropped(self, fake_youtube):
        """Deleted or private videos are simply absent from the response"""
        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            entries = await extractor.lookup(["vid_a", "vid_gone"])

        assert [e.external_id for e in entries] == ["vid_a"]

    @pytest.mark.asyncio
    async def test_lookup_failure_raises(self, fake_youtube):
        fake_youtube.failing_ids = {"vid_b"}

        async with fake_youtube.client() as client:
            extractor = BulkExportExtractor(make_config(), client)
            with pytest.raises(FetchError) as exc_info:
                await extractor.lookup(["vid_a", "vid_b"])

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_no_http_client_raises(self, trending_window):
        extractor = BulkExportExtractor(make_config())
        with pytest.raises(FetchError):
            await extractor.fetch_candidates(trending_window)


class TestMostPopularExtractor:
    """Test direct chart queries"""

    @pytest.mark.asyncio
    async def test_fetch_chart(self):
        fake = FakeYouTube()
        fake.chart_pages = [[video_item("vid_1"), video_item("vid_2")]]

        async with fake.client() as client:
            extractor = MostPopularExtractor(make_config(), client)
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert [e.external_id for e in entries] == ["vid_1", "vid_2"]

        params = fake.requests[0].url.params
        assert params["chart"] == "mostPopular"
        assert params["regionCode"] == "US"
        assert params["videoCategoryId"] == "10"
        assert params["maxResults"] == "50"

    @pytest.mark.asyncio
    async def test_follows_pagination_up_to_max_results(self):
        fake = FakeYouTube()
        fake.chart_pages = [
            [video_item("vid_1"), video_item("vid_2")],
            [video_item("vid_3"), video_item("vid_4")],
            [video_item("vid_5")],
        ]

        async with fake.client() as client:
            extractor = MostPopularExtractor(make_config(max_results=3), client)
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert [e.external_id for e in entries] == ["vid_1", "vid_2", "vid_3"]
        assert len(fake.requests) == 2
        assert fake.requests[1].url.params["pageToken"] == "1"

    @pytest.mark.asyncio
    async def test_empty_chart(self):
        fake = FakeYouTube()

        async with fake.client() as client:
            extractor = MostPopularExtractor(make_config(), client)
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert entries == []

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        fake = FakeYouTube()
        fake.chart_status = 403

        async with fake.client() as client:
            extractor = MostPopularExtractor(make_config(max_retries=3), client)
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(TrendingWindow.current())

        assert exc_info.value.status_code == 403
        assert len(fake.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        responses = [
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"items": [video_item("vid_1")]}),
        ]
        calls = []

        def handler(request):
            calls.append(request)
            return responses[len(calls) - 1]

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            extractor = MostPopularExtractor(make_config(max_retries=2), client)
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert [e.external_id for e in entries] == ["vid_1"]
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "0"}, text="slow down")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            extractor = MostPopularExtractor(make_config(max_retries=2), client)
            with pytest.raises(RateLimitError):
                await extractor.fetch_candidates(TrendingWindow.current())

    @pytest.mark.asyncio
    async def test_unparseable_body_raises(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            extractor = MostPopularExtractor(make_config(), client)
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(TrendingWindow.current())

        assert "parse JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            extractor = MostPopularExtractor(make_config(), client)
            with pytest.raises(FetchError):
                await extractor.fetch_candidates(TrendingWindow.current())


class TestClientLibraryExtractor:
    """Test chart queries through google-api-python-client"""

    def _youtube(self, pages):
        youtube = MagicMock()
        youtube.videos.return_value.list.return_value.execute.side_effect = pages
        return youtube

    @pytest.mark.asyncio
    async def test_fetch_chart(self):
        youtube = self._youtube([{"items": [video_item("vid_1"), video_item("vid_2")]}])

        with patch("ingestion.extractors.client_library.build", return_value=youtube) as mock_build:
            extractor = ClientLibraryExtractor(make_config())
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert [e.external_id for e in entries] == ["vid_1", "vid_2"]
        mock_build.assert_called_once_with(
            "youtube", "v3", developerKey="test-api-key", cache_discovery=False
        )
        kwargs = youtube.videos.return_value.list.call_args.kwargs
        assert kwargs["chart"] == "mostPopular"
        assert kwargs["videoCategoryId"] == "10"

    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        youtube = self._youtube([
            {"items": [video_item("vid_1")], "nextPageToken": "p2"},
            {"items": [video_item("vid_2")]},
        ])

        with patch("ingestion.extractors.client_library.build", return_value=youtube):
            extractor = ClientLibraryExtractor(make_config())
            entries = await extractor.fetch_candidates(TrendingWindow.current())

        assert [e.external_id for e in entries] == ["vid_1", "vid_2"]
        last_call = youtube.videos.return_value.list.call_args_list[-1]
        assert last_call.kwargs["pageToken"] == "p2"

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self):
        resp = Mock(status=403, reason="Forbidden")
        error = HttpError(resp, b'{"error": {"message": "quotaExceeded"}}')
        youtube = self._youtube(error)

        with patch("ingestion.extractors.client_library.build", return_value=youtube):
            extractor = ClientLibraryExtractor(make_config())
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(TrendingWindow.current())

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_unexpected_error_raises_fetch_error(self):
        with patch("ingestion.extractors.client_library.build", side_effect=RuntimeError("no discovery")):
            extractor = ClientLibraryExtractor(make_config())
            with pytest.raises(FetchError) as exc_info:
                await extractor.fetch_candidates(TrendingWindow.current())

        assert isinstance(exc_info.value.original_exception, RuntimeError)
