"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
import httpx
from datetime import date
from typing import AsyncGenerator, Dict, Any, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from models.base import Base
from models.video import TrendingVideo  # noqa: F401  (registers the table)
from core.config import PipelineConfig, Settings
from ingestion.window import TrendingWindow

TRENDING_CSV_URL = "https://storage.example.com/US_youtube_trending_data.csv"
API_BASE_URL = "https://youtube.example.com/youtube/v3"

TRENDING_DAY = date(2024, 1, 15)

# vid_a appears twice; vid_c is the wrong category; vid_d trended a day earlier
TRENDING_CSV = """video_id,title,publishedAt,channelId,channelTitle,categoryId,trending_date,view_count
vid_a,Song A,2024-01-10T08:00:00Z,UC_chan_1,Channel One,10,2024-01-15T00:00:00Z,1200
vid_b,Song B,2024-01-11T09:30:00Z,UC_chan_2,Channel Two,10,2024-01-15T00:00:00Z,3400
vid_a,Song A,2024-01-10T08:00:00Z,UC_chan_1,Channel One,10,2024-01-15T00:00:00Z,1300
vid_c,Vlog C,2024-01-12T10:00:00Z,UC_chan_3,Channel Three,22,2024-01-15T00:00:00Z,900
vid_d,Song D,2024-01-09T07:00:00Z,UC_chan_4,Channel Four,10,2024-01-14T00:00:00Z,5600
vid_e,Song E,2024-01-13T12:00:00Z,UC_chan_5,Channel Five,10,2024-01-15T00:00:00Z,780
"""


def video_item(
    video_id: Optional[str],
    title: Optional[str] = "Some Song",
    channel_id: Optional[str] = "UC_chan_1",
    published_at: Optional[str] = "2024-01-10T08:00:00Z",
    duration: Optional[str] = "PT3M33S",
    view_count: Optional[str] = "1000",
) -> Dict[str, Any]:
    """A videos.list item as returned by the YouTube Data API"""
    item: Dict[str, Any] = {
        "kind": "youtube#video",
        "snippet": {"channelId": channel_id, "publishedAt": published_at, "title": title, "categoryId": "10"},
        "statistics": {"viewCount": view_count, "likeCount": "10"},
        "contentDetails": {"duration": duration},
    }
    if video_id is not None:
        item["id"] = video_id
    return item


class FakeYouTube:
    """
    In-memory stand-in for the trending export host and videos.list.

    Lookup batches containing an ID from failing_ids get a 500.
    chart_pages are served one per pageToken.
    """

    def __init__(self, csv_text: str = TRENDING_CSV, videos: Optional[List[Dict[str, Any]]] = None):
        self.csv_text = csv_text
        self.csv_status = 200
        self.videos = {v["id"]: v for v in (videos or [])}
        self.failing_ids = set()
        self.chart_pages: List[List[Dict[str, Any]]] = []
        self.chart_status = 200
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if str(request.url).startswith(TRENDING_CSV_URL):
            return httpx.Response(self.csv_status, text=self.csv_text)

        if request.url.path.endswith("/videos"):
            params = request.url.params
            if params.get("chart") == "mostPopular":
                return self._chart(params)

            ids = params.get("id", "").split(",")
            if self.failing_ids & set(ids):
                return httpx.Response(500, json={"error": {"code": 500, "message": "Backend Error"}})
            return httpx.Response(200, json={"items": [self.videos[i] for i in ids if i in self.videos]})

        return httpx.Response(404, text="not found")

    def _chart(self, params) -> httpx.Response:
        if self.chart_status != 200:
            return httpx.Response(self.chart_status, json={"error": {"code": self.chart_status}})

        token = params.get("pageToken")
        page = int(token) if token else 0
        body: Dict[str, Any] = {"items": self.chart_pages[page] if page < len(self.chart_pages) else []}
        if page + 1 < len(self.chart_pages):
            body["nextPageToken"] = str(page + 1)
        return httpx.Response(200, json=body)

    @property
    def lookup_requests(self) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path.endswith("/videos") and "id" in r.url.params
        ]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def make_config(**overrides) -> PipelineConfig:
    """PipelineConfig with test endpoints and no waiting between attempts"""
    values = dict(
        external_api_key="test-api-key",
        datastore_url="sqlite+aiosqlite:///unused.db",
        datastore_service_key="test-service-key",
        trending_csv_url=TRENDING_CSV_URL,
        api_base_url=API_BASE_URL,
        max_retries=1,
        retry_delay=0.0,
        batch_delay_seconds=0.0,
    )
    values.update(overrides)
    return PipelineConfig(**values)


def make_settings(**overrides) -> Settings:
    values = dict(
        EXTERNAL_API_KEY="test-api-key",
        DATASTORE_URL="sqlite+aiosqlite:///unused.db",
        DATASTORE_SERVICE_KEY="test-service-key",
        TRENDING_CSV_URL=TRENDING_CSV_URL,
        YOUTUBE_API_BASE_URL=API_BASE_URL,
        MAX_RETRIES=1,
        RETRY_DELAY=0.0,
        BATCH_DELAY_SECONDS=0.0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def trending_window() -> TrendingWindow:
    return TrendingWindow(day=TRENDING_DAY)


@pytest.fixture
def lookup_videos() -> List[Dict[str, Any]]:
    """videos.list payloads for every music video trending on TRENDING_DAY"""
    return [
        video_item("vid_a", title="Song A", duration="PT3M33S", view_count="1200"),
        video_item("vid_b", title="Song B", channel_id="UC_chan_2", duration="PT1H2M", view_count="3400"),
        video_item("vid_e", title="Song E", channel_id="UC_chan_5", duration="PT45S", view_count="780"),
    ]


@pytest.fixture
def fake_youtube(lookup_videos) -> FakeYouTube:
    return FakeYouTube(videos=lookup_videos)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite engine with the schema created"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'trending_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()
