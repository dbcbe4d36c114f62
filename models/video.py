from sqlalchemy import Column, String, BigInteger, Integer, DateTime, Index
from models.base import Base


# SQLite only auto-increments INTEGER PRIMARY KEY columns
PrimaryKeyType = BigInteger().with_variant(Integer, "sqlite")


class TrendingVideo(Base):
    """
    One row per YouTube video that has appeared in a trending window.

    Field Mapping:

    videos.list item:
    - id -> external_id
    - snippet.channelId -> channel_id
    - snippet.publishedAt -> publish_time
    - snippet.title -> title
    - contentDetails.duration (ISO-8601) -> duration_seconds
    - statistics.viewCount -> initial_view_count

    external_id is the natural key. Re-ingesting a video resolves against
    the unique constraint instead of creating a second row.
    """
    __tablename__ = "trending_videos"

    id = Column(PrimaryKeyType, primary_key=True, autoincrement=True)
    external_id = Column(String(64), nullable=False, unique=True)

    channel_id = Column(String(64), nullable=True, index=True)
    publish_time = Column(DateTime(timezone=True), nullable=True)
    title = Column(String(500), nullable=False, default="")
    duration_seconds = Column(Integer, nullable=True)
    initial_view_count = Column(BigInteger, nullable=False, default=0)

    ingested_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_trending_videos_ingested", "ingested_at"),
    )

    # Columns an overwrite is allowed to touch
    MUTABLE_FIELDS = (
        "channel_id",
        "publish_time",
        "title",
        "duration_seconds",
        "initial_view_count",
        "ingested_at",
    )
