"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (FetchStrategy, ConflictPolicy,
          WriteGranularity, RunStatus)
    video: TrendingVideo, one row per video keyed on external_id

Usage:
    from models.video import TrendingVideo
    from models.base import FetchStrategy, ConflictPolicy
"""

__all__ = [
    "Base",
    "FetchStrategy",
    "ConflictPolicy",
    "WriteGranularity",
    "RunStatus",
    "TrendingVideo",
]
