"""
Database session management with SQLAlchemy async
"""

from typing import Tuple
from sqlalchemy.engine import make_url, URL
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from core.config import PipelineConfig
import logging

logger = logging.getLogger(__name__)


def build_datastore_url(datastore_url: str, service_key: str) -> URL:
    """
    Combine the datastore URL with the service key.

    The service key is the elevated-privilege credential for writes and is
    applied as the connection password. File-based SQLite URLs carry no
    credentials and are returned unchanged.
    """
    url = make_url(datastore_url)
    if url.get_backend_name() == "sqlite":
        return url
    return url.set(password=service_key)


def create_session_factory(
    config: PipelineConfig,
    echo: bool = False
) -> Tuple[AsyncEngine, async_sessionmaker]:
    """
    Create an engine and session factory for one ingestion run.

    The caller owns the engine and must dispose it when the run ends.
    """
    engine = create_async_engine(
        build_datastore_url(config.datastore_url, config.datastore_service_key),
        echo=echo,
        poolclass=NullPool,
    )

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )

    logger.debug(f"Datastore engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine, session_factory
