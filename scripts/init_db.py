import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import Settings, PipelineConfig
from core.database import create_session_factory
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.video import TrendingVideo

logger = logging.getLogger(__name__)


async def init_database():
    config = PipelineConfig.from_settings(Settings())
    engine, _ = create_session_factory(config)

    logger.info("Connecting to datastore...")
    try:
        async with engine.begin() as conn:
            logger.info(f"Creating table {TrendingVideo.__tablename__}...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
