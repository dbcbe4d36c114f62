"""
Health check endpoint with configuration and datastore status
"""

from typing import Callable
from fastapi import APIRouter, Depends
from pydantic import ValidationError
from sqlalchemy import text
from api.dependencies import get_settings_factory
from core.config import Settings, PipelineConfig, REQUIRED_SETTINGS
from core.database import create_session_factory
from core.exceptions import ConfigurationError
from schemas.api import HealthCheckResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(settings_factory: Callable[[], Settings] = Depends(get_settings_factory)):
    """
    Health check endpoint.

    Returns:
    - Whether the required secrets are configured
    - Datastore connectivity (only attempted when configured)
    """
    try:
        settings = settings_factory()
    except ValidationError as e:
        logger.error(f"Settings failed validation: {str(e)}")
        return HealthCheckResponse(configured=False, database_connected=False)

    missing = [name for name in REQUIRED_SETTINGS if not getattr(settings, name)]

    try:
        config = PipelineConfig.from_settings(settings)
    except ConfigurationError as e:
        logger.warning(f"Health check: {e.message}")
        return HealthCheckResponse(
            configured=False,
            database_connected=False,
            fetch_strategy=settings.FETCH_STRATEGY.value,
            missing_settings=missing
        )

    db_connected = False
    engine = None
    try:
        engine, session_factory = create_session_factory(config)
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
    finally:
        if engine is not None:
            await engine.dispose()

    return HealthCheckResponse(
        configured=True,
        database_connected=db_connected,
        fetch_strategy=config.fetch_strategy.value
    )
