"""
Trending ingestion trigger endpoint
"""

from typing import Callable
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from api.dependencies import get_settings_factory
from core.config import Settings
from ingestion.runner import run_pipeline
from schemas.api import ErrorResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Ingestion"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@router.options("/ingest/trending", include_in_schema=False)
async def ingest_preflight():
    """Bare acknowledgment for pre-flight requests"""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post(
    "/ingest/trending",
    responses={500: {"model": ErrorResponse, "description": "The ingestion run failed"}}
)
async def ingest_trending(
    request: Request,
    settings_factory: Callable[[], Settings] = Depends(get_settings_factory)
):
    """
    Run one trending ingestion.

    Returns the run outcome as JSON: 200 for successful and partially
    successful runs, 500 when the run failed.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info(f"[{request_id}] Trending ingestion triggered")

    outcome = await run_pipeline(settings_factory=settings_factory)

    return JSONResponse(
        status_code=outcome.http_status,
        content=outcome.to_response(),
        headers=CORS_HEADERS
    )
