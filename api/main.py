"""
FastAPI application initialization
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from api.routes import health, ingest
from core.config import settings
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from ingestion.scheduler import IngestionScheduler

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Trending Seed API",
    description="Ingests daily YouTube trending videos into the datastore",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)
app.add_middleware(RequestContextMiddleware)

scheduler = IngestionScheduler()


app.include_router(health.router)
app.include_router(ingest.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Trending Seed API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Fetch strategy: {settings.FETCH_STRATEGY.value}")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Trending Seed API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Trending Seed API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "ingest": "/ingest/trending"
        }
    }
