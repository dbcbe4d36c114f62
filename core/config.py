"""
Application configuration using Pydantic Settings
"""

from dataclasses import dataclass
from pydantic_settings import BaseSettings
from typing import Optional
from models.base import FetchStrategy, ConflictPolicy, WriteGranularity
from core.exceptions import ConfigurationError


DEFAULT_TRENDING_CSV_URL = "https://storage.googleapis.com/yb-datasets-us-trending/US_youtube_trending_data.csv"
DEFAULT_API_BASE_URL = "https://www.googleapis.com/youtube/v3"


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Secrets (required for every ingestion run)
    EXTERNAL_API_KEY: Optional[str] = None
    DATASTORE_URL: Optional[str] = None
    DATASTORE_SERVICE_KEY: Optional[str] = None

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Ingestion strategy
    FETCH_STRATEGY: FetchStrategy = FetchStrategy.BULK_EXPORT
    CONFLICT_POLICY: ConflictPolicy = ConflictPolicy.INSERT_IF_ABSENT
    WRITE_GRANULARITY: WriteGranularity = WriteGranularity.PER_ITEM

    # Upstream
    TRENDING_CSV_URL: str = DEFAULT_TRENDING_CSV_URL
    YOUTUBE_API_BASE_URL: str = DEFAULT_API_BASE_URL
    REGION_CODE: str = "US"
    CATEGORY_ID: str = "10"
    MAX_RESULTS: int = 50
    REQUEST_TIMEOUT: float = 30.0
    MAX_RETRIES: int = 3
    RETRY_DELAY: float = 1.0

    # Batching / rate limiting
    LOOKUP_BATCH_SIZE: int = 50
    BATCH_DELAY_SECONDS: float = 0.1
    BATCH_DELAY_MULTIPLIER: float = 1.0
    BATCH_DELAY_MAX_SECONDS: float = 5.0

    # Scheduling
    SCHEDULER_ENABLED: bool = False
    SCHEDULE_HOUR_UTC: int = 6

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()


REQUIRED_SETTINGS = ("EXTERNAL_API_KEY", "DATASTORE_URL", "DATASTORE_SERVICE_KEY")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable configuration for a single ingestion run.

    Built once per invocation from Settings and passed down to the
    extractors, loader and runner. Nothing below the runner reads
    environment variables directly.
    """

    external_api_key: str
    datastore_url: str
    datastore_service_key: str
    fetch_strategy: FetchStrategy = FetchStrategy.BULK_EXPORT
    conflict_policy: ConflictPolicy = ConflictPolicy.INSERT_IF_ABSENT
    write_granularity: WriteGranularity = WriteGranularity.PER_ITEM
    trending_csv_url: str = DEFAULT_TRENDING_CSV_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    region_code: str = "US"
    category_id: str = "10"
    max_results: int = 50
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    lookup_batch_size: int = 50
    batch_delay_seconds: float = 0.1
    batch_delay_multiplier: float = 1.0
    batch_delay_max_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        """
        Validate settings and build the run configuration.

        Raises:
            ConfigurationError: If a required secret is missing or a
                numeric option is out of range
        """
        missing = [name for name in REQUIRED_SETTINGS if not getattr(settings, name)]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables",
                context={"missing": ", ".join(missing)}
            )

        if settings.LOOKUP_BATCH_SIZE < 1:
            raise ConfigurationError(
                "LOOKUP_BATCH_SIZE must be at least 1",
                context={"LOOKUP_BATCH_SIZE": settings.LOOKUP_BATCH_SIZE}
            )

        if settings.MAX_RESULTS < 1 or settings.MAX_RETRIES < 1:
            raise ConfigurationError(
                "MAX_RESULTS and MAX_RETRIES must be at least 1",
                context={
                    "MAX_RESULTS": settings.MAX_RESULTS,
                    "MAX_RETRIES": settings.MAX_RETRIES
                }
            )

        if (
            settings.BATCH_DELAY_SECONDS < 0
            or settings.BATCH_DELAY_MAX_SECONDS < 0
            or settings.BATCH_DELAY_MULTIPLIER < 1
        ):
            raise ConfigurationError(
                "Batch delays must be >= 0 and BATCH_DELAY_MULTIPLIER >= 1",
                context={
                    "BATCH_DELAY_SECONDS": settings.BATCH_DELAY_SECONDS,
                    "BATCH_DELAY_MULTIPLIER": settings.BATCH_DELAY_MULTIPLIER,
                    "BATCH_DELAY_MAX_SECONDS": settings.BATCH_DELAY_MAX_SECONDS
                }
            )

        return cls(
            external_api_key=settings.EXTERNAL_API_KEY,
            datastore_url=settings.DATASTORE_URL,
            datastore_service_key=settings.DATASTORE_SERVICE_KEY,
            fetch_strategy=FetchStrategy(settings.FETCH_STRATEGY),
            conflict_policy=ConflictPolicy(settings.CONFLICT_POLICY),
            write_granularity=WriteGranularity(settings.WRITE_GRANULARITY),
            trending_csv_url=settings.TRENDING_CSV_URL,
            api_base_url=settings.YOUTUBE_API_BASE_URL.rstrip("/"),
            region_code=settings.REGION_CODE,
            category_id=str(settings.CATEGORY_ID),
            max_results=settings.MAX_RESULTS,
            request_timeout=settings.REQUEST_TIMEOUT,
            max_retries=settings.MAX_RETRIES,
            retry_delay=settings.RETRY_DELAY,
            lookup_batch_size=settings.LOOKUP_BATCH_SIZE,
            batch_delay_seconds=settings.BATCH_DELAY_SECONDS,
            batch_delay_multiplier=settings.BATCH_DELAY_MULTIPLIER,
            batch_delay_max_seconds=settings.BATCH_DELAY_MAX_SECONDS,
        )
