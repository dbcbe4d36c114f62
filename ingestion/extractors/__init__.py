"""
Trending data source implementations, one per fetch strategy.
"""

from typing import Optional
import httpx
from core.config import PipelineConfig
from ingestion.base import TrendingSource
from ingestion.extractors.bulk_export import BulkExportExtractor
from ingestion.extractors.most_popular import MostPopularExtractor
from ingestion.extractors.client_library import ClientLibraryExtractor
from models.base import FetchStrategy

EXTRACTORS = {
    FetchStrategy.BULK_EXPORT: BulkExportExtractor,
    FetchStrategy.DIRECT_QUERY: MostPopularExtractor,
    FetchStrategy.CLIENT_LIBRARY: ClientLibraryExtractor,
}


def build_extractor(config: PipelineConfig, http_client: Optional[httpx.AsyncClient] = None) -> TrendingSource:
    """Instantiate the extractor selected by config.fetch_strategy"""
    return EXTRACTORS[config.fetch_strategy](config, http_client)


__all__ = [
    "TrendingSource",
    "BulkExportExtractor",
    "MostPopularExtractor",
    "ClientLibraryExtractor",
    "build_extractor",
]
