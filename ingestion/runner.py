# ============================================================================
# File: ingestion/runner.py
# Description: Trending ingestion orchestrator with partial-failure handling
# ============================================================================
"""
Trending Runner - Orchestrates Fetch, Deduplicate/Batch, Normalize, Persist, Report.

This module provides:
- Strategy-agnostic orchestration over any TrendingSource
- Partial failure support (failed lookup batches and bad items are skipped)
- Rate-limited, strictly sequential lookup batches
- A RunOutcome for every invocation, including failures
"""

from typing import List, Optional, Callable
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from pydantic import ValidationError
import httpx
import logging

from core.config import Settings, PipelineConfig
from core.database import create_session_factory
from core.exceptions import ETLException, ConfigurationError, FetchError, NormalizationError
from ingestion.base import TrendingSource
from ingestion.extractors import build_extractor
from ingestion.loaders.video_loader import VideoLoader
from ingestion.rate_limit import BatchBackoff
from ingestion.reporter import RunReporter
from ingestion.transformers.batching import deduplicate_ids, partition
from ingestion.transformers.normalizer import VideoNormalizer
from ingestion.window import TrendingWindow, default_window
from schemas.outcome import RunOutcome
from schemas.video import RawTrendingEntry

logger = logging.getLogger(__name__)


class TrendingRunner:
    """
    Trending ingestion orchestrator

    Responsibilities:
    - Fetch candidates with the configured source
    - Deduplicate and batch IDs when the source needs a lookup pass
    - Normalize and persist each batch before starting the next
    - Convert batch- and item-scoped errors into skip counts
    """

    def __init__(
        self,
        config: PipelineConfig,
        db_session: AsyncSession,
        source: TrendingSource,
        backoff: Optional[BatchBackoff] = None,
        normalizer: Optional[VideoNormalizer] = None
    ):
        self.config = config
        self.db = db_session
        self.source = source
        self.backoff = backoff or BatchBackoff.from_config(config)
        self.normalizer = normalizer or VideoNormalizer(source.strategy)
        self.loader = VideoLoader(
            db_session,
            conflict_policy=config.conflict_policy,
            granularity=config.write_granularity
        )

    async def run(self, window: Optional[TrendingWindow] = None) -> RunOutcome:
        """
        Run the pipeline for one trending window.

        Never raises for pipeline errors: fetch and bulk persistence
        failures produce a failed RunOutcome.
        """
        window = window or default_window(self.source.strategy)
        reporter = RunReporter(window, self.source.strategy)

        logger.info(f"Starting {self.source.strategy.value} ingestion for window {window.label}")

        try:
            candidates = await self.source.fetch_candidates(window)

            if self.source.requires_lookup:
                await self._run_lookup_batches(candidates, reporter)
                if reporter.batches_started == 0:
                    return reporter.short_circuit(f"No videos found for {window.label}")
            else:
                reporter.record_candidates(len(candidates))
                if not candidates:
                    return reporter.short_circuit(f"No trending videos returned for {window.label}")
                reporter.start_batch()
                await self._process(candidates, reporter)

            return reporter.finish()

        except ETLException as e:
            logger.error(f"Ingestion failed: {e.message}", extra={"error_context": e.to_dict()})
            return reporter.fail(e)

        except Exception as e:
            logger.exception("Unexpected error in ingestion pipeline")
            return reporter.fail(ETLException(
                "Unexpected error in ingestion pipeline",
                context={"strategy": self.source.strategy.value, "window": window.label},
                original_exception=e
            ))

    async def _run_lookup_batches(self, candidates: List[RawTrendingEntry], reporter: RunReporter):
        video_ids = deduplicate_ids(entry.external_id for entry in candidates)
        reporter.record_candidates(len(video_ids))
        logger.info(f"Unique video IDs: {len(video_ids)} (from {len(candidates)} rows)")

        if not video_ids:
            return

        batches = partition(video_ids, self.config.lookup_batch_size)
        logger.info(f"Processing {len(batches)} batches of video IDs")

        for number, batch in enumerate(batches, start=1):
            await self.backoff.wait(number)
            reporter.start_batch()
            logger.info(f"Processing batch {number}/{len(batches)} ({len(batch)} videos)")

            try:
                entries = await self.source.lookup(batch)
            except FetchError as e:
                logger.error(
                    f"Lookup failed for batch {number}: {e.message}",
                    extra={"error_context": e.to_dict()}
                )
                reporter.record_failed_batch(number, batch, e)
                continue

            logger.info(f"Lookup returned {len(entries)} videos for batch {number}")
            await self._process(entries, reporter)

    async def _process(self, entries: List[RawTrendingEntry], reporter: RunReporter):
        """Normalize and persist one batch of entries"""
        records = []
        for entry in entries:
            try:
                records.append(self.normalizer.normalize(entry))
            except (NormalizationError, ValidationError) as e:
                logger.warning(f"Skipping malformed item {entry.external_id!r}: {e}")
                reporter.record_skipped("normalization", e, entry.external_id)

        result = await self.loader.load(records)
        reporter.record_inserted(result.inserted)
        for external_id, error in result.failed:
            reporter.record_skipped("persistence", error, external_id)


async def run_pipeline(
    settings: Optional[Settings] = None,
    *,
    window: Optional[TrendingWindow] = None,
    session_factory: Optional[async_sessionmaker] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    settings_factory: Callable[[], Settings] = Settings
) -> RunOutcome:
    """
    Run one ingestion invocation end to end.

    Builds the PipelineConfig, then the datastore session and HTTP client
    for this invocation only, and disposes them afterwards. Configuration
    problems fail the run before any network or datastore call.
    """
    try:
        settings = settings or settings_factory()
        config = PipelineConfig.from_settings(settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}", extra={"error_context": e.to_dict()})
        return RunReporter(window, None).fail(e)
    except ValidationError as e:
        error = ConfigurationError("Invalid configuration", original_exception=e)
        logger.error(f"Configuration error: {str(e)}")
        return RunReporter(window, None).fail(error)

    try:
        async with _datastore(config, session_factory) as session_maker, \
                _http(config, http_client) as client, \
                session_maker() as session:
            source = build_extractor(config, client)
            runner = TrendingRunner(config, session, source)
            return await runner.run(window)
    except Exception as e:
        logger.exception("Ingestion run could not be set up")
        return RunReporter(window, config.fetch_strategy).fail(ETLException(
            "Ingestion run could not be set up",
            context={"strategy": config.fetch_strategy.value},
            original_exception=e
        ))


@asynccontextmanager
async def _datastore(config: PipelineConfig, session_factory: Optional[async_sessionmaker]):
    if session_factory is not None:
        yield session_factory
        return

    engine, session_factory = create_session_factory(config)
    try:
        yield session_factory
    finally:
        await engine.dispose()


@asynccontextmanager
async def _http(config: PipelineConfig, http_client: Optional[httpx.AsyncClient]):
    if http_client is not None:
        yield http_client
        return

    async with httpx.AsyncClient(timeout=config.request_timeout) as client:
        yield client
