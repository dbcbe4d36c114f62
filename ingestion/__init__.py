"""
Trending ingestion pipeline.

Modules:
    base: Abstract TrendingSource with shared HTTP retry logic
    runner: TrendingRunner and run_pipeline, the per-invocation entry point
    reporter: RunReporter, builds the RunOutcome
    rate_limit: BatchBackoff between lookup batches
    window: TrendingWindow ("yesterday", explicit date or "current")
    scheduler: APScheduler integration for the daily run

Subpackages:
    extractors: Bulk export, direct chart query and client-library sources
    transformers: ID deduplication/batching and record normalization
    loaders: Idempotent upserts into trending_videos

Architecture:
    Fetch -> (Deduplicate/Batch, bulk export only) -> Normalize -> Persist -> Report

    Lookup batches run one after another with a delay in between. A failed
    batch or malformed item becomes a skip; only configuration errors,
    top-level fetch errors and bulk write errors fail the run.

Example:
    outcome = await run_pipeline()
    print(f"Inserted {outcome.inserted}, skipped {outcome.skipped}")
"""

__all__ = [
    "TrendingSource",
    "TrendingRunner",
    "run_pipeline",
    "RunReporter",
    "BatchBackoff",
    "TrendingWindow",
]
