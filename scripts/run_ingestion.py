"""
Script to run the trending ingestion once, outside the HTTP service
"""

import asyncio
import json
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.logging import setup_logging
from ingestion.runner import run_pipeline

logger = logging.getLogger(__name__)


async def run_ingestion() -> int:
    """Run one ingestion and print the outcome as JSON"""
    outcome = await run_pipeline()
    print(json.dumps(outcome.to_response(), indent=2))

    if outcome.error:
        logger.error(f"Ingestion failed: {outcome.error}")
        return 1

    logger.info(
        f"Ingestion completed for {outcome.date}: "
        f"Inserted={outcome.inserted}, Skipped={outcome.skipped}"
    )
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_ingestion()))
