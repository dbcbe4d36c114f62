import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from core.config import settings
from ingestion.runner import run_pipeline

logger = logging.getLogger(__name__)


class IngestionScheduler:
    """Runs the trending ingestion once a day"""

    def __init__(self, hour_utc: Optional[int] = None):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.hour_utc = settings.SCHEDULE_HOUR_UTC if hour_utc is None else hour_utc

    async def run_ingestion_job(self):
        """Job to run the ingestion pipeline"""
        logger.info("Scheduler: Starting trending ingestion")
        outcome = await run_pipeline()
        if outcome.error:
            logger.error(f"Scheduler: ingestion failed - {outcome.error}")
        else:
            logger.info(
                f"Scheduler: ingestion finished ({outcome.status.value}) - "
                f"inserted={outcome.inserted}, skipped={outcome.skipped}"
            )

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_ingestion_job,
            trigger=CronTrigger(hour=self.hour_utc, minute=0, timezone="UTC"),
            id="trending_ingestion",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Ingestion scheduler started (daily at {self.hour_utc:02d}:00 UTC)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Ingestion scheduler stopped")
