"""
Accumulates run counts and builds the RunOutcome
"""

from typing import List, Dict, Any, Optional
from ingestion.window import TrendingWindow
from models.base import RunStatus, FetchStrategy
from schemas.outcome import RunOutcome
from core.exceptions import ETLException
import logging

logger = logging.getLogger(__name__)


class RunReporter:
    """
    Tracks one run's progress.

    A failure before any batch started reports zero counts; a failure
    after that keeps what earlier batches already wrote.
    """

    def __init__(self, window: Optional[TrendingWindow], strategy: Optional[FetchStrategy]):
        self.window = window
        self.strategy = strategy
        self.candidates = 0
        self.inserted = 0
        self.skipped = 0
        self.failed_batches = 0
        self.batches_started = 0
        self.error_details: List[Dict[str, Any]] = []

    def record_candidates(self, count: int):
        self.candidates = count

    def start_batch(self):
        self.batches_started += 1

    def record_inserted(self, count: int = 1):
        self.inserted += count

    def record_skipped(self, phase: str, error: Exception, external_id: Optional[str] = None):
        self.skipped += 1
        self.error_details.append({
            "phase": phase,
            "external_id": external_id,
            "error_type": type(error).__name__,
            "error_message": getattr(error, "message", str(error)),
        })

    def record_failed_batch(self, batch_number: int, video_ids: List[str], error: Exception):
        self.failed_batches += 1
        self.error_details.append({
            "phase": "lookup",
            "batch": batch_number,
            "video_ids": len(video_ids),
            "error_type": type(error).__name__,
            "error_message": getattr(error, "message", str(error)),
        })

    def short_circuit(self, message: str) -> RunOutcome:
        """Nothing to process: success with zero counts"""
        logger.info(f"Run short-circuited: {message}")
        return RunOutcome(
            status=RunStatus.SUCCESS,
            candidates=self.candidates,
            date=self._date(),
            strategy=self._strategy(),
            message=message,
        )

    def finish(self) -> RunOutcome:
        partial = self.skipped > 0 or self.failed_batches > 0
        outcome = RunOutcome(
            status=RunStatus.PARTIAL if partial else RunStatus.SUCCESS,
            inserted=self.inserted,
            skipped=self.skipped,
            processed=self.inserted + self.skipped,
            candidates=self.candidates,
            failed_batches=self.failed_batches,
            date=self._date(),
            strategy=self._strategy(),
            error_details=self.error_details,
        )
        logger.info(
            f"Run completed: {outcome.status.value} - candidates={outcome.candidates}, "
            f"inserted={outcome.inserted}, skipped={outcome.skipped}, "
            f"failed_batches={outcome.failed_batches}"
        )
        return outcome

    def fail(self, error: Exception) -> RunOutcome:
        message = error.message if isinstance(error, ETLException) else str(error)
        details = list(self.error_details)
        if isinstance(error, ETLException):
            details.append({"phase": "run", **error.to_dict()})

        if self.batches_started == 0:
            return RunOutcome(
                status=RunStatus.FAILED,
                date=self._date(),
                strategy=self._strategy(),
                error=message,
                error_details=details,
            )

        return RunOutcome(
            status=RunStatus.FAILED,
            inserted=self.inserted,
            skipped=self.skipped,
            processed=self.inserted + self.skipped,
            candidates=self.candidates,
            failed_batches=self.failed_batches,
            date=self._date(),
            strategy=self._strategy(),
            error=message,
            error_details=details,
        )

    def _date(self) -> Optional[str]:
        return self.window.label if self.window else None

    def _strategy(self) -> Optional[str]:
        return self.strategy.value if self.strategy else None
