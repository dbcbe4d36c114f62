"""
Delay between consecutive lookup batches
"""

import asyncio
import logging
from core.config import PipelineConfig

logger = logging.getLogger(__name__)


class BatchBackoff:
    """
    Delay strategy applied between lookup batches.

    The delay before batch n (1-based, first batch never waits) is
    base_delay * multiplier ** (n - 2), capped at max_delay. A multiplier
    of 1.0 gives a fixed pause between every pair of batches.
    """

    def __init__(self, base_delay: float = 0.1, multiplier: float = 1.0, max_delay: float = 5.0):
        if base_delay < 0 or multiplier < 1 or max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0 and multiplier >= 1")
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.max_delay = max_delay

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "BatchBackoff":
        return cls(
            base_delay=config.batch_delay_seconds,
            multiplier=config.batch_delay_multiplier,
            max_delay=config.batch_delay_max_seconds,
        )

    def delay_for(self, batch_number: int) -> float:
        """Seconds to wait before the given 1-based batch"""
        if batch_number <= 1:
            return 0.0
        delay = self.base_delay * (self.multiplier ** (batch_number - 2))
        return min(delay, self.max_delay)

    async def wait(self, batch_number: int):
        delay = self.delay_for(batch_number)
        if delay > 0:
            logger.debug(f"Waiting {delay:.2f}s before batch {batch_number}")
            await asyncio.sleep(delay)
