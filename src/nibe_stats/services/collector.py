import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from nibe_stats.domain.errors import FetchFailure
from nibe_stats.domain.metrics import Category, FetchResult, Measurement, ParameterMapping
from nibe_stats.ports.repository import MeasurementRepositoryPort
from nibe_stats.ports.telemetry import TelemetryPort
from nibe_stats.services.extractor import aggregate, build_measurement

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (Category.STATUS, Category.SYSTEM_1, Category.ADDITION)


class CollectorService:
    def __init__(
        self,
        api: TelemetryPort,
        repository: MeasurementRepositoryPort,
        mapping: ParameterMapping,
        categories: Sequence[Category] = DEFAULT_CATEGORIES,
    ):
        self.api = api
        self.repository = repository
        self.mapping = mapping
        self.categories = tuple(categories)
        self._cycle_in_progress = False

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_in_progress

    async def collect(self) -> Optional[Measurement]:
        """
        One full cycle: refresh token, fetch all categories, extract, persist.
        Returns the measurement handed to storage, or None if the cycle was skipped
        because another one is still running.
        """
        if self._cycle_in_progress:
            logger.warning("Previous cycle still in progress, skipping this tick.")
            return None

        self._cycle_in_progress = True
        try:
            return await self._run_cycle()
        finally:
            self._cycle_in_progress = False

    async def _run_cycle(self) -> Measurement:
        logger.info("Pulling data from NIBE Uplink...")

        # 1. Refresh token. A failure is already logged and we go on with the stale token.
        await self.api.refresh()

        # 2. Fetch all categories concurrently
        results = await self.fetch_all()
        failed = [r for r in results if not r.ok]
        if failed:
            logger.warning(f"{len(failed)} of {len(results)} fetches failed this cycle")

        # 3. Extract
        all_parameters = aggregate(results)
        measurement = build_measurement(all_parameters, self.mapping, created=datetime.now(timezone.utc))
        if measurement.is_empty:
            logger.warning("None of the configured parameters were found this cycle.")

        # 4. Persist, even when every field is empty
        outcome = await self.repository.save_measurement(measurement)
        if outcome.ok:
            logger.info("Measurement stored successfully.")
        else:
            logger.error(f"Measurement lost: {outcome.error}")

        return measurement

    async def fetch_all(self) -> List[FetchResult]:
        """
        Fetches every category concurrently and waits for all of them to settle.
        Results keep the order of self.categories.
        """
        outcomes = await asyncio.gather(
            *(self.api.fetch_category(category) for category in self.categories),
            return_exceptions=True,
        )

        results = []
        for category, outcome in zip(self.categories, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                # Cancellation, interrupts and exits are not fetch failures
                raise outcome
            if isinstance(outcome, Exception):
                logger.error(f"Unexpected error fetching {category.value}: {outcome}")
                outcome = FetchResult(
                    url=category.value,
                    category=category,
                    error=FetchFailure(category.value, str(outcome)),
                )
            results.append(outcome)
        return results
