import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


class Scheduler:
    """
    Runs a cycle, waits a fixed interval, and repeats.

    The interval is measured from the end of one cycle to the start of the next,
    so a slow cycle pushes every later one back. The first cycle runs immediately.
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.cycle = cycle
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.state = SchedulerState.IDLE
        self.cycles_run = 0

    async def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Loop until cancelled, or until max_cycles cycles have run.
        No sleep follows the last bounded cycle. Returns the number of cycles run.
        """
        logger.info(f"Starting collection loop (Interval: {self.interval_seconds}s)")
        while max_cycles is None or self.cycles_run < max_cycles:
            await self.tick()
            if max_cycles is not None and self.cycles_run >= max_cycles:
                break
            await self.sleep(self.interval_seconds)
        return self.cycles_run

    async def tick(self) -> None:
        self.state = SchedulerState.FETCHING
        try:
            await self.cycle()
        except Exception as e:
            logger.error(f"Error in collection loop: {e}", exc_info=True)
        finally:
            self.state = SchedulerState.IDLE
            self.cycles_run += 1
