"""
Drives the dashboard timers for one session.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from ..domain import EVAdoptionEstimate, NoiseReading, ReadingListener
from .projector import EVAdoptionProjector
from .window import TimeSeriesSession

logger = logging.getLogger(__name__)


class DashboardRunner:
    """
    Runs two cooperative asyncio tasks: the tick that advances the window and
    adoption estimate, and a one-second counter of time since the last update.
    Both are cancelled on stop(), which also closes the analytics session.
    """

    def __init__(
        self,
        session: TimeSeriesSession,
        projector: EVAdoptionProjector,
        analytics=None,
        tick_seconds: float = 3.0,
        listener: Optional[ReadingListener] = None
    ):
        self.session = session
        self.projector = projector
        self.analytics = analytics
        self.tick_seconds = tick_seconds
        self.listener = listener

        self.seconds_since_update = 0
        self.latest_estimate: Optional[EVAdoptionEstimate] = None
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    async def start(self):
        if self._tasks:
            return
        self._publish(self.session.initialize())
        self.latest_estimate = self.projector.estimate()

        self._tasks["tick"] = asyncio.create_task(self._tick_loop(), name="pulse-tick")
        self._tasks["counter"] = asyncio.create_task(self._counter_loop(), name="pulse-counter")
        logger.info(f"Dashboard started, ticking every {self.tick_seconds}s")

    async def stop(self):
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

        if self.analytics is not None:
            # Best effort, like a page unload
            self.analytics.end_session()
        logger.info("Dashboard stopped")

    def step(self) -> List[NoiseReading]:
        """One tick: advance the window, refresh the estimate, notify."""
        previous = self.session.last_update
        readings = self.session.tick()
        if self.session.last_update != previous:
            self.seconds_since_update = 0
        self.latest_estimate = self.projector.estimate()
        self._publish(readings)
        return readings

    def _publish(self, readings: List[NoiseReading]):
        if self.listener is not None:
            self.listener(readings)

    async def _tick_loop(self):
        while True:
            await asyncio.sleep(self.tick_seconds)
            try:
                self.step()
            except Exception as e:
                # A bad tick leaves stale numbers on screen, never a dead loop
                logger.error(f"Dashboard tick failed: {e}", exc_info=True)

    async def _counter_loop(self):
        while True:
            await asyncio.sleep(1)
            self.seconds_since_update += 1
