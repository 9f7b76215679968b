"""
Sliding window of synthesized noise readings for one dashboard session.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..domain import BaseNoiseSource, Clock, DataStrategy, NoiseReading
from .synthesizer import NoiseSynthesizer
from ...common.utils import round_half_up, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20
DEFAULT_INTERVAL_SECONDS = 180.0 # 3 minutes between readings
DEMO_INTERVAL_SECONDS = 3.0


class TimeSeriesSession:
    """
    Owns the bounded, chronologically ordered window of readings.

    One instance per dashboard session with a single writer. tick() is
    gated by the minimum interval, so a timer firing early is a no-op.
    Every public method returns a copy of the window.
    """

    def __init__(
        self,
        selector: BaseNoiseSource,
        synthesizer: NoiseSynthesizer,
        capacity: int = DEFAULT_CAPACITY,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        site: str = "papineau",
        clock: Clock = utc_now
    ):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.selector = selector
        self.synthesizer = synthesizer
        self.capacity = capacity
        self.interval = timedelta(seconds=interval_seconds)
        self.site = site
        self._clock = clock

        self._readings: List[NoiseReading] = []
        self._last_update: Optional[datetime] = None

    @property
    def last_update(self) -> Optional[datetime]:
        return self._last_update

    def __len__(self) -> int:
        return len(self._readings)

    def snapshot(self) -> List[NoiseReading]:
        return list(self._readings)

    def latest(self) -> Optional[NoiseReading]:
        return self._readings[-1] if self._readings else None

    def reading_at(self, timestamp: datetime) -> NoiseReading:
        strategy = self.selector.select(timestamp)
        base = self.selector.base_noise_level(timestamp, self.site)
        noise = self.synthesizer.synthesize(timestamp, base)
        ev_impact = max(0.0, self.selector.baseline(self.site) - base)

        return NoiseReading(
            time=self.synthesizer.local_time(timestamp).strftime("%H:%M"),
            noise=round_half_up(noise, 1),
            ev_impact=round_half_up(ev_impact, 1),
            is_real=strategy is DataStrategy.REAL,
            timestamp=timestamp
        )

    def initialize(self, point_count: Optional[int] = None) -> List[NoiseReading]:
        """
        Seeds the window by walking back from now, oldest reading first.
        Does nothing if the window already holds readings.
        """
        if self._readings:
            return self.snapshot()

        count = self.capacity if point_count is None else point_count
        if count < 0:
            raise ValueError("point_count must not be negative")
        count = min(count, self.capacity)

        now = self._clock()
        self._readings = [
            self.reading_at(now - i * self.interval)
            for i in range(count - 1, -1, -1)
        ]
        self._last_update = now
        logger.debug(f"Window seeded with {len(self._readings)} readings")
        return self.snapshot()

    def tick(self) -> List[NoiseReading]:
        now = self._clock()
        if self._last_update is not None and now - self._last_update < self.interval:
            return self.snapshot()

        self._readings.append(self.reading_at(now))
        if len(self._readings) > self.capacity:
            self._readings.pop(0)

        self._last_update = now
        return self.snapshot()

    def update(self, point_count: Optional[int] = None) -> List[NoiseReading]:
        """Seeds an empty window, otherwise advances it."""
        if not self._readings:
            return self.initialize(point_count)
        return self.tick()

    def reset(self):
        self._readings = []
        self._last_update = None
