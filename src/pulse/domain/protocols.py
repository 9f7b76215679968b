"""
Domain protocols for the noise pulse module.
"""
from datetime import datetime
from typing import List, Protocol
from .entities import DataStrategy, NoiseReading

class Clock(Protocol):
    """
    Returns the current time as a timezone-aware datetime.
    """
    def __call__(self) -> datetime:
        ...

class BaseNoiseSource(Protocol):
    """
    Picks the base noise level for a moment in time.
    """
    def select(self, timestamp: datetime) -> DataStrategy:
        ...

    def base_noise_level(self, timestamp: datetime, site: str = "papineau") -> float:
        ...

    def baseline(self, site: str = "papineau") -> float:
        ...

class ReadingListener(Protocol):
    """
    Receives the window after each dashboard tick.
    """
    def __call__(self, readings: List[NoiseReading]) -> None:
        ...
