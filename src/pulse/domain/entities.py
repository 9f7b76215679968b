"""
Domain entities for the noise pulse module.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

class DataStrategy(Enum):
    REAL = "REAL"
    ESTIMATED = "ESTIMATED"

class NoiseBand(Enum):
    QUIET = "quiet"
    MODERATE = "moderate"
    LOUD = "loud"

    @classmethod
    def classify(cls, level_db: float) -> "NoiseBand":
        if level_db < 40:
            return cls.QUIET
        if level_db < 55:
            return cls.MODERATE
        return cls.LOUD

@dataclass(frozen=True)
class HistoricalPoint:
    """
    Monthly LAeq24 noise average and cumulative EV registrations
    within ~500 m of each monitored street.
    """
    timestamp: date # First of month
    papineau_noise: float
    cartier_noise: float
    papineau_evs: int
    cartier_evs: int

    def noise(self, site: str) -> float:
        return getattr(self, f"{site}_noise")

    def evs(self, site: str) -> int:
        return getattr(self, f"{site}_evs")

@dataclass(frozen=True)
class NoiseReading:
    """
    A single synthesized point of the live chart.
    """
    time: str # Local HH:MM
    noise: float # dB, rounded to 0.1
    ev_impact: float # dB below the historical baseline
    is_real: bool
    timestamp: Optional[datetime] = None
    location: str = "papineau_cartier"

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "noise": self.noise,
            "evImpact": self.ev_impact,
            "isReal": self.is_real,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "location": self.location
        }

@dataclass(frozen=True)
class NoiseComponents:
    """
    Individual variation terms added to the base noise level, in order.
    """
    time_of_day: float
    traffic_light: float
    weekend: float
    micro_pattern: float
    jitter: float

    @property
    def total(self) -> float:
        return self.time_of_day + self.traffic_light + self.weekend + self.micro_pattern + self.jitter

@dataclass(frozen=True)
class EVAdoptionEstimate:
    percentage: float
    strategy: DataStrategy
