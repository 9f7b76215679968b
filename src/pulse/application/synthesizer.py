"""
Layers deterministic traffic patterns over a base noise level.
"""
import math
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from ..domain import NoiseComponents
from ...common.exceptions import ConfigurationError
from ...common.utils import ensure_utc, epoch_ms

MIN_DB = 30.0
MAX_DB = 85.0


def time_of_day_variation(hour: int) -> float:
    if 7 <= hour <= 9 or 16 <= hour <= 19:
        return 8.0 # Rush hour
    if 6 <= hour <= 22:
        return 2.0
    return -5.0 # Night


def traffic_light_cycle(minute: int) -> float:
    return math.sin(minute / 2 * math.pi) * 1.2


def weekend_offset(weekday: int) -> float:
    return -4.0 if weekday >= 5 else 0.0


def micro_pattern(seed_ms: int) -> float:
    return (
        math.sin(seed_ms / 900000) * 1.5  # 15 min
        + math.sin(seed_ms / 180000) * 0.8  # 3 min
        + math.sin(seed_ms / 60000) * 0.4  # 1 min
    )


def pseudo_random_jitter(seed_ms: int) -> float:
    """Bounded to +/-1.2 dB and reproducible for a given millisecond."""
    return ((seed_ms % 997) / 997 * 2 - 1) * 1.2


class NoiseSynthesizer:
    """
    Produces an instantaneous reading from a monthly base level.
    Hour, minute and weekday are taken in the intersection's local time;
    the micro pattern and jitter are keyed to epoch milliseconds.
    """

    def __init__(
        self,
        timezone_name: Optional[Union[str, tzinfo]] = "America/Montreal",
        min_db: float = MIN_DB,
        max_db: float = MAX_DB
    ):
        if min_db >= max_db:
            raise ConfigurationError(f"min_db ({min_db}) must be below max_db ({max_db})")
        if timezone_name is None:
            self.tz = timezone.utc
        elif isinstance(timezone_name, str):
            self.tz = ZoneInfo(timezone_name)
        else:
            self.tz = timezone_name
        self.min_db = min_db
        self.max_db = max_db

    def local_time(self, timestamp: datetime) -> datetime:
        return ensure_utc(timestamp).astimezone(self.tz)

    def components(self, timestamp: datetime) -> NoiseComponents:
        local = self.local_time(timestamp)
        seed = epoch_ms(timestamp)
        return NoiseComponents(
            time_of_day=time_of_day_variation(local.hour),
            traffic_light=traffic_light_cycle(local.minute),
            weekend=weekend_offset(local.weekday()),
            micro_pattern=micro_pattern(seed),
            jitter=pseudo_random_jitter(seed)
        )

    def synthesize(self, timestamp: datetime, base_noise: Optional[float]) -> float:
        if base_noise is None or math.isnan(base_noise):
            raise ConfigurationError(
                "Base noise level is undefined; is the historical dataset loaded?"
            )
        c = self.components(timestamp)
        value = base_noise + c.time_of_day + c.traffic_light + c.weekend + c.micro_pattern + c.jitter
        return max(self.min_db, min(self.max_db, value))
