"""
Chooses between historical and extrapolated base noise levels.
"""
from datetime import datetime
from typing import Dict, Union

from ..domain import DataStrategy, HistoricalDataset, validate_site
from ...common.utils import ensure_utc, month_start_utc, whole_days_between

DEFAULT_DRIFT_PER_DAY = -0.002 # dB/day after the last real month


class DataStrategySelector:
    """
    REAL up to and including the dataset cutoff, ESTIMATED afterwards.
    The estimated branch starts from the latest real value, so the
    series has no jump at the cutoff.
    """

    def __init__(self, dataset: HistoricalDataset, drift_per_day: float = DEFAULT_DRIFT_PER_DAY):
        self.dataset = dataset
        self.drift_per_day = drift_per_day
        self.cutoff = month_start_utc(dataset.cutoff)

    def select(self, timestamp: datetime) -> DataStrategy:
        return DataStrategy.REAL if ensure_utc(timestamp) <= self.cutoff else DataStrategy.ESTIMATED

    def base_noise_level(self, timestamp: datetime, site: str = "papineau") -> float:
        validate_site(site)
        ts = ensure_utc(timestamp)

        if self.select(ts) is DataStrategy.REAL:
            point = self.dataset.find_month(ts.year, ts.month)
            if point is None:
                # Gap in the series: hold the most recent observation
                point = self.dataset.latest
            return point.noise(site)

        days = whole_days_between(self.cutoff, ts)
        return self.dataset.latest.noise(site) + days * self.drift_per_day

    def baseline(self, site: str = "papineau") -> float:
        """Noise level of the first observed month."""
        validate_site(site)
        return self.dataset.first.noise(site)

    def latest_baseline(self) -> Dict[str, Union[float, str]]:
        latest = self.dataset.latest
        return {
            "papineau": latest.papineau_noise,
            "cartier": latest.cartier_noise,
            "timestamp": latest.timestamp.isoformat()
        }
