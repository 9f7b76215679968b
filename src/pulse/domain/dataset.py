"""
Historical noise and EV registration series for Avenue Papineau and Rue Cartier.

Noise levels are monthly LAeq24 (dBA) averages seeded from the 2017 DRSP
Montreal noise mapping (73 dB on Papineau, 65 dB on Cartier in June 2023)
with a gradual monthly reduction of 0.05 / 0.03 dB. EV counts are cumulative
registrations within ~500 m, seeded at 2200 / 1800 and grown ~3 % per month
following SAAQ-AVEQ provincial statistics.
"""
from datetime import date
from typing import Iterable, Optional, Sequence, Tuple

from .entities import HistoricalPoint
from ...common.exceptions import DatasetError

SITES = ("papineau", "cartier")

# (month, papineau dB, cartier dB, papineau EVs, cartier EVs)
_MONTHLY_SERIES = [
    ("2023-06-01", 73.0, 65.0, 2200, 1800),
    ("2023-07-01", 72.95, 64.97, 2266, 1854),
    ("2023-08-01", 72.9, 64.94, 2334, 1910),
    ("2023-09-01", 72.85, 64.91, 2404, 1967),
    ("2023-10-01", 72.8, 64.88, 2476, 2026),
    ("2023-11-01", 72.75, 64.85, 2550, 2087),
    ("2023-12-01", 72.7, 64.82, 2627, 2149),
    ("2024-01-01", 72.65, 64.79, 2706, 2214),
    ("2024-02-01", 72.6, 64.76, 2787, 2280),
    ("2024-03-01", 72.55, 64.73, 2871, 2348),
    ("2024-04-01", 72.5, 64.7, 2957, 2418),
    ("2024-05-01", 72.45, 64.67, 3046, 2490),
    ("2024-06-01", 72.4, 64.64, 3137, 2564),
    ("2024-07-01", 72.35, 64.61, 3231, 2640),
    ("2024-08-01", 72.3, 64.58, 3328, 2718),
    ("2024-09-01", 72.25, 64.55, 3428, 2798),
    ("2024-10-01", 72.2, 64.52, 3530, 2881),
    ("2024-11-01", 72.15, 64.49, 3636, 2965),
    ("2024-12-01", 72.1, 64.46, 3745, 3051),
    ("2025-01-01", 72.05, 64.43, 3857, 3139),
    ("2025-02-01", 72.0, 64.4, 3972, 3230),
    ("2025-03-01", 71.95, 64.37, 4091, 3322),
    ("2025-04-01", 71.9, 64.34, 4214, 3417),
    ("2025-05-01", 71.85, 64.31, 4340, 3514),
]


class HistoricalDataset:
    """
    Immutable, month-ordered reference series.
    """

    def __init__(self, points: Iterable[HistoricalPoint]):
        ordered = tuple(sorted(points, key=lambda p: p.timestamp))
        if not ordered:
            raise DatasetError("Historical dataset is empty")
        self._points: Tuple[HistoricalPoint, ...] = ordered
        self._by_month = {(p.timestamp.year, p.timestamp.month): p for p in ordered}

    @property
    def points(self) -> Sequence[HistoricalPoint]:
        return self._points

    @property
    def first(self) -> HistoricalPoint:
        return self._points[0]

    @property
    def latest(self) -> HistoricalPoint:
        return self._points[-1]

    @property
    def cutoff(self) -> date:
        """Last month with real observations."""
        return self.latest.timestamp

    def find_month(self, year: int, month: int) -> Optional[HistoricalPoint]:
        return self._by_month.get((year, month))

    def total_noise_reduction(self, site: str = "papineau") -> float:
        validate_site(site)
        return self.first.noise(site) - self.latest.noise(site)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)


def validate_site(site: str) -> str:
    if site not in SITES:
        raise DatasetError(f"Unknown site '{site}', expected one of {SITES}")
    return site


def load_montreal_dataset() -> HistoricalDataset:
    return HistoricalDataset(
        HistoricalPoint(
            timestamp=date.fromisoformat(month),
            papineau_noise=papineau_db,
            cartier_noise=cartier_db,
            papineau_evs=papineau_evs,
            cartier_evs=cartier_evs
        )
        for month, papineau_db, cartier_db, papineau_evs, cartier_evs in _MONTHLY_SERIES
    )
