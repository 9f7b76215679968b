"""
Read-only views over the historical dataset for charts and summaries.
"""
from datetime import datetime
from typing import Dict, List, Optional

from ..domain import HistoricalDataset
from .strategy import DataStrategySelector
from .projector import REGIONS
from ...common.utils import round_half_up, utc_now


def correlation_series(dataset: HistoricalDataset, total_fleet: int) -> List[Dict]:
    """Monthly noise vs EV figures for both sites."""
    baseline = dataset.first
    rows = []
    for point in dataset:
        reduction = round_half_up(baseline.papineau_noise - point.papineau_noise, 2)
        rows.append({
            "date": point.timestamp.isoformat(),
            "month": point.timestamp.strftime("%b %Y"),
            "papineauNoise": round_half_up(point.papineau_noise, 1),
            "cartierNoise": round_half_up(point.cartier_noise, 1),
            "papineauEVs": point.papineau_evs,
            "cartierEVs": point.cartier_evs,
            "papineauEVAdoption": _adoption(point.papineau_evs, total_fleet),
            "cartierEVAdoption": _adoption(point.cartier_evs, total_fleet),
            "noiseReduction": reduction
        })
    return rows


def adoption_series(dataset: HistoricalDataset, total_fleet: int) -> List[Dict]:
    """
    Per-month adoption for Montreal with Quebec and Canada scaled from the
    average of both sites.
    """
    baseline = dataset.first.papineau_noise
    quebec_factor = REGIONS["quebec"][0]
    canada_factor = REGIONS["canada"][0]
    rows = []
    for point in dataset:
        montreal = _adoption(point.papineau_evs, total_fleet, digits=None)
        cartier = _adoption(point.cartier_evs, total_fleet, digits=None)
        average = (montreal + cartier) / 2
        rows.append({
            "year": point.timestamp.year,
            "montreal": round_half_up(montreal, 2),
            "quebec": round_half_up(average * quebec_factor, 2),
            "canada": round_half_up(average * canada_factor, 2),
            "noiseReduction": round_half_up(max(0.0, baseline - point.papineau_noise), 2)
        })
    return rows


def data_summary(selector: DataStrategySelector, now: Optional[datetime] = None) -> Dict:
    dataset = selector.dataset
    first, last = dataset.first, dataset.latest
    return {
        "realDataPeriod": {
            "start": first.timestamp.isoformat(),
            "end": last.timestamp.isoformat(),
            "monthsTracked": len(dataset)
        },
        "noiseReduction": {
            "papineau": round_half_up(first.papineau_noise - last.papineau_noise, 2),
            "cartier": round_half_up(first.cartier_noise - last.cartier_noise, 2)
        },
        "evGrowth": {
            site: {
                "start": first.evs(site),
                "end": last.evs(site),
                "totalGrowth": round_half_up((last.evs(site) / first.evs(site) - 1) * 100, 2)
            }
            for site in ("papineau", "cartier")
        },
        "currentStrategy": selector.select(now or utc_now()).value,
        "transitionPoint": last.timestamp.isoformat()
    }


def _adoption(evs: int, total_fleet: int, digits: Optional[int] = 2) -> float:
    if total_fleet <= 0:
        return 0.0
    value = evs / total_fleet * 100
    return value if digits is None else round_half_up(value, digits)
