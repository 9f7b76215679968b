"""
EV adoption percentage and the noise reduction attributed to it.
"""
import math
from datetime import datetime
from typing import Callable, Dict, Optional

from ..domain import DataStrategy, EVAdoptionEstimate, HistoricalDataset, validate_site
from .strategy import DataStrategySelector
from ...common.utils import MS_PER_DAY, epoch_ms, month_start_utc, round_half_up, utc_now, whole_days_between

DEFAULT_TOTAL_FLEET = 50000 # Estimated vehicles in the monitoring area
DEFAULT_MONTHLY_GROWTH = 0.03
DAYS_PER_MONTH = 30

# Relative to Montreal adoption: (multiplier, 2030 target %, growth multiplier)
REGIONS = {
    "montreal": (1.0, 35, 1.0),
    "quebec": (1.2, 40, 1.0),
    "canada": (0.8, 30, 0.8),
}


class EVAdoptionProjector:
    """
    Share of the local fleet that is electric.

    Up to the cutoff this is the latest registered count over the fleet
    estimate; afterwards the latest count is compounded forward daily at
    the equivalent of the monthly growth rate.
    """

    def __init__(
        self,
        dataset: HistoricalDataset,
        selector: DataStrategySelector,
        total_fleet: int = DEFAULT_TOTAL_FLEET,
        monthly_growth_rate: float = DEFAULT_MONTHLY_GROWTH,
        oscillation_amplitude: float = 0.05,
        site: str = "papineau",
        clock: Callable[[], datetime] = utc_now
    ):
        self.dataset = dataset
        self.selector = selector
        self.total_fleet = total_fleet
        self.monthly_growth_rate = monthly_growth_rate
        self.oscillation_amplitude = oscillation_amplitude
        self.site = validate_site(site)
        self._clock = clock

    @property
    def daily_growth_rate(self) -> float:
        return (1 + self.monthly_growth_rate) ** (1 / DAYS_PER_MONTH) - 1

    def projected_evs(self, at: datetime) -> float:
        latest = self.dataset.latest
        if self.selector.select(at) is DataStrategy.REAL:
            return float(latest.evs(self.site))
        days = whole_days_between(month_start_utc(latest.timestamp), at)
        return latest.evs(self.site) * (1 + self.daily_growth_rate) ** days

    def estimate(self, at: Optional[datetime] = None) -> EVAdoptionEstimate:
        now = at or self._clock()
        strategy = self.selector.select(now)
        if self.total_fleet <= 0:
            return EVAdoptionEstimate(percentage=0.0, strategy=strategy)

        percentage = self.projected_evs(now) / self.total_fleet * 100
        # Slow daily swing so the figure is not frozen on screen
        percentage += math.sin(epoch_ms(now) / MS_PER_DAY) * self.oscillation_amplitude
        return EVAdoptionEstimate(percentage=round_half_up(percentage, 2), strategy=strategy)

    def current_adoption(self) -> float:
        return self.estimate().percentage

    def noise_reduction(self, rate: float) -> float:
        """
        Noise reduction (dB) proportional to `rate` relative to today's adoption.
        """
        current = self.current_adoption()
        if current == 0:
            return 0.0
        observed = self.dataset.total_noise_reduction(self.site)
        return round_half_up(rate / current * observed, 2)

    def observed_monthly_growth(self) -> float:
        """Compound monthly EV growth (%) over the historical series."""
        if len(self.dataset) < 2:
            return self.monthly_growth_rate * 100
        first = self.dataset.first.evs(self.site)
        last = self.dataset.latest.evs(self.site)
        months = len(self.dataset) - 1
        growth = ((last / first) ** (1 / months) - 1) * 100
        return round_half_up(growth, 2)

    def regional_adoption(self) -> Dict[str, Dict[str, float]]:
        current = self.current_adoption()
        noise_impact = round_half_up(self.dataset.total_noise_reduction(self.site), 2)
        monthly_growth = self.monthly_growth_rate * 100
        return {
            region: {
                "current": round_half_up(current * factor, 2),
                "target2030": target,
                "monthlyGrowth": round_half_up(monthly_growth * growth_factor, 2),
                "noiseImpact": noise_impact
            }
            for region, (factor, target, growth_factor) in REGIONS.items()
        }
