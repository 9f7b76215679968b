from datetime import datetime
from typing import Callable, Dict, Optional

from omegaconf import DictConfig

from ..domain import HistoricalDataset, load_montreal_dataset, validate_site
from .strategy import DataStrategySelector
from .synthesizer import NoiseSynthesizer
from .window import TimeSeriesSession
from .projector import EVAdoptionProjector
from .runner import DashboardRunner
from ...common.utils import utc_now

class PulseApplicationBuilder:
    """
    Builder pattern for constructing the noise pulse components.
    Centralizes component instantiation and wiring from the `pulse` config.
    """

    def __init__(
        self,
        config: DictConfig,
        dataset: Optional[HistoricalDataset] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config
        self.pulse_cfg = config.pulse
        self.clock = clock
        self.site = validate_site(self.pulse_cfg.site)

        # Components
        self.dataset: Optional[HistoricalDataset] = dataset
        self.selector: Optional[DataStrategySelector] = None
        self.synthesizer: Optional[NoiseSynthesizer] = None
        self.session: Optional[TimeSeriesSession] = None
        self.projector: Optional[EVAdoptionProjector] = None

    @property
    def interval_seconds(self) -> float:
        window_cfg = self.pulse_cfg.window
        if window_cfg.demo_mode:
            return window_cfg.demo_interval_seconds
        return window_cfg.sample_interval_seconds

    def build_selector(self) -> 'PulseApplicationBuilder':
        if self.dataset is None:
            self.dataset = load_montreal_dataset()
        self.selector = DataStrategySelector(
            self.dataset,
            drift_per_day=self.pulse_cfg.projection.drift_per_day
        )
        return self

    def build_synthesizer(self) -> 'PulseApplicationBuilder':
        synth_cfg = self.pulse_cfg.synthesizer
        self.synthesizer = NoiseSynthesizer(
            timezone_name=synth_cfg.timezone,
            min_db=synth_cfg.min_db,
            max_db=synth_cfg.max_db
        )
        return self

    def build_projector(self) -> 'PulseApplicationBuilder':
        if not self.selector:
            self.build_selector()
        proj_cfg = self.pulse_cfg.projection
        self.projector = EVAdoptionProjector(
            self.dataset,
            self.selector,
            total_fleet=proj_cfg.total_fleet,
            monthly_growth_rate=proj_cfg.monthly_growth_rate,
            oscillation_amplitude=proj_cfg.oscillation_amplitude,
            site=self.site,
            clock=self.clock
        )
        return self

    def build_session(self) -> TimeSeriesSession:
        """A fresh window; call once per dashboard session."""
        if not self.selector:
            self.build_selector()
        if not self.synthesizer:
            self.build_synthesizer()

        self.session = TimeSeriesSession(
            self.selector,
            self.synthesizer,
            capacity=self.pulse_cfg.window.capacity,
            interval_seconds=self.interval_seconds,
            site=self.site,
            clock=self.clock
        )
        return self.session

    def build_runner(self, analytics=None, listener=None) -> DashboardRunner:
        session = self.session if self.session is not None else self.build_session()
        if not self.projector:
            self.build_projector()
        return DashboardRunner(
            session,
            self.projector,
            analytics=analytics,
            tick_seconds=self.interval_seconds,
            listener=listener
        )

    def get_components(self) -> Dict:
        """Returns built components for external use (e.g. the API)"""
        return {
            'dataset': self.dataset,
            'selector': self.selector,
            'synthesizer': self.synthesizer,
            'session': self.session,
            'projector': self.projector
        }
