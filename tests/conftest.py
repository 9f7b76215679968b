import pytest
from datetime import date, datetime, timedelta, timezone
from src.common.config.manager import ConfigManager
from src.pulse.domain import HistoricalDataset, HistoricalPoint, load_montreal_dataset
from src.analytics.domain import AnalyticsEvent, DeviceClass, SessionRecord


class FakeClock:
    """Settable clock for components that take `clock=`."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 8, 12, 14, 30, tzinfo=timezone.utc))

@pytest.fixture
def dataset():
    return load_montreal_dataset()

@pytest.fixture
def two_point_dataset():
    return HistoricalDataset([
        HistoricalPoint(date(2023, 6, 1), 73.0, 65.0, 2200, 1800),
        HistoricalPoint(date(2023, 7, 1), 72.95, 64.97, 2266, 1854),
    ])

@pytest.fixture
def app_config():
    return ConfigManager.defaults()

@pytest.fixture
def sample_event():
    return AnalyticsEvent(
        event_name="page_view",
        timestamp="2025-08-12T14:30:00.000Z",
        session_id="sess_abc123xyz_1755009000000",
        data={"page": "dashboard"}
    )

@pytest.fixture
def sample_session():
    return SessionRecord(
        session_id="sess_abc123xyz_1755009000000",
        start_time="2025-08-12T14:30:00.000Z",
        language="fr",
        timezone="America/Montreal",
        device_class=DeviceClass.DESKTOP,
        screen_size="1920x1080",
        consent_given=True,
        consent_time="2025-08-12T14:30:05.000Z"
    )
