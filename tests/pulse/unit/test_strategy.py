import pytest
from datetime import datetime, timedelta, timezone
from src.common.exceptions import DatasetError
from src.pulse.application.strategy import DataStrategySelector
from src.pulse.domain import DataStrategy

@pytest.fixture
def selector(two_point_dataset):
    return DataStrategySelector(two_point_dataset)

def test_cutoff_is_start_of_latest_month(selector):
    assert selector.cutoff == datetime(2023, 7, 1, tzinfo=timezone.utc)

def test_select_real_up_to_cutoff(selector):
    assert selector.select(datetime(2023, 6, 15, tzinfo=timezone.utc)) is DataStrategy.REAL
    assert selector.select(selector.cutoff) is DataStrategy.REAL

def test_select_estimated_after_cutoff(selector):
    assert selector.select(selector.cutoff + timedelta(milliseconds=1)) is DataStrategy.ESTIMATED
    assert selector.select(datetime(2030, 1, 1, tzinfo=timezone.utc)) is DataStrategy.ESTIMATED

def test_naive_timestamps_are_utc(selector):
    assert selector.select(datetime(2023, 7, 1)) is DataStrategy.REAL
    assert selector.select(datetime(2023, 7, 1, 0, 0, 1)) is DataStrategy.ESTIMATED

def test_two_point_scenario(selector):
    assert selector.base_noise_level(datetime(2023, 6, 15, tzinfo=timezone.utc)) == 73.0
    estimated = selector.base_noise_level(datetime(2023, 7, 2, tzinfo=timezone.utc))
    assert estimated == pytest.approx(72.948)

def test_continuity_at_cutoff(selector):
    at_cutoff = selector.base_noise_level(selector.cutoff)
    just_after = selector.base_noise_level(selector.cutoff + timedelta(milliseconds=1))
    assert abs(at_cutoff - just_after) <= abs(selector.drift_per_day)

def test_drift_uses_whole_days(selector):
    # 36 hours after cutoff is still one whole day
    ts = selector.cutoff + timedelta(hours=36)
    assert selector.base_noise_level(ts) == pytest.approx(72.95 - 0.002)

def test_month_gap_holds_latest(dataset):
    selector = DataStrategySelector(dataset)
    # Before the first month there is no observation
    level = selector.base_noise_level(datetime(2023, 1, 10, tzinfo=timezone.utc))
    assert level == dataset.latest.papineau_noise

def test_cartier_site(dataset):
    selector = DataStrategySelector(dataset)
    level = selector.base_noise_level(datetime(2024, 1, 20, tzinfo=timezone.utc), site="cartier")
    assert level == 64.79

def test_unknown_site_rejected(selector):
    with pytest.raises(DatasetError):
        selector.base_noise_level(datetime(2023, 6, 15, tzinfo=timezone.utc), site="sherbrooke")

def test_baseline_is_first_month(dataset):
    selector = DataStrategySelector(dataset)
    assert selector.baseline() == 73.0
    assert selector.baseline("cartier") == 65.0
    assert selector.latest_baseline() == {
        "papineau": 71.85,
        "cartier": 64.31,
        "timestamp": "2025-05-01"
    }
