import math
import pytest
from datetime import datetime, timedelta, timezone
from src.common.exceptions import ConfigurationError
from src.pulse.application.synthesizer import (
    NoiseSynthesizer,
    micro_pattern,
    pseudo_random_jitter,
    time_of_day_variation,
    traffic_light_cycle,
    weekend_offset
)

@pytest.fixture
def synthesizer():
    return NoiseSynthesizer()

@pytest.mark.parametrize("hour,expected", [
    (7, 8.0), (9, 8.0), (16, 8.0), (19, 8.0),
    (6, 2.0), (12, 2.0), (22, 2.0),
    (0, -5.0), (3, -5.0), (23, -5.0),
])
def test_time_of_day_variation(hour, expected):
    assert time_of_day_variation(hour) == expected

def test_traffic_light_cycle():
    assert traffic_light_cycle(0) == 0.0
    assert traffic_light_cycle(1) == pytest.approx(1.2)
    assert traffic_light_cycle(3) == pytest.approx(-1.2)

def test_weekend_offset():
    assert weekend_offset(4) == 0.0 # Friday
    assert weekend_offset(5) == -4.0
    assert weekend_offset(6) == -4.0

def test_jitter_is_bounded_and_deterministic():
    for seed in range(0, 5000, 7):
        value = pseudo_random_jitter(seed)
        assert -1.2 <= value <= 1.2
        assert pseudo_random_jitter(seed) == value

def test_micro_pattern_is_bounded():
    for seed in range(0, 10_000_000, 99_991):
        assert abs(micro_pattern(seed)) <= 2.7

def test_components_use_local_time(synthesizer):
    # 12:30 UTC is 08:30 in Montreal during daylight time
    ts = datetime(2025, 8, 12, 12, 30, tzinfo=timezone.utc)
    components = synthesizer.components(ts)
    assert components.time_of_day == 8.0
    assert components.weekend == 0.0

def test_weekend_in_local_time(synthesizer):
    # Sunday 02:00 UTC is still Saturday evening in Montreal
    ts = datetime(2025, 8, 10, 2, 0, tzinfo=timezone.utc)
    assert synthesizer.local_time(ts).weekday() == 5
    assert synthesizer.components(ts).weekend == -4.0

def test_synthesize_adds_components(synthesizer):
    ts = datetime(2025, 3, 4, 15, 17, 42, tzinfo=timezone.utc)
    c = synthesizer.components(ts)
    expected = 60.0 + c.time_of_day + c.traffic_light + c.weekend + c.micro_pattern + c.jitter
    assert synthesizer.synthesize(ts, 60.0) == pytest.approx(expected)
    assert c.total == pytest.approx(expected - 60.0)

@pytest.mark.parametrize("base", [-50.0, 0.0, 29.0, 55.0, 84.9, 120.0, 1e6])
def test_synthesize_is_clamped(synthesizer, base):
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    for i in range(0, 48):
        value = synthesizer.synthesize(start + timedelta(minutes=37 * i), base)
        assert 30.0 <= value <= 85.0

def test_synthesize_rejects_missing_base(synthesizer):
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ConfigurationError):
        synthesizer.synthesize(ts, None)
    with pytest.raises(ConfigurationError):
        synthesizer.synthesize(ts, math.nan)

def test_utc_timezone_option():
    synthesizer = NoiseSynthesizer(timezone_name=None)
    ts = datetime(2025, 8, 12, 8, 0, tzinfo=timezone.utc)
    assert synthesizer.components(ts).time_of_day == 8.0

def test_invalid_bounds():
    with pytest.raises(ConfigurationError):
        NoiseSynthesizer(min_db=85, max_db=30)
