from src.common.metrics import MetricsCollector

def test_counts_per_adapter():
    metrics = MetricsCollector()
    metrics.record_delivery("table")
    metrics.record_delivery("table")
    metrics.record_failure("http")
    metrics.record_hard_failure()

    snapshot = metrics.get_metrics().to_dict()
    assert snapshot["delivered"] == {"table": 2}
    assert snapshot["failed_attempts"] == {"http": 1}
    assert snapshot["buffered"] == 1
    assert snapshot["hard_failures"] == 1
    assert snapshot["uptime_seconds"] >= 0

def test_snapshot_is_a_copy():
    metrics = MetricsCollector()
    snapshot = metrics.get_metrics()
    metrics.record_delivery("local")
    assert snapshot.delivered == {}
