import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from src.analytics.application.chain import StorageChain
from src.analytics.domain import AnalyticsEvent, StorageResult
from src.analytics.infrastructure import LocalBuffer, LocalBufferAdapter

def make_adapter(name, ok=True, available=True):
    adapter = MagicMock()
    adapter.name = name
    adapter.is_available.return_value = available
    result = StorageResult.success(name) if ok else StorageResult.failure(name, "HTTP 503: Service Unavailable", 503)
    adapter.save_event.return_value = result
    adapter.save_session.return_value = result
    return adapter

@pytest.fixture
def buffer():
    return LocalBuffer()

def test_primary_success(buffer, sample_event):
    primary = make_adapter("table")
    chain = StorageChain(primary, buffer)
    result = chain.save_event(sample_event)
    assert result.ok
    assert result.adapter == "table"
    assert buffer.events() == []
    assert chain.metrics.get_metrics().delivered == {"table": 1}

def test_failing_primary_buffers_exactly_once(buffer, sample_event):
    chain = StorageChain(make_adapter("table", ok=False), buffer)
    result = chain.save_event(sample_event)

    assert not result.ok
    events = buffer.events()
    assert len(events) == 1
    assert events[0]["event"] == "page_view"
    assert events[0]["sessionId"] == sample_event.session_id

    metrics = chain.metrics.get_metrics()
    assert metrics.hard_failures == 1
    assert metrics.buffered == 1
    assert metrics.failed_attempts == {"table": 1}

def test_fallbacks_tried_in_order(buffer, sample_event):
    primary = make_adapter("table", ok=False)
    cosmos = make_adapter("cosmos", ok=False)
    functions = make_adapter("functions")
    http = make_adapter("http")
    chain = StorageChain(primary, buffer, fallbacks=[cosmos, functions, http])

    result = chain.save_event(sample_event)
    assert result.adapter == "functions"
    cosmos.save_event.assert_called_once_with(sample_event)
    http.save_event.assert_not_called()
    assert buffer.events() == []

def test_unavailable_fallbacks_are_skipped(buffer, sample_event):
    primary = make_adapter("table", ok=False)
    limited = make_adapter("http", available=False)
    chain = StorageChain(primary, buffer, fallbacks=[limited])

    chain.save_event(sample_event)
    limited.save_event.assert_not_called()
    assert len(buffer.events()) == 1

def test_local_adapter_in_chain_is_not_double_buffered(buffer, sample_event):
    chain = StorageChain(make_adapter("table", ok=False), buffer, fallbacks=[LocalBufferAdapter(buffer)])
    result = chain.save_event(sample_event)
    assert result.ok
    assert result.adapter == "local"
    assert len(buffer.events()) == 1
    assert chain.metrics.get_metrics().hard_failures == 0

def test_raising_adapter_counts_as_failure(buffer, sample_event):
    primary = make_adapter("table")
    primary.save_event.side_effect = RuntimeError("boom")
    chain = StorageChain(primary, buffer)
    result = chain.save_event(sample_event)
    assert not result.ok
    assert len(buffer.events()) == 1

def test_session_fallback_upserts(buffer, sample_session):
    chain = StorageChain(make_adapter("cosmos", ok=False), buffer)
    chain.save_session(sample_session)
    sample_session.end_time = "2025-08-12T15:00:00.000Z"
    chain.save_session(sample_session)

    sessions = buffer.sessions()
    assert len(sessions) == 1
    assert sessions[0]["endTime"] == "2025-08-12T15:00:00.000Z"

def test_hard_failure_logged(buffer, sample_event, caplog):
    chain = StorageChain(make_adapter("table", ok=False), buffer)
    with caplog.at_level("WARNING"):
        chain.save_event(sample_event)
    assert any(r.levelname == "ERROR" and "Hard failure" in r.message for r in caplog.records)

def test_info(buffer):
    chain = StorageChain(LocalBufferAdapter(buffer), buffer, fallbacks=[make_adapter("http")])
    info = chain.info()
    assert info["primary"] == "local"
    assert info["fallbacks"] == ["http"]
    assert info["isLocal"] is True
    assert info["buffer"]["totalEvents"] == 0

def test_local_primary_stores_non_json_data_once(tmp_path, caplog):
    buffer = LocalBuffer(path=str(tmp_path / "buffer.json"))
    chain = StorageChain(LocalBufferAdapter(buffer), buffer)
    event = AnalyticsEvent(
        event_name="chart_export",
        timestamp="2025-08-12T14:30:00.000Z",
        session_id="sess_abc123xyz_1755009000000",
        data={"when": datetime(2025, 8, 12, 14, 30, tzinfo=timezone.utc)}
    )
    with caplog.at_level("WARNING"):
        result = chain.save_event(event)

    assert result.ok
    assert len(buffer.events()) == 1
    assert chain.metrics.get_metrics().hard_failures == 0
    assert not any(r.levelname == "ERROR" for r in caplog.records)

def test_unstorable_event_is_a_hard_failure_not_an_exception(buffer, caplog):
    data = {}
    data["self"] = data
    event = AnalyticsEvent(event_name="loop", timestamp="2025-08-12T14:30:00.000Z", session_id="s", data=data)
    chain = StorageChain(LocalBufferAdapter(buffer), buffer)

    with caplog.at_level("WARNING"):
        result = chain.save_event(event)

    assert not result.ok
    assert buffer.events() == []
    assert chain.metrics.get_metrics().hard_failures == 1
    assert any(r.levelname == "ERROR" and "Hard failure" in r.message for r in caplog.records)
