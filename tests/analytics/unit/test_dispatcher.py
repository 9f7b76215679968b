import pytest
import threading
from unittest.mock import MagicMock
from src.analytics.application.chain import StorageChain
from src.analytics.application.dispatcher import BackgroundDispatcher
from src.analytics.domain import FunctionsBackend, StorageResult
from src.analytics.infrastructure import FunctionEndpointAdapter, LocalBuffer, LocalBufferAdapter

@pytest.fixture
def buffer():
    return LocalBuffer()

@pytest.fixture
def dispatcher(buffer):
    dispatcher = BackgroundDispatcher(StorageChain(LocalBufferAdapter(buffer), buffer))
    yield dispatcher
    dispatcher.stop()

def test_events_are_delivered_in_background(dispatcher, buffer, sample_event):
    assert dispatcher.submit_event(sample_event)
    dispatcher.flush()
    assert len(buffer.events()) == 1

def test_session_is_snapshotted(dispatcher, buffer, sample_session):
    dispatcher.submit_session(sample_session)
    sample_session.end_time = "2025-08-12T16:00:00.000Z"
    dispatcher.flush()
    assert "endTime" not in buffer.sessions()[0]

def test_submit_does_not_wait_for_storage(buffer, sample_event):
    release = threading.Event()
    slow = MagicMock()
    slow.name = "slow"
    slow.save_event.side_effect = lambda e: release.wait(5) and StorageResult.success("slow")
    dispatcher = BackgroundDispatcher(StorageChain(slow, buffer))

    for _ in range(3):
        assert dispatcher.submit_event(sample_event)
    release.set()
    dispatcher.flush()
    assert slow.save_event.call_count == 3
    dispatcher.stop()

def test_full_queue_goes_to_local_buffer(buffer, sample_event):
    release = threading.Event()
    slow = MagicMock()
    slow.name = "slow"
    slow.save_event.side_effect = lambda e: release.wait(5) and StorageResult.success("slow")
    dispatcher = BackgroundDispatcher(StorageChain(slow, buffer), queue_size=1)

    results = [dispatcher.submit_event(sample_event) for _ in range(4)]
    assert results.count(False) >= 2
    assert len(buffer.events()) == results.count(False)

    release.set()
    dispatcher.stop()

def test_stop_drains_queue(buffer, sample_event):
    dispatcher = BackgroundDispatcher(StorageChain(LocalBufferAdapter(buffer), buffer))
    for _ in range(10):
        dispatcher.submit_event(sample_event)
    dispatcher.stop()
    assert not dispatcher.is_running
    assert len(buffer.events()) == 10

def test_submit_after_stop_is_buffered(buffer, sample_event):
    dispatcher = BackgroundDispatcher(StorageChain(LocalBufferAdapter(buffer), buffer))
    dispatcher.stop()
    assert dispatcher.submit_event(sample_event) is False
    assert len(buffer.events()) == 1

def test_stop_closes_remote_sessions(buffer, sample_event):
    http = MagicMock()
    http.request.return_value.ok = True
    remote = FunctionEndpointAdapter(FunctionsBackend(url="https://fn.example.com"), session=http)
    dispatcher = BackgroundDispatcher(StorageChain(remote, buffer, fallbacks=[LocalBufferAdapter(buffer)]))

    dispatcher.submit_event(sample_event)
    dispatcher.stop()
    http.request.assert_called_once()
    http.close.assert_called_once()

    dispatcher.stop()
    http.close.assert_called_once()
