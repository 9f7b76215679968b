"""
Background delivery so tracking never waits on storage I/O.
"""
import dataclasses
import logging
import queue
import threading

from ..domain.entities import AnalyticsEvent, SessionRecord
from .chain import StorageChain

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """
    Puts writes on a bounded queue drained by one worker thread.
    Arrival order at remote stores is not guaranteed.
    """

    def __init__(self, chain: StorageChain, queue_size: int = 500):
        self.chain = chain
        self.queue = queue.Queue(maxsize=queue_size)

        self._stop_event = threading.Event()
        self._worker_thread = threading.Thread(
            target=self._dispatch_worker,
            name="AnalyticsDispatcher",
            daemon=True
        )
        self._worker_thread.start()

    @property
    def is_running(self) -> bool:
        return self._worker_thread.is_alive()

    def submit_event(self, event: AnalyticsEvent) -> bool:
        return self._enqueue(("event", event))

    def submit_session(self, session: SessionRecord) -> bool:
        # Snapshot: the service keeps mutating its record
        return self._enqueue(("session", dataclasses.replace(session)))

    def _enqueue(self, item) -> bool:
        """Non-blocking. Returns False if the item went straight to the local buffer."""
        if self._stop_event.is_set():
            logger.warning("Dispatcher stopped, keeping write in local buffer")
            self._buffer_directly(item)
            return False
        try:
            self.queue.put_nowait(item)
            return True
        except queue.Full:
            logger.warning("Dispatch queue full, keeping write in local buffer")
            self._buffer_directly(item)
            return False

    def _buffer_directly(self, item):
        kind, payload = item
        if kind == "event":
            self.chain.buffer.append_event(payload.to_dict())
        else:
            self.chain.buffer.upsert_session(payload.to_dict())

    def _dispatch_worker(self):
        """
        Worker thread that handles storage I/O.
        """
        while not self._stop_event.is_set() or not self.queue.empty():
            try:
                kind, payload = self.queue.get(timeout=0.5)
            except queue.Empty:
                continue

            try:
                if kind == "event":
                    self.chain.save_event(payload)
                else:
                    self.chain.save_session(payload)
            except Exception as e:
                logger.error(f"Dispatch worker error: {e}", exc_info=True)
            finally:
                self.queue.task_done()

    def flush(self):
        """Blocks until every queued write has been handled."""
        self.queue.join()

    def stop(self, timeout: float = 5.0):
        """Drains the queue and stops the worker thread."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._worker_thread.join(timeout=timeout)
        if self._worker_thread.is_alive():
            logger.warning("Dispatcher did not drain within timeout, leaving adapters open")
            return
        self.chain.close()
