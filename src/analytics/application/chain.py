"""
Delivery through a primary adapter with ordered fallbacks.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.protocols import StorageAdapter
from ..domain.results import StorageResult
from ..infrastructure.local_buffer import LocalBuffer, LocalBufferAdapter
from ...common.logging import log_execution_time
from ...common.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class StorageChain:
    """
    Tries the primary adapter, then every available fallback in order.

    When all of them fail the payload is appended to the local buffer
    exactly once and the hard failure is logged and counted.
    """

    name = "chain"

    def __init__(
        self,
        primary: StorageAdapter,
        buffer: LocalBuffer,
        fallbacks: Sequence[StorageAdapter] = (),
        metrics: Optional[MetricsCollector] = None
    ):
        self.primary = primary
        self.fallbacks = list(fallbacks)
        self.buffer = buffer
        self.metrics = metrics or MetricsCollector()

    @property
    def adapters(self) -> List[StorageAdapter]:
        return [self.primary, *self.fallbacks]

    @log_execution_time(logger)
    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        return self._deliver(
            lambda adapter: adapter.save_event(event),
            lambda: self.buffer.append_event(event.to_dict()),
            f"event '{event.event_name}'"
        )

    @log_execution_time(logger)
    def save_session(self, session: SessionRecord) -> StorageResult:
        return self._deliver(
            lambda adapter: adapter.save_session(session),
            lambda: self.buffer.upsert_session(session.to_dict()),
            f"session {session.session_id}"
        )

    def is_available(self) -> bool:
        return True

    def close(self):
        """Releases adapter resources such as HTTP connection pools."""
        for adapter in self.adapters:
            close = getattr(adapter, "close", None)
            if callable(close):
                close()

    def _deliver(
        self,
        write: Callable[[StorageAdapter], StorageResult],
        buffer_write: Callable[[], None],
        label: str
    ) -> StorageResult:
        errors = []
        for position, adapter in enumerate(self.adapters):
            if position > 0 and not adapter.is_available():
                logger.debug(f"Skipping unavailable adapter '{adapter.name}'")
                continue

            try:
                result = write(adapter)
            except Exception as e:
                logger.error(f"Adapter '{adapter.name}' raised while storing {label}", exc_info=True)
                result = StorageResult.failure(adapter.name, f"unexpected error: {e}")

            if result.ok:
                self.metrics.record_delivery(adapter.name)
                if position > 0:
                    logger.warning(f"Stored {label} via fallback '{adapter.name}'")
                return result

            self.metrics.record_failure(adapter.name)
            errors.append(f"{adapter.name}: {result.error}")
            logger.warning(f"Adapter '{adapter.name}' failed to store {label}: {result.error}")

        try:
            buffer_write()
        except (TypeError, ValueError) as e:
            errors.append(f"buffer: {e}")
        self.metrics.record_hard_failure()
        logger.error(f"Hard failure: no adapter stored {label}, kept in local buffer ({'; '.join(errors)})")
        return StorageResult.failure(self.name, "; ".join(errors))

    def info(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.name,
            "fallbacks": [a.name for a in self.fallbacks],
            "isLocal": isinstance(self.primary, LocalBufferAdapter),
            "buffer": self.buffer.summary(),
            "metrics": self.metrics.get_metrics().to_dict()
        }
