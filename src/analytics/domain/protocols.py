from typing import Protocol

from .entities import AnalyticsEvent, SessionRecord
from .results import StorageResult


class StorageAdapter(Protocol):
    """Protocol for analytics storage backends."""

    name: str

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        """Persists one event. Must not raise for I/O failures."""
        ...

    def save_session(self, session: SessionRecord) -> StorageResult:
        """Creates or replaces the session record."""
        ...

    def is_available(self) -> bool:
        ...
