"""
Bounded on-device store for analytics payloads.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.utils import iso_timestamp, utc_now

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 1000
DEFAULT_MAX_SESSIONS = 50


def json_safe(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of payload with values json cannot encode (datetimes, sets,
    decimals) turned into strings. Raises ValueError on circular data.
    """
    return json.loads(json.dumps(payload, default=str))


class LocalBuffer:
    """
    Holds the most recent events and sessions, evicting the oldest first.

    Every write is a read-modify-write of the whole buffer under a lock.
    When a path is given the buffer is loaded from, and mirrored to, a JSON
    file after each write.
    """

    def __init__(
        self,
        max_events: int = DEFAULT_MAX_EVENTS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        path: Optional[str] = None
    ):
        if max_events <= 0 or max_sessions <= 0:
            raise ValueError("buffer limits must be positive")
        self.max_events = max_events
        self.max_sessions = max_sessions
        self.path = Path(path) if path else None

        self._lock = threading.Lock()
        self._events: List[Dict[str, Any]] = []
        self._sessions: List[Dict[str, Any]] = []
        self._load()

    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, 'r') as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable local buffer {self.path}: {e}")
            return
        self._events = list(stored.get("events", []))[-self.max_events:]
        self._sessions = list(stored.get("sessions", []))[-self.max_sessions:]

    def _persist(self):
        """Called with the lock held."""
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump({"events": self._events, "sessions": self._sessions}, f)
        except (OSError, TypeError, ValueError) as e:
            # Memory copy stays authoritative
            logger.warning(f"Could not mirror local buffer to {self.path}: {e}")

    def append_event(self, payload: Dict[str, Any]):
        record = {**json_safe(payload), "storedAt": iso_timestamp(utc_now())}
        with self._lock:
            events = list(self._events)
            events.append(record)
            self._events = events[-self.max_events:]
            self._persist()

    def upsert_session(self, payload: Dict[str, Any]):
        payload = json_safe(payload)
        session_id = payload.get("sessionId")
        with self._lock:
            sessions = list(self._sessions)
            for i, existing in enumerate(sessions):
                if existing.get("sessionId") == session_id:
                    sessions[i] = payload
                    break
            else:
                sessions.append(payload)
            self._sessions = sessions[-self.max_sessions:]
            self._persist()

    def events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self._events]

    def sessions(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(s) for s in self._sessions]

    def export(self) -> Dict[str, Any]:
        """Everything held locally, for download or inspection."""
        with self._lock:
            return {
                "exportDate": iso_timestamp(utc_now()),
                "events": [dict(e) for e in self._events],
                "sessions": [dict(s) for s in self._sessions]
            }

    def clear(self):
        """Removes everything, file mirror included."""
        with self._lock:
            self._events = []
            self._sessions = []
            self._persist()

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            events = list(self._events)
            sessions = list(self._sessions)
        size = len(json.dumps(events)) + len(json.dumps(sessions))
        return {
            "totalEvents": len(events),
            "totalSessions": len(sessions),
            "lastEventDate": events[-1].get("timestamp") if events else None,
            "eventTypes": sorted({e.get("event") for e in events if e.get("event")}),
            "storageSize": _format_size(size)
        }


def _format_size(total_bytes: int) -> str:
    if total_bytes < 1024:
        return f"{total_bytes} bytes"
    if total_bytes < 1024 * 1024:
        return f"{total_bytes / 1024:.1f} KB"
    return f"{total_bytes / (1024 * 1024):.1f} MB"


class LocalBufferAdapter:
    """Storage adapter over a LocalBuffer. Always available."""

    name = "local"

    def __init__(self, buffer: LocalBuffer):
        self.buffer = buffer

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        try:
            self.buffer.append_event(event.to_dict())
        except (TypeError, ValueError) as e:
            return StorageResult.failure(self.name, f"unstorable event: {e}")
        return StorageResult.success(self.name)

    def save_session(self, session: SessionRecord) -> StorageResult:
        try:
            self.buffer.upsert_session(session.to_dict())
        except (TypeError, ValueError) as e:
            return StorageResult.failure(self.name, f"unstorable session: {e}")
        return StorageResult.success(self.name)

    def is_available(self) -> bool:
        return True
