"""
Azure Functions adapter. The function app does its own persistence.
"""
from typing import Any, Dict, Optional

from .remote import RemoteAdapter
from ..domain.backends import FunctionsBackend
from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.utils import epoch_ms, iso_timestamp


class FunctionEndpointAdapter(RemoteAdapter):

    name = "functions"

    def __init__(self, config: FunctionsBackend, **kwargs):
        super().__init__(**kwargs)
        self.config = config

    def _params(self) -> Optional[Dict[str, str]]:
        return {"code": self.config.key} if self.config.key else None

    def _send_payload(self, route: str, kind: str, data: Dict[str, Any], session_id: str) -> StorageResult:
        now = self._clock()
        payload = {
            "type": kind,
            "data": data,
            "timestamp": iso_timestamp(now),
        }
        headers = {
            "Content-Type": "application/json",
            "x-ms-client-request-id": f"{session_id}_{epoch_ms(now)}",
        }
        return self._post(
            f"{self.config.url}/api/{route}",
            payload,
            headers=headers,
            params=self._params()
        )

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        return self._send_payload("analytics-event", "event", event.to_dict(), event.session_id)

    def save_session(self, session: SessionRecord) -> StorageResult:
        return self._send_payload("analytics-session", "session", session.to_dict(), session.session_id)
