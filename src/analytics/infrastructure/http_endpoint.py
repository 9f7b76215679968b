"""
Adapter for the noise pulse collector API (POST /api/analytics).
"""
import logging
from typing import Any, Dict, Optional

from .remote import RemoteAdapter
from ..domain.backends import HttpBackend
from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

SESSION_EVENT_TYPE = "session"


class HttpEndpointAdapter(RemoteAdapter):
    """
    Sends events as collector records tagged with the site id. Sessions are
    sent as records of type "session". Calls over the collector's rate limit
    fail locally without touching the network.
    """

    name = "http"

    def __init__(
        self,
        config: HttpBackend,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.config = config
        self.url = f"{config.url}/api/analytics"
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _submit(self, record: Dict[str, Any]) -> StorageResult:
        if not self.rate_limiter.allow(self.config.site_id):
            return StorageResult.failure(self.name, "client-side rate limit reached", status_code=429)
        return self._post(self.url, record, headers=self._headers())

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        data = event.data or {}
        record = {
            "siteId": self.config.site_id,
            "eventType": event.event_name,
            "sessionId": event.session_id,
            "timestamp": event.timestamp,
            "data": data,
        }
        page = data.get("url") or data.get("page")
        if page:
            record["url"] = page
        if data.get("language"):
            record["language"] = data["language"]
        return self._submit(record)

    def save_session(self, session: SessionRecord) -> StorageResult:
        record = {
            "siteId": self.config.site_id,
            "eventType": SESSION_EVENT_TYPE,
            "sessionId": session.session_id,
            "timestamp": session.end_time or session.start_time,
            "language": session.language,
            "data": session.to_dict(),
        }
        return self._submit(record)

    def is_available(self) -> bool:
        return self.rate_limiter.remaining(self.config.site_id) > 0
