"""
Base class for adapters that write over HTTP.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import requests

from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class RemoteAdapter(ABC):
    """
    One POST per write, no retries. Non-2xx responses, transport errors and
    timeouts all come back as a failed StorageResult.
    """

    name = "remote"

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.timeout_seconds = timeout_seconds
        self.http = session or requests.Session()
        self._clock = clock

    @abstractmethod
    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        pass

    @abstractmethod
    def save_session(self, session: SessionRecord) -> StorageResult:
        pass

    def is_available(self) -> bool:
        return True

    def close(self):
        self.http.close()

    def _post(self, url: str, body: Dict[str, Any], **kwargs) -> StorageResult:
        return self._send("POST", url, body, **kwargs)

    def _send(
        self,
        method: str,
        url: str,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None
    ) -> StorageResult:
        try:
            response = self.http.request(
                method,
                url,
                json=body,
                headers=headers,
                params=params,
                timeout=self.timeout_seconds
            )
        except requests.Timeout:
            return StorageResult.failure(self.name, f"timed out after {self.timeout_seconds}s")
        except requests.RequestException as e:
            return StorageResult.failure(self.name, f"request failed: {e}")

        if not response.ok:
            return StorageResult.failure(
                self.name,
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code
            )
        logger.debug(f"{self.name}: write accepted ({response.status_code})")
        return StorageResult.success(self.name)
