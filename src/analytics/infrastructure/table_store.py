"""
Azure Table Storage adapter.
"""
import base64
import hashlib
import hmac
import json
from typing import Dict
from urllib.parse import quote

from .remote import RemoteAdapter
from ..domain.backends import TableBackend
from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.utils import epoch_ms, iso_timestamp

API_VERSION = "2019-02-02"
SESSION_PARTITION = "sessions"


def rfc1123_date(ts) -> str:
    return ts.strftime("%a, %d %b %Y %H:%M:%S GMT")


def shared_key_lite(account: str, key: str, resource: str, date: str) -> str:
    """
    Authorization header value for the Table service SharedKeyLite scheme.
    `resource` is the URL path without query string, e.g. `mytable`.
    """
    string_to_sign = f"{date}\n/{account}/{resource}"
    digest = hmac.new(
        base64.b64decode(key),
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).digest()
    return f"SharedKeyLite {account}:{base64.b64encode(digest).decode('utf-8')}"


class TableStoreAdapter(RemoteAdapter):
    """
    Events are inserted, partitioned by day. Sessions are upserted into a
    single partition keyed by session id, so later writes replace earlier ones.
    """

    name = "table"

    def __init__(self, config: TableBackend, **kwargs):
        super().__init__(**kwargs)
        self.config = config
        self.base_url = f"https://{config.account}.table.core.windows.net"

    def _url(self, resource: str) -> str:
        return f"{self.base_url}/{resource}{self.config.sas_token or ''}"

    def _headers(self, resource: str) -> Dict[str, str]:
        date = rfc1123_date(self._clock())
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json;odata=nometadata",
            "Prefer": "return-no-content",
            "x-ms-version": API_VERSION,
            "x-ms-date": date,
        }
        # A SAS token in the URL authorizes on its own
        if self.config.key and not self.config.sas_token:
            headers["Authorization"] = shared_key_lite(
                self.config.account, self.config.key, resource, date
            )
        return headers

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        now = self._clock()
        entity = {
            "PartitionKey": event.timestamp[:10], # YYYY-MM-DD
            "RowKey": f"{event.session_id}_{epoch_ms(now)}",
            "EventType": event.event_name,
            "EventTimestamp": event.timestamp,
            "SessionId": event.session_id,
            "EventData": json.dumps(event.data or {}),
            "CreatedAt": iso_timestamp(now),
        }
        resource = self.config.table_name
        return self._post(self._url(resource), entity, headers=self._headers(resource))

    def save_session(self, session: SessionRecord) -> StorageResult:
        entity = {
            "PartitionKey": SESSION_PARTITION,
            "RowKey": session.session_id,
            "SessionId": session.session_id,
            "StartTime": session.start_time,
            "EndTime": session.end_time or "",
            "Language": session.language,
            "Timezone": session.timezone,
            "DeviceType": session.device_class.value,
            "ScreenSize": session.screen_size,
            "ConsentGiven": session.consent_given,
            "ConsentTime": session.consent_time or "",
            "CreatedAt": iso_timestamp(self._clock()),
        }
        # Insert Or Replace Entity
        resource = quote(
            f"{self.config.table_name}(PartitionKey='{SESSION_PARTITION}',RowKey='{session.session_id}')",
            safe="/()=',"
        )
        return self._send("PUT", self._url(resource), entity, headers=self._headers(resource))
