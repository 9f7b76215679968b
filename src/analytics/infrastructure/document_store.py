"""
Azure Cosmos DB (SQL API) adapter over the REST interface.
"""
import base64
import hashlib
import hmac
import json
from typing import Dict
from urllib.parse import quote

from .remote import RemoteAdapter
from .table_store import rfc1123_date
from ..domain.backends import CosmosBackend
from ..domain.entities import AnalyticsEvent, SessionRecord
from ..domain.results import StorageResult
from ...common.utils import epoch_ms, iso_timestamp

API_VERSION = "2018-12-31"
SESSION_PARTITION = "sessions"
TTL_SECONDS = 60 * 60 * 24 * 365 # 1 year


def master_key_auth(key: str, verb: str, resource_type: str, resource_link: str, date: str) -> str:
    """Authorization header value for Cosmos master-key auth."""
    string_to_sign = f"{verb.lower()}\n{resource_type.lower()}\n{resource_link}\n{date.lower()}\n\n"
    digest = hmac.new(
        base64.b64decode(key),
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).digest()
    signature = base64.b64encode(digest).decode("utf-8")
    return quote(f"type=master&ver=1.0&sig={signature}", safe="")


class DocumentStoreAdapter(RemoteAdapter):
    """
    Events go to a monthly partition; sessions are upserted into one
    partition. Documents expire after a year.
    """

    name = "cosmos"

    def __init__(self, config: CosmosBackend, **kwargs):
        super().__init__(**kwargs)
        self.config = config
        self.collection_link = f"dbs/{config.database}/colls/{config.container}"
        self.url = f"{config.endpoint}/{self.collection_link}/docs"

    def _headers(self, partition_key: str, upsert: bool = False) -> Dict[str, str]:
        date = rfc1123_date(self._clock())
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-ms-date": date,
            "x-ms-version": API_VERSION,
            "x-ms-documentdb-partitionkey": json.dumps([partition_key]),
            "Authorization": master_key_auth(
                self.config.key, "POST", "docs", self.collection_link, date
            ),
        }
        if upsert:
            headers["x-ms-documentdb-is-upsert"] = "True"
        return headers

    def save_event(self, event: AnalyticsEvent) -> StorageResult:
        now = self._clock()
        partition = event.timestamp[:7] # YYYY-MM
        document = {
            "id": f"{event.session_id}_{epoch_ms(now)}",
            "type": "event",
            "eventType": event.event_name,
            "timestamp": event.timestamp,
            "sessionId": event.session_id,
            "data": event.data or {},
            "partitionKey": partition,
            "createdAt": iso_timestamp(now),
            "ttl": TTL_SECONDS,
        }
        return self._post(self.url, document, headers=self._headers(partition))

    def save_session(self, session: SessionRecord) -> StorageResult:
        document = {
            "id": session.session_id,
            "type": "session",
            **session.to_dict(),
            "partitionKey": SESSION_PARTITION,
            "createdAt": iso_timestamp(self._clock()),
            "ttl": TTL_SECONDS,
        }
        return self._post(self.url, document, headers=self._headers(SESSION_PARTITION, upsert=True))
