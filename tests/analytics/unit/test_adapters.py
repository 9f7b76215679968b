import base64
import hashlib
import hmac
import json
import pytest
import requests
from datetime import datetime, timezone
from unittest.mock import MagicMock
from urllib.parse import unquote
from src.analytics.domain import CosmosBackend, FunctionsBackend, HttpBackend, TableBackend
from src.analytics.infrastructure import (
    DocumentStoreAdapter,
    FunctionEndpointAdapter,
    HttpEndpointAdapter,
    TableStoreAdapter
)
from src.common.rate_limit import SlidingWindowRateLimiter

KEY = base64.b64encode(b"secret-key-bytes").decode()
NOW = datetime(2025, 8, 12, 14, 30, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)

def make_http(status=204, reason="No Content"):
    http = MagicMock()
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.reason = reason
    http.request.return_value = response
    return http

def sent(http):
    """(method, url, kwargs) of the single request made."""
    http.request.assert_called_once()
    call = http.request.call_args
    return call.args[0], call.args[1], call.kwargs

# --- Table Storage ---

def test_table_event_entity(sample_event):
    http = make_http()
    adapter = TableStoreAdapter(TableBackend(account="noisepulse", key=KEY), session=http, clock=lambda: NOW)
    assert adapter.save_event(sample_event).ok

    method, url, kwargs = sent(http)
    assert method == "POST"
    assert url == "https://noisepulse.table.core.windows.net/analyticsdata"
    entity = kwargs["json"]
    assert entity["PartitionKey"] == "2025-08-12"
    assert entity["RowKey"] == f"{sample_event.session_id}_{NOW_MS}"
    assert json.loads(entity["EventData"]) == {"page": "dashboard"}
    assert kwargs["timeout"] == 5.0

def test_table_shared_key_lite_signature(sample_event):
    http = make_http()
    adapter = TableStoreAdapter(TableBackend(account="noisepulse", key=KEY), session=http, clock=lambda: NOW)
    adapter.save_event(sample_event)

    headers = sent(http)[2]["headers"]
    assert headers["x-ms-date"] == "Tue, 12 Aug 2025 14:30:00 GMT"
    expected = base64.b64encode(hmac.new(
        base64.b64decode(KEY),
        b"Tue, 12 Aug 2025 14:30:00 GMT\n/noisepulse/analyticsdata",
        hashlib.sha256
    ).digest()).decode()
    assert headers["Authorization"] == f"SharedKeyLite noisepulse:{expected}"

def test_table_sas_token_skips_signature(sample_event):
    http = make_http()
    config = TableBackend(account="noisepulse", sas_token="?sv=2022&sig=abc")
    adapter = TableStoreAdapter(config, session=http, clock=lambda: NOW)
    adapter.save_event(sample_event)

    _, url, kwargs = sent(http)
    assert url.endswith("/analyticsdata?sv=2022&sig=abc")
    assert "Authorization" not in kwargs["headers"]

def test_table_session_upsert(sample_session):
    http = make_http()
    adapter = TableStoreAdapter(TableBackend(account="noisepulse", key=KEY), session=http, clock=lambda: NOW)
    assert adapter.save_session(sample_session).ok

    method, url, kwargs = sent(http)
    assert method == "PUT"
    assert "PartitionKey='sessions'" in unquote(url)
    assert kwargs["json"]["RowKey"] == sample_session.session_id
    assert kwargs["json"]["EndTime"] == ""

def test_table_http_error(sample_event):
    http = make_http(status=403, reason="Forbidden")
    adapter = TableStoreAdapter(TableBackend(account="noisepulse", key=KEY), session=http)
    result = adapter.save_event(sample_event)
    assert not result.ok
    assert result.adapter == "table"
    assert result.error.status_code == 403

# --- Cosmos DB ---

def test_cosmos_event_document(sample_event):
    http = make_http(status=201, reason="Created")
    config = CosmosBackend(endpoint="https://np.documents.azure.com:443/", key=KEY)
    adapter = DocumentStoreAdapter(config, session=http, clock=lambda: NOW)
    assert adapter.save_event(sample_event).ok

    _, url, kwargs = sent(http)
    assert url == "https://np.documents.azure.com:443/dbs/noise-pulse/colls/analytics/docs"
    document = kwargs["json"]
    assert document["partitionKey"] == "2025-08"
    assert document["ttl"] == 365 * 24 * 3600
    assert kwargs["headers"]["x-ms-documentdb-partitionkey"] == '["2025-08"]'
    assert unquote(kwargs["headers"]["Authorization"]).startswith("type=master&ver=1.0&sig=")

def test_cosmos_session_is_upsert(sample_session):
    http = make_http(status=200, reason="OK")
    config = CosmosBackend(endpoint="https://np.documents.azure.com", key=KEY)
    DocumentStoreAdapter(config, session=http, clock=lambda: NOW).save_session(sample_session)

    kwargs = sent(http)[2]
    assert kwargs["headers"]["x-ms-documentdb-is-upsert"] == "True"
    assert kwargs["json"]["id"] == sample_session.session_id
    assert kwargs["json"]["type"] == "session"

# --- Functions ---

def test_functions_payload(sample_event):
    http = make_http(status=200, reason="OK")
    adapter = FunctionEndpointAdapter(
        FunctionsBackend(url="https://fn.example.com", key="abc"),
        session=http,
        clock=lambda: NOW
    )
    assert adapter.save_event(sample_event).ok

    _, url, kwargs = sent(http)
    assert url == "https://fn.example.com/api/analytics-event"
    assert kwargs["params"] == {"code": "abc"}
    assert kwargs["json"]["type"] == "event"
    assert kwargs["json"]["data"]["event"] == "page_view"
    assert kwargs["headers"]["x-ms-client-request-id"] == f"{sample_event.session_id}_{NOW_MS}"

def test_functions_session_route(sample_session):
    http = make_http(status=200, reason="OK")
    adapter = FunctionEndpointAdapter(FunctionsBackend(url="https://fn.example.com"), session=http)
    adapter.save_session(sample_session)
    _, url, kwargs = sent(http)
    assert url == "https://fn.example.com/api/analytics-session"
    assert kwargs["params"] is None

# --- Collector (HTTP) ---

def test_http_event_record(sample_event):
    http = make_http(status=200, reason="OK")
    adapter = HttpEndpointAdapter(HttpBackend(url="https://collector.example.com", api_key="k"), session=http)
    assert adapter.save_event(sample_event).ok

    _, url, kwargs = sent(http)
    assert url == "https://collector.example.com/api/analytics"
    record = kwargs["json"]
    assert record["siteId"] == "lafontaine-noise-pulse"
    assert record["eventType"] == "page_view"
    assert record["url"] == "dashboard"
    assert kwargs["headers"]["Authorization"] == "Bearer k"

def test_http_session_record(sample_session):
    http = make_http(status=200, reason="OK")
    adapter = HttpEndpointAdapter(HttpBackend(url="https://collector.example.com"), session=http)
    adapter.save_session(sample_session)
    record = sent(http)[2]["json"]
    assert record["eventType"] == "session"
    assert record["language"] == "fr"
    assert "Authorization" not in sent(http)[2]["headers"]

def test_http_client_side_rate_limit(sample_event):
    http = make_http(status=200, reason="OK")
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=900)
    adapter = HttpEndpointAdapter(HttpBackend(url="https://collector.example.com"), rate_limiter=limiter, session=http)

    assert adapter.save_event(sample_event).ok
    assert adapter.save_event(sample_event).ok
    assert not adapter.is_available()

    result = adapter.save_event(sample_event)
    assert not result.ok
    assert result.error.status_code == 429
    assert http.request.call_count == 2

# --- Transport failures ---

@pytest.mark.parametrize("exc,message", [
    (requests.Timeout("slow"), "timed out"),
    (requests.ConnectionError("refused"), "request failed"),
])
def test_transport_errors_become_results(sample_event, exc, message):
    http = MagicMock()
    http.request.side_effect = exc
    adapter = FunctionEndpointAdapter(FunctionsBackend(url="https://fn.example.com"), session=http)
    result = adapter.save_event(sample_event)
    assert not result.ok
    assert message in str(result.error)
