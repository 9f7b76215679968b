"""
Collector API for analytics events posted by dashboards.
"""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ....application.sanitizer import sanitize
from ....infrastructure.event_repository import CollectorRepository, DEFAULT_MAX_EVENTS, to_record
from .....common.database import get_db
from .....common.schemas import (
    REQUIRED_EVENT_FIELDS,
    CollectedEvent,
    EventAccepted,
    EventList,
    SummaryResponse,
    SummaryStats
)
from .....common.utils import ensure_utc, iso_timestamp

logger = logging.getLogger(__name__)

app = FastAPI()

# Singleton
_max_events: int = DEFAULT_MAX_EVENTS

def init_collector(max_events: int = DEFAULT_MAX_EVENTS):
    global _max_events
    _max_events = max_events

def get_repository(db: Session = Depends(get_db)) -> CollectorRepository:
    return CollectorRepository(db, max_events=_max_events)

def invalid_event() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid event data", "required": REQUIRED_EVENT_FIELDS}
    )

@app.post("/api/analytics", response_model=EventAccepted)
async def collect_event(request: Request, repository: CollectorRepository = Depends(get_repository)):
    """
    Stores one event. Requires `siteId` and `eventType`; everything else is
    kept as sent, minus identifying fields.
    """
    try:
        body = await request.json()
    except ValueError:
        return invalid_event()
    if not isinstance(body, dict):
        return invalid_event()

    try:
        CollectedEvent.model_validate(body)
    except ValidationError:
        return invalid_event()

    # SQLAlchemy calls block, keep them off the event loop
    row = await run_in_threadpool(repository.save, sanitize(body))
    return EventAccepted(
        event_id=row.event_id,
        timestamp=iso_timestamp(ensure_utc(row.server_timestamp))
    )

@app.get("/api/analytics", response_model=EventList)
def list_events(
    site_id: Optional[str] = Query(None, alias="siteId"),
    event_type: Optional[str] = Query(None, alias="eventType"),
    limit: int = Query(1000, ge=1, le=10000),
    repository: CollectorRepository = Depends(get_repository)
):
    """Stored events, newest first."""
    rows = repository.list_events(site_id=site_id, event_type=event_type, limit=limit)
    return EventList(
        count=len(rows),
        total=repository.count(),
        events=[to_record(r) for r in rows]
    )

@app.get("/api/analytics/summary", response_model=SummaryResponse)
def get_summary(
    site_id: Optional[str] = Query(None, alias="siteId"),
    repository: CollectorRepository = Depends(get_repository)
):
    stats = repository.summary(site_id=site_id)
    return SummaryResponse(summary=SummaryStats.model_validate(stats))
