"""
SQLAlchemy persistence for events received by the collector.
"""
import logging
import random
import string
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ...common.database.models import AnalyticsEventDB
from ...common.utils import epoch_ms, ensure_utc, iso_timestamp, utc_now

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 10000


def generate_event_id(now: datetime) -> str:
    suffix = "".join(random.choice(string.digits + string.ascii_lowercase) for _ in range(9))
    return f"{epoch_ms(now)}-{suffix}"


class CollectorRepository:
    """
    Keeps at most `max_events` records, pruning the oldest on insert.
    """

    def __init__(self, db: Session, max_events: int = DEFAULT_MAX_EVENTS):
        self.db = db
        self.max_events = max_events

    def save(self, record: Dict[str, Any], now: Optional[datetime] = None) -> AnalyticsEventDB:
        now = now or utc_now()
        payload = dict(record)
        row = AnalyticsEventDB(
            event_id=generate_event_id(now),
            site_id=payload["siteId"],
            event_type=payload["eventType"],
            session_id=payload.get("sessionId"),
            url=payload.get("url"),
            language=payload.get("language"),
            client_timestamp=payload.get("timestamp"),
            server_timestamp=now.replace(tzinfo=None),
            payload=payload
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        self._prune()
        logger.info(f"Analytics event received: {row.event_type} from {row.site_id}")
        return row

    def _prune(self):
        cutoff = (
            self.db.query(AnalyticsEventDB.id)
            .order_by(AnalyticsEventDB.id.desc())
            .offset(self.max_events)
            .limit(1)
            .scalar()
        )
        if cutoff is None:
            return
        removed = (
            self.db.query(AnalyticsEventDB)
            .filter(AnalyticsEventDB.id <= cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.debug(f"Pruned {removed} old analytics events")

    def count(self) -> int:
        return self.db.query(AnalyticsEventDB).count()

    def list_events(
        self,
        site_id: Optional[str] = None,
        event_type: Optional[str] = None,
        limit: int = 1000
    ) -> List[AnalyticsEventDB]:
        """Newest first."""
        query = self.db.query(AnalyticsEventDB)
        if site_id:
            query = query.filter(AnalyticsEventDB.site_id == site_id)
        if event_type:
            query = query.filter(AnalyticsEventDB.event_type == event_type)
        return (
            query.order_by(AnalyticsEventDB.server_timestamp.desc(), AnalyticsEventDB.id.desc())
            .limit(limit)
            .all()
        )

    def summary(self, site_id: Optional[str] = None) -> Dict[str, Any]:
        query = self.db.query(AnalyticsEventDB)
        if site_id:
            query = query.filter(AnalyticsEventDB.site_id == site_id)
        rows = query.all()

        return {
            "totalEvents": len(rows),
            "uniqueSessions": len({r.session_id for r in rows if r.session_id}),
            "eventTypes": dict(Counter(r.event_type for r in rows)),
            "pages": dict(Counter(r.url for r in rows if r.url)),
            "languages": dict(Counter(r.language for r in rows if r.language)),
            "lastUpdated": iso_timestamp(utc_now())
        }


def to_record(row: AnalyticsEventDB) -> Dict[str, Any]:
    """The stored record as the client sent it, plus server fields."""
    return {
        **(row.payload or {}),
        "id": row.event_id,
        "serverTimestamp": iso_timestamp(ensure_utc(row.server_timestamp))
    }
