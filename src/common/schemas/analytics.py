from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

REQUIRED_EVENT_FIELDS = ["siteId", "eventType"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CollectedEvent(CamelModel):
    """
    An analytics record posted to the collector. Unknown fields are kept.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    site_id: str = Field(..., min_length=1, description="Site the event belongs to")
    event_type: str = Field(..., min_length=1, description="Event name, e.g. page_view")
    session_id: Optional[str] = Field(None, description="Visitor session identifier")
    url: Optional[str] = Field(None, description="Page the event was recorded on")
    language: Optional[str] = Field(None, description="Visitor language, fr or en")
    timestamp: Optional[str] = Field(None, description="Client timestamp (ISO 8601)")


class EventAccepted(CamelModel):
    success: bool = True
    event_id: str
    timestamp: str


class EventList(CamelModel):
    success: bool = True
    count: int = Field(..., ge=0, description="Events in this response")
    total: int = Field(..., ge=0, description="Events stored overall")
    events: List[Dict[str, Any]]


class SummaryStats(CamelModel):
    total_events: int = Field(..., ge=0)
    unique_sessions: int = Field(..., ge=0)
    event_types: Dict[str, int]
    pages: Dict[str, int]
    languages: Dict[str, int]
    last_updated: str


class SummaryResponse(CamelModel):
    success: bool = True
    summary: SummaryStats


class HealthStatus(CamelModel):
    status: str = "healthy"
    timestamp: str
    service: str
