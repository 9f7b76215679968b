from .analytics import (
    REQUIRED_EVENT_FIELDS,
    CollectedEvent,
    EventAccepted,
    EventList,
    SummaryStats,
    SummaryResponse,
    HealthStatus,
)

__all__ = [
    "REQUIRED_EVENT_FIELDS",
    "CollectedEvent",
    "EventAccepted",
    "EventList",
    "SummaryStats",
    "SummaryResponse",
    "HealthStatus",
]
