"""
Domain entities for the analytics module.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class DeviceClass(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"

    @classmethod
    def from_screen_width(cls, width: int) -> 'DeviceClass':
        if width < 768:
            return cls.MOBILE
        if width < 1024:
            return cls.TABLET
        return cls.DESKTOP


@dataclass(frozen=True)
class AnalyticsEvent:
    """
    One tracked interaction. Immutable once built.
    """
    event_name: str
    timestamp: str # ISO 8601, UTC
    session_id: str
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "event": self.event_name,
            "timestamp": self.timestamp,
            "sessionId": self.session_id,
        }
        if self.data is not None:
            payload["data"] = dict(self.data)
        return payload


@dataclass
class SessionRecord:
    """
    Session metadata. Mutated only by the AnalyticsService that owns it.
    """
    session_id: str
    start_time: str
    language: str
    timezone: str
    device_class: DeviceClass
    screen_size: str # "WxH"
    consent_given: bool = False
    consent_time: Optional[str] = None
    end_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "sessionId": self.session_id,
            "startTime": self.start_time,
            "language": self.language,
            "timezone": self.timezone,
            "deviceType": self.device_class.value,
            "screenSize": self.screen_size,
            "consentGiven": self.consent_given,
        }
        if self.consent_time is not None:
            payload["consentTime"] = self.consent_time
        if self.end_time is not None:
            payload["endTime"] = self.end_time
        return payload
