"""
Consent-gated, privacy-preserving usage analytics for one dashboard session.
"""
import logging
import random
import string
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..domain.entities import AnalyticsEvent, DeviceClass, SessionRecord
from .dispatcher import BackgroundDispatcher
from .sanitizer import sanitize
from ...common.utils import epoch_ms, iso_timestamp, utc_now

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_lowercase
ENVIRONMENTAL_KINDS = ("noise_chart", "ev_data", "noise_level")


def generate_session_id(now: datetime, rng: Optional[random.Random] = None) -> str:
    """`sess_<9 base36 chars>_<epoch ms>`"""
    rng = rng or random
    suffix = "".join(rng.choice(BASE36) for _ in range(9))
    return f"sess_{suffix}_{epoch_ms(now)}"


def detect_language(locale: str) -> str:
    return "fr" if locale.lower().startswith("fr") else "en"


class AnalyticsService:
    """
    Nothing is recorded until enable_analytics() is called; consent cannot
    be withdrawn within a session. Tracking calls never raise.
    """

    def __init__(
        self,
        dispatcher: BackgroundDispatcher,
        locale: str = "en-CA",
        timezone: str = "America/Montreal",
        screen_width: int = 1920,
        screen_height: int = 1080,
        clock: Callable[[], datetime] = utc_now
    ):
        self.dispatcher = dispatcher
        self._clock = clock

        self.started_at = clock()
        self.session = SessionRecord(
            session_id=generate_session_id(self.started_at),
            start_time=iso_timestamp(self.started_at),
            language=detect_language(locale),
            timezone=timezone,
            device_class=DeviceClass.from_screen_width(screen_width),
            screen_size=f"{screen_width}x{screen_height}"
        )
        self.events: List[AnalyticsEvent] = []

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def is_enabled(self) -> bool:
        return self.session.consent_given

    def enable_analytics(self):
        if self.is_enabled:
            return
        self.session.consent_given = True
        self.session.consent_time = iso_timestamp(self._clock())
        self.track_event("consent_given")
        self.dispatcher.submit_session(self.session)
        logger.info("Analytics enabled for this session")

    def track_event(self, name: str, data: Optional[Dict[str, Any]] = None):
        if not self.is_enabled:
            return
        try:
            event = AnalyticsEvent(
                event_name=name,
                timestamp=iso_timestamp(self._clock()),
                session_id=self.session_id,
                data=sanitize(data)
            )
            self.events.append(event)
            self.dispatcher.submit_event(event)
        except Exception as e:
            logger.warning(f"Dropped analytics event '{name}': {e}")

    def track_page_view(self, page: str):
        self.track_event("page_view", {"page": page})

    def track_feature_usage(self, feature: str, action: str, **data):
        self.track_event("feature_usage", {"feature": feature, "action": action, **data})

    def track_environmental_interaction(self, kind: str, **data):
        if kind not in ENVIRONMENTAL_KINDS:
            logger.warning(f"Unknown environmental interaction '{kind}'")
            return
        self.track_event("environmental_interaction", {"type": kind, **data})

    def track_visibility(self, hidden: bool):
        self.track_event("tab_hidden" if hidden else "tab_visible")

    def end_session(self):
        """Best effort; safe to call without consent or more than once."""
        if not self.is_enabled or self.session.end_time is not None:
            return
        now = self._clock()
        self.session.end_time = iso_timestamp(now)
        duration = int((now - self.started_at).total_seconds())
        total_events = len(self.events)

        self.track_event("session_end", {
            "duration_seconds": duration,
            "total_events": total_events
        })
        self.dispatcher.submit_session(self.session)
        logger.info(f"Session ended after {duration}s with {total_events} events")

    def session_summary(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id[:12] + "...",
            "language": self.session.language,
            "deviceType": self.session.device_class.value,
            "timezone": self.session.timezone,
            "consentGiven": self.session.consent_given,
            "eventCount": len(self.events),
            "isEnabled": self.is_enabled,
            "storageType": self.dispatcher.chain.primary.name
        }

    def storage_info(self) -> Dict[str, Any]:
        return self.dispatcher.chain.info()

    def export_analytics(self) -> Dict[str, Any]:
        """Locally buffered events and sessions, once pending writes are done."""
        self.dispatcher.flush()
        return self.dispatcher.chain.buffer.export()

    def clear_analytics(self):
        """Empties the local buffer. Remote stores are not touched."""
        self.dispatcher.flush()
        self.dispatcher.chain.buffer.clear()
        logger.info("Local analytics cleared")
