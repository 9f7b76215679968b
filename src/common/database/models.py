from sqlalchemy import Column, Integer, String, DateTime, JSON
from .database import Base


class AnalyticsEventDB(Base):
    """
    One event received by the collector. Client IP and user agent are
    never stored.
    """
    __tablename__ = "analytics_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String, unique=True, index=True, nullable=False)
    site_id = Column(String, index=True, nullable=False)
    event_type = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=True)
    url = Column(String, nullable=True)
    language = Column(String, nullable=True)
    client_timestamp = Column(String, nullable=True)
    server_timestamp = Column(DateTime, index=True, nullable=False)
    payload = Column(JSON, nullable=False, default=dict) # Full record as sent
