from .database import SessionLocal, Base, get_db, init_db, configure_database, create_db_engine
from .models import AnalyticsEventDB

__all__ = [
    "SessionLocal", "Base", "get_db", "init_db",
    "configure_database", "create_db_engine",
    "AnalyticsEventDB"
]
