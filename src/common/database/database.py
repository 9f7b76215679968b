import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Default to a local sqlite file if not specified
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./data/noise_pulse.db"
)

Base = declarative_base()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)
engine = None


def create_db_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    if url.database in (None, "", ":memory:"):
        # One shared connection so every session sees the same in-memory db
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args={"check_same_thread": False})


def configure_database(database_url: str = DATABASE_URL):
    """Binds the session factory to a new engine for database_url."""
    global engine
    if engine is not None:
        engine.dispose()
    engine = create_db_engine(database_url)
    SessionLocal.configure(bind=engine)
    return engine


def get_db():
    """Dependency for getting DB session."""
    if engine is None:
        configure_database()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables."""
    if engine is None:
        configure_database()
    # Import models here to ensure they are registered with Base
    from . import models
    Base.metadata.create_all(bind=engine)
