# parkdesk/database.py
"""
Database connection, session management, and table creation for the
SQL store backend (STORE_BACKEND=sql). Uses SQLAlchemy; PostgreSQL in
production, SQLite for local runs and tests. All models are auto-imported
in create_tables() so every table is created in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from parkdesk.config import settings

Base = declarative_base()

_engine = None
_session_factory = None


def make_engine(url: str) -> Engine:
    """Build an engine. Pool sizing only applies to server databases."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = make_engine(settings.DATABASE_URL)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def create_tables(engine: Engine = None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from parkdesk.models.user import User                    # noqa
    from parkdesk.models.vehicle import Vehicle              # noqa
    from parkdesk.models.parking_space import ParkingSpace   # noqa
    from parkdesk.models.payment import Payment              # noqa

    Base.metadata.create_all(bind=engine or get_engine())
