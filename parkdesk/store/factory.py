# parkdesk/store/factory.py
"""Builds the configured store backend at startup."""

from parkdesk.config import settings
from parkdesk.store.base import Store
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)


def build_store(backend: str = None) -> Store:
    backend = (backend or settings.STORE_BACKEND).lower()
    if backend == "rest":
        from parkdesk.store.rest import RestStore
        logger.info(f"Using REST store at {settings.SUPABASE_URL}")
        return RestStore(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY,
                         timeout=settings.REQUEST_TIMEOUT_SECONDS)
    if backend == "sql":
        from parkdesk.database import create_tables, get_session_factory
        from parkdesk.store.sql import SqlStore
        logger.info("Using SQL store")
        create_tables()
        return SqlStore(get_session_factory())
    raise ValueError(f"Unknown STORE_BACKEND '{backend}' (expected rest or sql)")
