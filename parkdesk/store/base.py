# parkdesk/store/base.py
"""
Persistence collaborator contract.

A store is a row-oriented view of four tables (users, vehicles,
parking_spaces, payments). Rows are plain dicts with snake_case column
names. Implementations raise StoreError for every failure; nothing else
escapes a store call.

Change notification is keyed by table name: handlers registered with
subscribe() run whenever notify() is called for that table (the
/changes webhook does this when the backend reports a row change).
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

TABLES = ("users", "vehicles", "parking_spaces", "payments")

ChangeHandler = Callable[[], Awaitable[Any]]


class StoreError(Exception):
    """A read or write against the persistence backend failed."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class Store(ABC):

    def __init__(self):
        self._handlers: dict[str, list[ChangeHandler]] = {t: [] for t in TABLES}

    @staticmethod
    def check_table(table: str):
        if table not in TABLES:
            raise StoreError(f"Unknown table '{table}'", table)

    @abstractmethod
    async def select(self, table: str, order_by: Optional[str] = None,
                     descending: bool = False, **filters) -> list[dict]:
        """Rows matching all equality filters, optionally ordered by one column."""

    @abstractmethod
    async def insert(self, table: str, row: dict) -> dict:
        """Insert one row and return it as stored (with its new id)."""

    async def insert_many(self, table: str, rows: list[dict]) -> list[dict]:
        return [await self.insert(table, row) for row in rows]

    @abstractmethod
    async def update(self, table: str, row_id: str, values: dict) -> None:
        """Apply a partial update to one row."""

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> None:
        """Delete one row by id."""

    async def ping(self) -> bool:
        await self.select("parking_spaces")
        return True

    async def close(self):
        pass

    # ── Change notification ───────────────────────────────────────────────
    def subscribe(self, table: str, handler: ChangeHandler):
        self.check_table(table)
        self._handlers[table].append(handler)

    def unsubscribe_all(self):
        for handlers in self._handlers.values():
            handlers.clear()

    async def notify(self, table: str) -> int:
        """Run every handler subscribed to `table`. Returns how many ran."""
        self.check_table(table)
        handlers = list(self._handlers[table])
        if not handlers:
            return 0
        results = await asyncio.gather(*(h() for h in handlers), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"[CHANGES] Handler for {table} failed: {result}")
        return len(handlers)
