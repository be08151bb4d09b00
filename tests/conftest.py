# tests/conftest.py
"""Shared fixtures: required settings, an in-memory store, a DataService over it."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Settings refuse to load without these
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

import itertools
import pytest
from typing import Optional
from parkdesk.store.base import Store, StoreError
from parkdesk.services.data_service import DataService

RATES = {"motorcycle": 100.0, "passenger-car": 100.0, "van": 100.0, "other": 100.0}


class MemoryStore(Store):
    """Dict-backed Store. fail(op, table, times) makes the next calls raise StoreError."""

    def __init__(self):
        super().__init__()
        self.tables = {"users": {}, "vehicles": {}, "parking_spaces": {}, "payments": {}}
        self.calls = []
        self._ids = itertools.count(1)
        self._failures = {}

    def fail(self, op: str, table: str, times: int = 1):
        self._failures[(op, table)] = times

    def _maybe_fail(self, op: str, table: str):
        self.check_table(table)
        self.calls.append((op, table))
        remaining = self._failures.get((op, table), 0)
        if remaining:
            self._failures[(op, table)] = remaining - 1
            raise StoreError(f"{op} {table} failed (injected)", table)

    def seed(self, table: str, **row) -> dict:
        row.setdefault("id", f"{table}-{next(self._ids)}")
        self.tables[table][row["id"]] = dict(row)
        return row

    async def select(self, table: str, order_by: Optional[str] = None,
                     descending: bool = False, **filters) -> list[dict]:
        self._maybe_fail("select", table)
        rows = [dict(r) for r in self.tables[table].values()
                if all(r.get(k) == v for k, v in filters.items())]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        return rows

    async def insert(self, table: str, row: dict) -> dict:
        self._maybe_fail("insert", table)
        return dict(self.seed(table, **row))

    async def update(self, table: str, row_id: str, values: dict) -> None:
        self._maybe_fail("update", table)
        if row_id not in self.tables[table]:
            raise StoreError(f"no row {row_id}", table)
        self.tables[table][row_id].update(values)

    async def delete(self, table: str, row_id: str) -> None:
        self._maybe_fail("delete", table)
        if self.tables[table].pop(row_id, None) is None:
            raise StoreError(f"no row {row_id}", table)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def service(store):
    return DataService(store, rates=dict(RATES), match_rule="period", locale="en",
                       auto_mark_overdue=False)
