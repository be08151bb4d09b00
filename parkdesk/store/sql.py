# parkdesk/store/sql.py
"""
Store backed by SQLAlchemy tables (STORE_BACKEND=sql).
Rows are returned in the same JSON-friendly shape the REST backend
produces: dates as ISO strings, numerics as floats.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Date, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool
from parkdesk.models import TABLES as MODELS
from parkdesk.store.base import Store, StoreError
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)


def _to_row(obj) -> dict:
    row = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.name)
        if isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        row[column.name] = value
    return row


def _coerce(model, values: dict) -> dict:
    """Parse ISO strings for Date/DateTime columns; drop unknown keys."""
    columns = model.__table__.columns
    result = {}
    for key, value in values.items():
        if key not in columns:
            continue
        col_type = columns[key].type
        if isinstance(value, str) and isinstance(col_type, DateTime):
            value = datetime.fromisoformat(value)
        elif isinstance(value, str) and isinstance(col_type, Date):
            value = date.fromisoformat(value[:10])
        result[key] = value
    return result


class SqlStore(Store):

    def __init__(self, session_factory: sessionmaker):
        super().__init__()
        self._session_factory = session_factory

    def _model(self, table: str):
        self.check_table(table)
        return MODELS[table]

    # Session work is blocking; each public call runs it on the threadpool
    async def select(self, table: str, order_by: Optional[str] = None,
                     descending: bool = False, **filters) -> list[dict]:
        return await run_in_threadpool(self._select, table, order_by, descending, filters)

    async def insert(self, table: str, row: dict) -> dict:
        return await run_in_threadpool(self._insert, table, row)

    async def update(self, table: str, row_id: str, values: dict) -> None:
        await run_in_threadpool(self._update, table, row_id, values)

    async def delete(self, table: str, row_id: str) -> None:
        await run_in_threadpool(self._delete, table, row_id)

    def _select(self, table: str, order_by: Optional[str], descending: bool, filters: dict) -> list[dict]:
        model = self._model(table)
        db = self._session_factory()
        try:
            q = db.query(model)
            for column, value in filters.items():
                q = q.filter(getattr(model, column) == value)
            if order_by:
                col = getattr(model, order_by)
                q = q.order_by(col.desc() if descending else col.asc())
            return [_to_row(obj) for obj in q.all()]
        except (SQLAlchemyError, AttributeError) as e:
            raise StoreError(f"SELECT {table} failed: {e}", table) from e
        finally:
            db.close()

    def _insert(self, table: str, row: dict) -> dict:
        model = self._model(table)
        db = self._session_factory()
        try:
            obj = model(**_coerce(model, row))
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return _to_row(obj)
        except (SQLAlchemyError, ValueError) as e:
            db.rollback()
            raise StoreError(f"INSERT {table} failed: {e}", table) from e
        finally:
            db.close()

    def _update(self, table: str, row_id: str, values: dict) -> None:
        model = self._model(table)
        db = self._session_factory()
        try:
            obj = db.query(model).filter(model.id == row_id).first()
            if obj is None:
                raise StoreError(f"UPDATE {table}: no row with id {row_id}", table)
            for key, value in _coerce(model, values).items():
                setattr(obj, key, value)
            db.commit()
        except (SQLAlchemyError, ValueError) as e:
            db.rollback()
            raise StoreError(f"UPDATE {table} failed: {e}", table) from e
        finally:
            db.close()

    def _delete(self, table: str, row_id: str) -> None:
        model = self._model(table)
        db = self._session_factory()
        try:
            obj = db.query(model).filter(model.id == row_id).first()
            if obj is None:
                raise StoreError(f"DELETE {table}: no row with id {row_id}", table)
            if table == "users":
                vehicles, spaces, payments = MODELS["vehicles"], MODELS["parking_spaces"], MODELS["payments"]
                db.query(vehicles).filter(vehicles.user_id == row_id).delete()
                db.query(spaces).filter(spaces.user_id == row_id).update(
                    {"user_id": None, "is_occupied": False})
                db.query(payments).filter(payments.user_id == row_id).update({"user_id": None})
            db.delete(obj)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"DELETE {table} failed: {e}", table) from e
        finally:
            db.close()
