# parkdesk/store/rest.py
"""
Store backed by the managed backend's REST interface (PostgREST dialect).

Endpoint: {SUPABASE_URL}/rest/v1/{table}
Auth:     `apikey` header + `Authorization: Bearer <key>` (public anon key)
Filters:  ?column=eq.value   Ordering: ?order=column.asc|desc
"""

from typing import Optional
import httpx
from parkdesk.store.base import Store, StoreError
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

REST_PATH = "/rest/v1"


def _filter_value(value) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class RestStore(Store):

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0,
                 client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/") + REST_PATH
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._client.headers.update(headers)

    async def _request(self, method: str, table: str, params: dict = None,
                       json=None, prefer: str = None) -> httpx.Response:
        self.check_table(table)
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self._client.request(
                method, f"{self.base_url}/{table}", params=params, json=json, headers=headers,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {table} failed: {e}", table) from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("message") or response.text
            except (ValueError, AttributeError):
                detail = response.text
            raise StoreError(f"{method} {table} returned HTTP {response.status_code}: {detail}", table)
        return response

    async def select(self, table: str, order_by: Optional[str] = None,
                     descending: bool = False, **filters) -> list[dict]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        for column, value in filters.items():
            params[column] = _filter_value(value)
        response = await self._request("GET", table, params=params)
        return response.json() or []

    async def insert(self, table: str, row: dict) -> dict:
        rows = await self.insert_many(table, [row])
        return rows[0] if rows else {}

    async def insert_many(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        response = await self._request("POST", table, json=rows, prefer="return=representation")
        return response.json() or []

    async def update(self, table: str, row_id: str, values: dict) -> None:
        await self._request("PATCH", table, params={"id": _filter_value(row_id)}, json=values)

    async def delete(self, table: str, row_id: str) -> None:
        await self._request("DELETE", table, params={"id": _filter_value(row_id)})

    async def close(self):
        await self._client.aclose()
