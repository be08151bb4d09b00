# parkdesk/routers/changes.py
"""
Change notification webhook.
POST /changes - the managed backend's database webhook calls this on every
insert/update/delete. The affected collection is re-fetched by whatever
handlers DataService subscribed for that table.
"""

from fastapi import APIRouter, Depends, Request
from parkdesk.config import settings
from parkdesk.dependencies import get_data_service
from parkdesk.services.data_service import DataService
from parkdesk.store.base import TABLES
from parkdesk.utils.json_parser import get_nested, safe_parse_json
from parkdesk.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/changes", summary="Database webhook - row changed")
async def receive_change(request: Request, service: DataService = Depends(get_data_service)):
    """
    Payload: {"type": "INSERT|UPDATE|DELETE", "table": ..., "record": ..., "old_record": ...}
    Always returns HTTP 200 - the backend retries on non-200 and we never want that.
    """
    if settings.WEBHOOK_SECRET and request.headers.get("X-Webhook-Secret") != settings.WEBHOOK_SECRET:
        logger.warning(f"[CHANGES] Rejected webhook from {request.client.host if request.client else '?'}")
        return {"status": "ignored", "reason": "bad secret"}

    payload = safe_parse_json(await request.body())
    if payload is None:
        return {"status": "ignored", "reason": "invalid body"}

    table = get_nested(payload, "table")
    change_type = get_nested(payload, "type", default="?")
    if table not in TABLES:
        return {"status": "ignored", "reason": f"unknown table {table}"}

    row_id = get_nested(payload, "record", "id") or get_nested(payload, "old_record", "id")
    logger.info(f"[CHANGES] {change_type} {table} id={row_id}")
    handlers = await service.store.notify(table)
    return {"status": "ok", "table": table, "handlers": handlers}
