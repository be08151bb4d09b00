# parkdesk/routers/health.py
"""
System health check and the last-error slot.
Health returns status of backend + store reachability + snapshot sizes.
"""

from datetime import datetime
from fastapi import APIRouter, Depends
from parkdesk.config import settings
from parkdesk.dependencies import get_data_service
from parkdesk.services.data_service import DataService
from parkdesk.store.base import StoreError

router = APIRouter()


@router.get("/health", summary="System health check")
async def health_check(service: DataService = Depends(get_data_service)):
    """
    Returns:
    - Backend status
    - Store connectivity
    - Loaded collection sizes and the last recorded error
    """
    state = service.state
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "store": settings.STORE_BACKEND,
        "store_status": "unknown",
        "loaded_at": state.loaded_at.isoformat() if state.loaded_at else None,
        "collections": {
            "users": len(state.users),
            "parking_spaces": len(state.parking_spaces),
            "payments": len(state.payments),
        },
        "last_error": state.error,
    }

    try:
        await service.store.ping()
        result["store_status"] = "ok"
    except StoreError as e:
        result["store_status"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result


@router.get("/state/error", summary="Last recorded error message")
def get_last_error(service: DataService = Depends(get_data_service)):
    return {"error": service.state.error}


@router.delete("/state/error", summary="Clear the last recorded error")
def clear_last_error(service: DataService = Depends(get_data_service)):
    service.state.clear_error()
    return {"error": None}
