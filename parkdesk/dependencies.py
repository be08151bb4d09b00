# parkdesk/dependencies.py
"""FastAPI dependencies - the DataService and AppState built at startup."""

from fastapi import HTTPException, Request, status
from parkdesk.services.app_state import AppState
from parkdesk.services.data_service import DataService


def get_data_service(request: Request) -> DataService:
    service = getattr(request.app.state, "data_service", None)
    if service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail="Backend still starting")
    return service


def get_app_state(request: Request) -> AppState:
    return get_data_service(request).state


def store_failure(service: DataService) -> HTTPException:
    """HTTP error for a mutation whose store call failed."""
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY,
                         detail=service.state.error or "Persistence backend error")
