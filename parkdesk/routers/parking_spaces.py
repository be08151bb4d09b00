# parkdesk/routers/parking_spaces.py
"""Parking spaces - CRUD plus assignment. Occupancy always follows the assigned user."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from parkdesk.dependencies import get_data_service, store_failure
from parkdesk.schemas.parking_space import (
    ParkingSpace, ParkingSpaceCreate, ParkingSpaceUpdate, SpaceAssignment,
)
from parkdesk.services.data_service import DataService, InvalidSpaceUpdate

router = APIRouter()


def _get_space_or_404(service: DataService, space_id: str) -> ParkingSpace:
    space = service.state.find_space(space_id)
    if not space:
        raise HTTPException(status_code=404, detail=f"Parking space '{space_id}' not found")
    return space


def _check_user(service: DataService, user_id: Optional[str]):
    if user_id and not service.state.find_user(user_id):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")


async def _apply(service: DataService, space_id: str, updates: dict) -> ParkingSpace:
    try:
        ok = await service.update_parking_space(space_id, updates)
    except InvalidSpaceUpdate as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if not ok:
        raise store_failure(service)
    return _get_space_or_404(service, space_id)


@router.get("/parking-spaces", response_model=list[ParkingSpace], summary="List parking spaces")
def list_spaces(occupied: bool = None, service: DataService = Depends(get_data_service)):
    spaces = service.state.parking_spaces
    if occupied is not None:
        spaces = [s for s in spaces if s.occupied == occupied]
    return spaces


@router.post("/parking-spaces", response_model=ParkingSpace, status_code=status.HTTP_201_CREATED,
             summary="Add a parking space")
async def add_space(body: ParkingSpaceCreate, service: DataService = Depends(get_data_service)):
    _check_user(service, body.assigned_user_id)
    space = await service.add_parking_space(body)
    if space is None:
        raise store_failure(service)
    return space


@router.patch("/parking-spaces/{space_id}", response_model=ParkingSpace, summary="Edit a parking space")
async def update_space(space_id: str, body: ParkingSpaceUpdate,
                       service: DataService = Depends(get_data_service)):
    _get_space_or_404(service, space_id)
    updates = body.model_dump(exclude_unset=True)
    _check_user(service, updates.get("assigned_user_id"))
    return await _apply(service, space_id, updates)


@router.put("/parking-spaces/{space_id}/assignment", response_model=ParkingSpace,
            summary="Assign a user to a space, or release it with user_id=null")
async def assign_space(space_id: str, body: SpaceAssignment,
                       service: DataService = Depends(get_data_service)):
    _get_space_or_404(service, space_id)
    _check_user(service, body.user_id)
    return await _apply(service, space_id, {"assigned_user_id": body.user_id})


@router.delete("/parking-spaces/{space_id}", summary="Delete a parking space")
async def delete_space(space_id: str, service: DataService = Depends(get_data_service)):
    _get_space_or_404(service, space_id)
    if not await service.delete_parking_space(space_id):
        raise store_failure(service)
    return {"status": "deleted", "space_id": space_id}
