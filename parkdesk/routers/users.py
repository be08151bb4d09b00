# parkdesk/routers/users.py
"""Users and their vehicles - list, add, edit, delete (delete releases spaces)."""

from fastapi import APIRouter, Depends, HTTPException, status
from parkdesk.dependencies import get_data_service, store_failure
from parkdesk.schemas.user import User, UserCreate, UserUpdate
from parkdesk.services.data_service import DataService

router = APIRouter()


@router.get("/users", response_model=list[User], summary="List users with vehicles")
def list_users(search: str = None, service: DataService = Depends(get_data_service)):
    users = service.state.users
    if search:
        term = search.lower()
        users = [u for u in users if term in u.name.lower() or term in u.email.lower()]
    return users


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED,
             summary="Add a user together with their vehicles")
async def add_user(body: UserCreate, service: DataService = Depends(get_data_service)):
    user = await service.add_user(body)
    if user is None:
        raise store_failure(service)
    return user


@router.put("/users/{user_id}", response_model=User, summary="Edit a user; vehicles are replaced when sent")
async def update_user(user_id: str, body: UserUpdate, service: DataService = Depends(get_data_service)):
    if not service.state.find_user(user_id):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    if not await service.update_user(user_id, body):
        raise store_failure(service)
    return service.state.find_user(user_id)


@router.delete("/users/{user_id}", summary="Delete a user, their vehicles and space assignment")
async def delete_user(user_id: str, service: DataService = Depends(get_data_service)):
    if not service.state.find_user(user_id):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    if not await service.delete_user(user_id):
        raise store_failure(service)
    return {"status": "deleted", "user_id": user_id}
