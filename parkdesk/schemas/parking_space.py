# parkdesk/schemas/parking_space.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from parkdesk.schemas.types import SpaceType


class ParkingSpace(BaseModel):
    id: str
    number: str
    type: SpaceType
    occupied: bool = False
    assigned_user_id: Optional[str] = None


class ParkingSpaceCreate(BaseModel):
    number: str = Field(min_length=1)
    type: SpaceType = SpaceType.PASSENGER_CAR
    assigned_user_id: Optional[str] = None

    @property
    def occupied(self) -> bool:
        return self.assigned_user_id is not None


class ParkingSpaceUpdate(BaseModel):
    """
    Partial space edit. Only fields that were actually sent are applied,
    so an explicit `assigned_user_id: null` releases the space.
    `number`, `type` and `occupied` may be omitted but never set to null.
    """
    number: Optional[str] = Field(default=None, min_length=1)
    type: Optional[SpaceType] = None
    occupied: Optional[bool] = None
    assigned_user_id: Optional[str] = None

    @model_validator(mode="after")
    def check_occupancy(self):
        sent = self.model_fields_set
        for name in ("number", "type", "occupied"):
            if name in sent and getattr(self, name) is None:
                raise ValueError(f"{name} must not be null")
        if "occupied" in sent and "assigned_user_id" in sent:
            if self.occupied != (self.assigned_user_id is not None):
                raise ValueError("occupied must match whether a user is assigned")
        return self


class SpaceAssignment(BaseModel):
    user_id: Optional[str] = None
