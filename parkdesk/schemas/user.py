# parkdesk/schemas/user.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from parkdesk.schemas.types import SpaceType


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class VehicleCreate(BaseModel):
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    plate: str = Field(min_length=1)
    type: SpaceType = SpaceType.PASSENGER_CAR

    @field_validator("plate")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        return v.strip().upper()


class Vehicle(VehicleCreate):
    id: str


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: Optional[str] = None
    vehicles: list[VehicleCreate] = []

    @field_validator("name", "email")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return _strip_required(v)


class UserUpdate(BaseModel):
    """Partial user edit. When `vehicles` is given it replaces the whole list."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    vehicles: Optional[list[VehicleCreate]] = None

    @field_validator("name", "email")
    @classmethod
    def strip_sent(cls, v: Optional[str]) -> str:
        # Only runs for fields present in the body; an explicit null is refused
        if v is None:
            raise ValueError("must not be null")
        return _strip_required(v)


class User(BaseModel):
    id: str
    name: str
    email: str
    phone: str = ""
    vehicles: list[Vehicle] = []
