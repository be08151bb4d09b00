# parkdesk/services/mapping.py
"""
Row <-> entity translation. The only place that knows the storage
naming (is_occupied, user_id on spaces, legacy type values).
"""

from datetime import date
from typing import Optional
from parkdesk.schemas.types import SpaceType
from parkdesk.schemas.user import User, UserCreate, UserUpdate, Vehicle, VehicleCreate
from parkdesk.schemas.parking_space import ParkingSpace, ParkingSpaceCreate
from parkdesk.schemas.payment import Payment, PaymentCreate, PaymentUpdate
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

# Storage values kept from the legacy schema
SPACE_TYPE_TO_ROW = {
    SpaceType.MOTORCYCLE: "motor",
    SpaceType.PASSENGER_CAR: "auto-osobowe",
    SpaceType.VAN: "dostawcze",
    SpaceType.OTHER: "inne",
}
ROW_TO_SPACE_TYPE = {v: k for k, v in SPACE_TYPE_TO_ROW.items()}


def type_from_row(value: Optional[str]) -> SpaceType:
    if value in ROW_TO_SPACE_TYPE:
        return ROW_TO_SPACE_TYPE[value]
    try:
        return SpaceType(value)
    except ValueError:
        logger.warning(f"Unknown space/vehicle type '{value}', treating as other")
        return SpaceType.OTHER


# ── Users & vehicles ─────────────────────────────────────────────────────────
def vehicle_from_row(row: dict) -> Vehicle:
    return Vehicle(
        id=row["id"],
        brand=row["brand"],
        model=row["model"],
        plate=row["plate"],
        type=type_from_row(row.get("type")),
    )


def vehicle_to_row(vehicle: VehicleCreate, user_id: str) -> dict:
    return {
        "user_id": user_id,
        "brand": vehicle.brand,
        "model": vehicle.model,
        "plate": vehicle.plate,
        "type": SPACE_TYPE_TO_ROW[vehicle.type],
    }


def users_from_rows(user_rows: list[dict], vehicle_rows: list[dict]) -> list[User]:
    """Join users with their vehicles, keeping the vehicle rows' order."""
    by_user: dict[str, list[Vehicle]] = {}
    for row in vehicle_rows:
        by_user.setdefault(row.get("user_id"), []).append(vehicle_from_row(row))
    return [
        User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row.get("phone") or "",
            vehicles=by_user.get(row["id"], []),
        )
        for row in user_rows
    ]


def user_to_row(user) -> dict:
    """Works for UserCreate (all fields) and UserUpdate (only fields sent)."""
    if isinstance(user, UserCreate):
        return {"name": user.name, "email": user.email, "phone": user.phone or None}
    data = user.model_dump(exclude_unset=True, exclude={"vehicles"})
    if "phone" in data:
        data["phone"] = data["phone"] or None
    return data


# ── Parking spaces ───────────────────────────────────────────────────────────
def space_from_row(row: dict) -> ParkingSpace:
    return ParkingSpace(
        id=row["id"],
        number=row["number"],
        type=type_from_row(row.get("type")),
        occupied=bool(row.get("is_occupied")),
        assigned_user_id=row.get("user_id"),
    )


def space_to_row(space: ParkingSpaceCreate) -> dict:
    return {
        "number": space.number,
        "type": SPACE_TYPE_TO_ROW[space.type],
        "is_occupied": space.occupied,
        "user_id": space.assigned_user_id,
    }


def space_update_to_row(updates: dict) -> dict:
    row = {}
    if "number" in updates:
        row["number"] = updates["number"]
    if "type" in updates:
        row["type"] = SPACE_TYPE_TO_ROW[SpaceType(updates["type"])]
    if "occupied" in updates:
        row["is_occupied"] = updates["occupied"]
    if "assigned_user_id" in updates:
        row["user_id"] = updates["assigned_user_id"]
    return row


# ── Payments ─────────────────────────────────────────────────────────────────
def payment_from_row(row: dict) -> Payment:
    return Payment(
        id=row.get("id"),
        user_id=row.get("user_id") or "",
        amount=row["amount"],
        date=row["date"],
        status=row["status"],
        description=row.get("description") or "",
    )


def payment_to_row(payment: PaymentCreate, today: date) -> dict:
    return {
        "user_id": payment.user_id,
        "amount": payment.amount,
        "date": (payment.date or today).isoformat(),
        "status": payment.status.value,
        "description": payment.description.strip(),
    }


def payment_update_to_row(updates: PaymentUpdate) -> dict:
    row = {}
    for key, value in updates.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if key == "date":
            value = value.isoformat()
        elif key == "status":
            value = value.value
        row[key] = value
    return row
