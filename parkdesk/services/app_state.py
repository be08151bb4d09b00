# parkdesk/services/app_state.py
"""
In-memory application state: the last fetched snapshot of every
collection plus the last error message. Created once at startup and kept
on app.state; fetches replace a whole collection at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from parkdesk.schemas.user import User
from parkdesk.schemas.parking_space import ParkingSpace
from parkdesk.schemas.payment import Payment


@dataclass
class AppState:
    users: list[User] = field(default_factory=list)
    parking_spaces: list[ParkingSpace] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    loaded_at: Optional[datetime] = None

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        return next((u for u in self.users if u.id == user_id), None)

    def find_space(self, space_id: str) -> Optional[ParkingSpace]:
        return next((s for s in self.parking_spaces if s.id == space_id), None)

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        return next((p for p in self.payments if p.id == payment_id), None)

    def clear_error(self):
        self.error = None
