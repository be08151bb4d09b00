# parkdesk/services/data_service.py
"""
Data access layer: the only caller of the store.

- Translates rows to entities (via mapping) and keeps AppState current.
- Every mutation is followed by a full re-fetch of the affected
  collection; nothing is patched locally.
- Store failures are caught here, logged, and written to state.error.
  They are never raised to the caller; mutations return a falsy value.
- After each payments fetch the payments-changed hook runs the overdue
  sweep when the list content differs from the previous snapshot.
"""

import asyncio
from datetime import date, datetime
from typing import Optional
from parkdesk.config import settings
from parkdesk.schemas.parking_space import ParkingSpace, ParkingSpaceCreate
from parkdesk.schemas.payment import Payment, PaymentCreate, PaymentUpdate
from parkdesk.schemas.types import PaymentStatus
from parkdesk.schemas.user import User, UserCreate, UserUpdate
from parkdesk.services import mapping
from parkdesk.services.app_state import AppState
from parkdesk.services.payment_lifecycle import find_overdue, plan_monthly_payments
from parkdesk.store.base import Store, StoreError
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)


class InvalidSpaceUpdate(ValueError):
    """A space update would leave `occupied` and the assigned user disagreeing."""


def normalize_space_update(updates: dict) -> dict:
    """
    Make occupancy and assignment agree:
      assigned_user_id given  -> occupied follows it
      occupied=False alone    -> assignment cleared
      occupied=True alone     -> rejected, there is nobody to assign
    """
    updates = dict(updates)
    if "assigned_user_id" in updates:
        user_id = updates["assigned_user_id"] or None
        occupied = user_id is not None
        if "occupied" in updates and updates["occupied"] != occupied:
            raise InvalidSpaceUpdate("occupied must match whether a user is assigned")
        updates["assigned_user_id"] = user_id
        updates["occupied"] = occupied
    elif "occupied" in updates:
        if updates["occupied"]:
            raise InvalidSpaceUpdate("cannot mark a space occupied without assigning a user")
        updates["assigned_user_id"] = None
    return updates


class DataService:

    def __init__(self, store: Store, state: Optional[AppState] = None,
                 rates: Optional[dict] = None, match_rule: Optional[str] = None,
                 locale: Optional[str] = None, auto_mark_overdue: bool = True):
        self.store = store
        self.state = state or AppState()
        self.rates = rates or settings.MONTHLY_RATES
        self.match_rule = match_rule or settings.BILLING_MATCH_RULE
        self.locale = locale or settings.BILLING_LOCALE
        self.auto_mark_overdue = auto_mark_overdue
        self._sweeping = False

    def _fail(self, message: str, exc: Exception):
        logger.error(f"{message}: {exc}")
        self.state.error = message

    # ── Fetches ──────────────────────────────────────────────────────────────
    async def fetch_users(self) -> bool:
        try:
            user_rows = await self.store.select("users")
            vehicle_rows = await self.store.select("vehicles")
        except StoreError as e:
            self._fail("Error while fetching users", e)
            return False
        self.state.users = mapping.users_from_rows(user_rows, vehicle_rows)
        return True

    async def fetch_parking_spaces(self) -> bool:
        try:
            rows = await self.store.select("parking_spaces", order_by="number")
        except StoreError as e:
            self._fail("Error while fetching parking spaces", e)
            return False
        self.state.parking_spaces = [mapping.space_from_row(r) for r in rows]
        return True

    async def fetch_payments(self) -> bool:
        try:
            rows = await self.store.select("payments", order_by="date", descending=True)
        except StoreError as e:
            self._fail("Error while fetching payments", e)
            return False
        previous = self.state.payments
        self.state.payments = [mapping.payment_from_row(r) for r in rows]
        await self.on_payments_changed(previous)
        return True

    async def load_all(self):
        self.state.loading = True
        try:
            await asyncio.gather(self.fetch_users(), self.fetch_parking_spaces(), self.fetch_payments())
        finally:
            self.state.loading = False
        self.state.loaded_at = datetime.utcnow()
        logger.info(f"Loaded {len(self.state.users)} users, {len(self.state.parking_spaces)} spaces, "
                    f"{len(self.state.payments)} payments")

    def subscribe_to_changes(self):
        """Re-fetch a collection whenever the backend reports a change to it."""
        self.store.subscribe("users", self.fetch_users)
        self.store.subscribe("vehicles", self.fetch_users)
        self.store.subscribe("parking_spaces", self.fetch_parking_spaces)
        self.store.subscribe("payments", self.fetch_payments)

    # ── Users ────────────────────────────────────────────────────────────────
    async def add_user(self, user: UserCreate) -> Optional[User]:
        try:
            row = await self.store.insert("users", mapping.user_to_row(user))
            if user.vehicles:
                await self.store.insert_many(
                    "vehicles", [mapping.vehicle_to_row(v, row["id"]) for v in user.vehicles])
        except StoreError as e:
            self._fail("Error while adding user", e)
            return None
        await self.fetch_users()
        return self.state.find_user(row["id"])

    async def update_user(self, user_id: str, updates: UserUpdate) -> bool:
        """
        When `vehicles` is sent the new rows are inserted before the old ones
        are deleted, so a failed insert leaves the previous list in place.
        Users are re-fetched whether or not every write succeeded.
        """
        current = self.state.find_user(user_id)
        try:
            values = mapping.user_to_row(updates)
            if values:
                await self.store.update("users", user_id, values)
            if updates.vehicles is not None:
                await self.store.insert_many(
                    "vehicles", [mapping.vehicle_to_row(v, user_id) for v in updates.vehicles])
                for vehicle in current.vehicles if current else []:
                    await self.store.delete("vehicles", vehicle.id)
        except StoreError as e:
            self._fail("Error while updating user", e)
            return False
        finally:
            await self.fetch_users()
        return True

    async def delete_user(self, user_id: str) -> bool:
        """Release the user's spaces, drop their vehicles, then the user."""
        user = self.state.find_user(user_id)
        try:
            for space in self.state.parking_spaces:
                if space.assigned_user_id == user_id:
                    await self.store.update("parking_spaces", space.id,
                                            {"is_occupied": False, "user_id": None})
            for vehicle in user.vehicles if user else []:
                await self.store.delete("vehicles", vehicle.id)
            await self.store.delete("users", user_id)
        except StoreError as e:
            self._fail("Error while deleting user", e)
            return False
        finally:
            await self.fetch_users()
            await self.fetch_parking_spaces()
        return True

    # ── Parking spaces ───────────────────────────────────────────────────────
    async def add_parking_space(self, space: ParkingSpaceCreate) -> Optional[ParkingSpace]:
        try:
            row = await self.store.insert("parking_spaces", mapping.space_to_row(space))
        except StoreError as e:
            self._fail("Error while adding parking space", e)
            return None
        await self.fetch_parking_spaces()
        return self.state.find_space(row.get("id"))

    async def update_parking_space(self, space_id: str, updates: dict) -> bool:
        """Raises InvalidSpaceUpdate before touching the store if occupancy would disagree."""
        values = mapping.space_update_to_row(normalize_space_update(updates))
        if not values:
            return True
        logger.debug(f"Updating parking space {space_id}: {values}")
        try:
            await self.store.update("parking_spaces", space_id, values)
        except StoreError as e:
            self._fail("Error while updating parking space", e)
            return False
        await self.fetch_parking_spaces()
        return True

    async def assign_parking_space(self, space_id: str, user_id: Optional[str]) -> bool:
        return await self.update_parking_space(space_id, {"assigned_user_id": user_id})

    async def delete_parking_space(self, space_id: str) -> bool:
        try:
            await self.store.delete("parking_spaces", space_id)
        except StoreError as e:
            self._fail("Error while deleting parking space", e)
            return False
        await self.fetch_parking_spaces()
        return True

    # ── Payments ─────────────────────────────────────────────────────────────
    async def add_payment(self, payment: PaymentCreate, today: Optional[date] = None) -> bool:
        try:
            await self.store.insert("payments", mapping.payment_to_row(payment, today or date.today()))
        except StoreError as e:
            self._fail("Error while adding payment", e)
            return False
        await self.fetch_payments()
        return True

    async def update_payment(self, payment_id: str, updates: PaymentUpdate) -> bool:
        values = mapping.payment_update_to_row(updates)
        if not values:
            return True
        try:
            await self.store.update("payments", payment_id, values)
        except StoreError as e:
            self._fail("Error while updating payment", e)
            return False
        await self.fetch_payments()
        return True

    # ── Payment lifecycle ────────────────────────────────────────────────────
    async def generate_monthly_payments(self, today: Optional[date] = None) -> int:
        """
        Bill every occupied space that has no payment for today's month.
        Inserts run one after another; a failed insert is recorded and the
        rest are still attempted. Returns how many payments were created.
        """
        today = today or date.today()
        planned = plan_monthly_payments(
            self.state.parking_spaces, self.state.users, self.state.payments,
            today, self.rates, self.match_rule, self.locale,
        )
        created = 0
        for payment in planned:
            try:
                await self.store.insert("payments", mapping.payment_to_row(payment, today))
                created += 1
            except StoreError as e:
                self._fail("Error while adding payment", e)
        if created:
            await self.fetch_payments()
        logger.info(f"[BILLING] {today:%Y-%m}: planned {len(planned)}, created {created}")
        return created

    async def mark_overdue_payments(self, today: Optional[date] = None) -> int:
        """Flip pending payments older than one calendar month to overdue."""
        overdue = find_overdue(self.state.payments, today or date.today())
        if not overdue:
            return 0
        self._sweeping = True
        try:
            updated = 0
            for payment in overdue:
                try:
                    await self.store.update("payments", payment.id,
                                            {"status": PaymentStatus.OVERDUE.value})
                    updated += 1
                except StoreError as e:
                    self._fail("Error while updating payment", e)
            await self.fetch_payments()
        finally:
            self._sweeping = False
        logger.info(f"[OVERDUE] Marked {updated}/{len(overdue)} payments overdue")
        return updated

    async def on_payments_changed(self, previous: list[Payment]):
        """Post-fetch hook: run the overdue sweep when the payment list changed."""
        if not self.auto_mark_overdue or self._sweeping:
            return
        if previous == self.state.payments:
            return
        await self.mark_overdue_payments()
