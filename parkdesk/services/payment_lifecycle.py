# parkdesk/services/payment_lifecycle.py
"""
Payment lifecycle rules: pure functions over in-memory snapshots.

Monthly generation: every occupied space (occupied + assigned user) gets
one pending payment per calendar month, priced by space type.
Overdue detection: a pending payment becomes overdue once one calendar
month has passed since its issuance date.

Nothing here talks to the store; DataService persists the results.
"""

import calendar
from datetime import date
from typing import Optional
from parkdesk.schemas.types import PaymentStatus, SpaceType
from parkdesk.schemas.user import User
from parkdesk.schemas.parking_space import ParkingSpace
from parkdesk.schemas.payment import Payment, PaymentCreate
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)

MATCH_PERIOD = "period"   # billed = same user + same year-month
MATCH_LEGACY = "legacy"   # ...and the description mentions the month

MONTH_NAMES = {
    "en": ["January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"],
    "pl": ["styczeń", "luty", "marzec", "kwiecień", "maj", "czerwiec", "lipiec",
           "sierpień", "wrzesień", "październik", "listopad", "grudzień"],
}

# "<prefix> <month> <year> - <space label> <number>"
DESCRIPTION_PARTS = {
    "en": ("Payment for", "Space"),
    "pl": ("Opłata za", "Miejsce"),
}


def _locale(locale: str) -> str:
    return locale if locale in MONTH_NAMES else "en"


def period_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_name(month: int, locale: str = "en") -> str:
    return MONTH_NAMES[_locale(locale)][month - 1]


def month_token(day: date, locale: str = "en") -> str:
    """The fragment a legacy match looks for in a description, e.g. 'for March'."""
    prefix, _ = DESCRIPTION_PARTS[_locale(locale)]
    return f"{prefix.split()[-1]} {month_name(day.month, locale)}"


def billing_description(day: date, space_number: str, locale: str = "en") -> str:
    prefix, label = DESCRIPTION_PARTS[_locale(locale)]
    return f"{prefix} {month_name(day.month, locale)} {day.year} - {label} {space_number}"


def is_billed(payments: list[Payment], user_id: str, day: date,
              rule: str = MATCH_PERIOD, locale: str = "en") -> bool:
    key = period_key(day)
    token = month_token(day, locale)
    for p in payments:
        if p.user_id != user_id or period_key(p.date) != key:
            continue
        if rule == MATCH_LEGACY and token not in p.description:
            continue
        return True
    return False


def rate_for(space_type, rates: dict) -> float:
    """Monthly rate for a space type; unknown types pay the 'other' rate."""
    key = space_type.value if isinstance(space_type, SpaceType) else str(space_type)
    if key in rates:
        return rates[key]
    return rates[SpaceType.OTHER.value]


def plan_monthly_payments(spaces: list[ParkingSpace], users: list[User],
                          existing: list[Payment], today: date, rates: dict,
                          rule: str = MATCH_PERIOD, locale: str = "en") -> list[PaymentCreate]:
    """
    Payments to create so every occupied space is billed for today's month.
    Only the `existing` snapshot is consulted, so two spaces held by the same
    user are both billed in one run.
    """
    known_users = {u.id for u in users}
    planned = []
    for space in spaces:
        if not (space.occupied and space.assigned_user_id):
            continue
        if space.assigned_user_id not in known_users:
            logger.warning(f"[BILLING] Space {space.number} assigned to unknown user "
                           f"{space.assigned_user_id}, skipped")
            continue
        if is_billed(existing, space.assigned_user_id, today, rule, locale):
            continue
        planned.append(PaymentCreate(
            user_id=space.assigned_user_id,
            amount=rate_for(space.type, rates),
            date=today,
            status=PaymentStatus.PENDING,
            description=billing_description(today, space.number, locale),
        ))
    return planned


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def overdue_since(payment: Payment) -> date:
    return add_months(payment.date, 1)


def is_overdue(payment: Payment, today: date) -> bool:
    if payment.status != PaymentStatus.PENDING:
        return False
    return today >= overdue_since(payment)


def find_overdue(payments: list[Payment], today: Optional[date] = None) -> list[Payment]:
    today = today or date.today()
    return [p for p in payments if is_overdue(p, today)]
