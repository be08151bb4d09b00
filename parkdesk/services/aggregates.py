# parkdesk/services/aggregates.py
"""Read-only folds over payment and space snapshots (totals, counts, dashboard)."""

from datetime import date
from typing import Optional
from parkdesk.schemas.types import PaymentStatus
from parkdesk.schemas.user import User
from parkdesk.schemas.parking_space import ParkingSpace
from parkdesk.schemas.payment import Payment, PaymentSummary


def _status_value(status) -> Optional[str]:
    if status is None:
        return None
    value = status.value if isinstance(status, PaymentStatus) else str(status)
    return None if value == "all" else value


def filter_payments(payments: list[Payment], date_from: Optional[date] = None,
                    date_to: Optional[date] = None, status=None,
                    search: Optional[str] = None, users: Optional[list[User]] = None) -> list[Payment]:
    """Inclusive date range, optional status ('all' = any), and a case-insensitive
    search over the user's name and the description."""
    status = _status_value(status)
    names = {u.id: u.name.lower() for u in users or []}
    term = search.lower() if search else None

    result = []
    for p in payments:
        if date_from and p.date < date_from:
            continue
        if date_to and p.date > date_to:
            continue
        if status and p.status.value != status:
            continue
        if term and term not in names.get(p.user_id, "") and term not in p.description.lower():
            continue
        result.append(p)
    return result


def total_amount(payments: list[Payment], date_from: Optional[date] = None,
                 date_to: Optional[date] = None, status=None) -> float:
    filtered = filter_payments(payments, date_from, date_to, status)
    return sum(p.amount for p in filtered)


def count_by_status(payments: list[Payment]) -> dict[str, int]:
    counts = {s.value: 0 for s in PaymentStatus}
    for p in payments:
        counts[p.status.value] += 1
    return counts


def payment_summary(payments: list[Payment], date_from: Optional[date] = None,
                    date_to: Optional[date] = None) -> PaymentSummary:
    in_range = filter_payments(payments, date_from, date_to)
    return PaymentSummary(
        total=total_amount(in_range),
        paid=total_amount(in_range, status=PaymentStatus.PAID),
        pending=total_amount(in_range, status=PaymentStatus.PENDING),
        overdue=total_amount(in_range, status=PaymentStatus.OVERDUE),
        counts=count_by_status(in_range),
    )


def dashboard_stats(spaces: list[ParkingSpace], users: list[User], payments: list[Payment]) -> dict:
    occupied = sum(1 for s in spaces if s.occupied)
    counts = count_by_status(payments)
    return {
        "occupied_spaces": occupied,
        "total_spaces": len(spaces),
        "free_spaces": len(spaces) - occupied,
        "occupancy_percent": round(occupied / len(spaces) * 100) if spaces else 0,
        "active_users": len(users),
        "revenue": total_amount(payments, status=PaymentStatus.PAID),
        "outstanding_payments": counts["pending"] + counts["overdue"],
        "overdue_payments": counts["overdue"],
    }
