# parkdesk/schemas/payment.py
from pydantic import BaseModel, Field
import datetime
from typing import Optional
from parkdesk.schemas.types import PaymentStatus


class PaymentCreate(BaseModel):
    user_id: str = Field(min_length=1)
    amount: float = Field(ge=0)
    date: Optional[datetime.date] = None   # defaults to today when persisted
    status: PaymentStatus = PaymentStatus.PENDING
    description: str = Field(min_length=1)


class Payment(BaseModel):
    id: Optional[str] = None
    user_id: str
    amount: float
    date: datetime.date
    status: PaymentStatus
    description: str = ""


class PaymentUpdate(BaseModel):
    user_id: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    date: Optional[datetime.date] = None
    status: Optional[PaymentStatus] = None
    description: Optional[str] = None


class PaymentSummary(BaseModel):
    total: float
    paid: float
    pending: float
    overdue: float
    counts: dict[str, int]


class LifecycleResult(BaseModel):
    """Outcome of a generation run or an overdue sweep."""
    processed: int
    error: Optional[str] = None
