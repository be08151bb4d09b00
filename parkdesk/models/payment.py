# parkdesk/models/payment.py
"""
Payments table. `date` is the issuance date, not a due date.
Status: pending | paid | overdue.
"""

import uuid
from datetime import datetime, date
from sqlalchemy import Column, String, Date, DateTime, Numeric, Text, ForeignKey
from parkdesk.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, default=date.today, nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Payment {self.id} user={self.user_id} amount={self.amount} status={self.status}>"
