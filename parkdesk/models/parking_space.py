# parkdesk/models/parking_space.py
"""
Parking spaces table. `is_occupied` and `user_id` are always written
together by the data access layer; the user reference is nulled if the
user row disappears.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from parkdesk.database import Base


class ParkingSpace(Base):
    __tablename__ = "parking_spaces"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    number = Column(String(50), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    is_occupied = Column(Boolean, default=False, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ParkingSpace {self.number} occupied={self.is_occupied} user={self.user_id}>"
