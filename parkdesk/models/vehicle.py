# parkdesk/models/vehicle.py
"""
Vehicles table. Owned by exactly one user; type uses the legacy
storage values (motor | auto-osobowe | dostawcze | inne).
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from parkdesk.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    plate = Column(String(20), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Vehicle {self.plate} user={self.user_id} type={self.type}>"
