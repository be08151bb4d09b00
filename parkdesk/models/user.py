# parkdesk/models/user.py
"""
Users table. One row per person holding (or waiting for) a parking space.
Vehicles reference it with ON DELETE CASCADE.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from parkdesk.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=False)
    phone = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.id} name={self.name}>"
