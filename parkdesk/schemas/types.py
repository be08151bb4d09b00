# parkdesk/schemas/types.py
"""Enumerations shared by spaces, vehicles and payments."""

from enum import Enum


class SpaceType(str, Enum):
    MOTORCYCLE = "motorcycle"
    PASSENGER_CAR = "passenger-car"
    VAN = "van"
    OTHER = "other"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
