# Parkdesk - Database Models (SQL store backend)
# Import all models here for SQLAlchemy discovery

from parkdesk.models.user import User                    # noqa
from parkdesk.models.vehicle import Vehicle              # noqa
from parkdesk.models.parking_space import ParkingSpace   # noqa
from parkdesk.models.payment import Payment              # noqa

TABLES = {
    "users": User,
    "vehicles": Vehicle,
    "parking_spaces": ParkingSpace,
    "payments": Payment,
}
