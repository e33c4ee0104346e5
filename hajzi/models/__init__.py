"""
ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from hajzi.models.base import Base
from hajzi.models.booking import Booking, BookingNight, BookingStatusHistory
from hajzi.models.hotel import Hotel
from hajzi.models.room import Room
from hajzi.models.user import User

__all__ = [
    "Base",
    "Booking",
    "BookingNight",
    "BookingStatusHistory",
    "Hotel",
    "Room",
    "User",
]
