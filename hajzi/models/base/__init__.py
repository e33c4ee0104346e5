from hajzi.models.base.base_model import Base, BaseModel, TimestampModel, utcnow
from hajzi.models.base.enums import (
    ACTIVE_BOOKING_STATUSES,
    TERMINAL_BOOKING_STATUSES,
    BookingStatus,
    Currency,
    HotelStatus,
    RoomStatus,
    UserRole,
    UserStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "utcnow",
    "ACTIVE_BOOKING_STATUSES",
    "TERMINAL_BOOKING_STATUSES",
    "BookingStatus",
    "Currency",
    "HotelStatus",
    "RoomStatus",
    "UserRole",
    "UserStatus",
]
