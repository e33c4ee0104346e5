"""
Database enums mirroring schema enums.

Provides SQLAlchemy-compatible enum definitions shared by the models,
schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    SUPER_ADMIN = "super_admin"
    CITY_ADMIN = "city_admin"
    OWNER = "owner"
    CUSTOMER = "customer"


class UserStatus(str, enum.Enum):
    """User account status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING_APPROVAL = "pending_approval"


class HotelStatus(str, enum.Enum):
    """Hotel moderation status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RoomStatus(str, enum.Enum):
    """Room listing visibility."""
    VISIBLE = "visible"
    HIDDEN = "hidden"


class Currency(str, enum.Enum):
    """Currencies a room can be priced in."""
    YER = "YER"
    USD = "USD"
    SAR = "SAR"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Statuses that hold a room's nights
ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# Statuses a booking never leaves
TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})
