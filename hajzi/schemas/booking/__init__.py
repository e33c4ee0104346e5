from hajzi.schemas.booking.booking_base import (
    BookingCreate,
    BookingFilterParams,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)

__all__ = [
    "BookingCreate",
    "BookingFilterParams",
    "BookingResponse",
    "BookingStatusUpdate",
    "BookingUpdate",
]
