from hajzi.models.booking.booking import Booking, BookingNight, BookingStatusHistory

__all__ = ["Booking", "BookingNight", "BookingStatusHistory"]
