from hajzi.repositories.booking import BookingRepository
from hajzi.repositories.hotel import HotelRepository
from hajzi.repositories.room import RoomRepository
from hajzi.repositories.user import UserRepository

__all__ = [
    "BookingRepository",
    "HotelRepository",
    "RoomRepository",
    "UserRepository",
]
