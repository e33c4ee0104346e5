from hajzi.repositories.hotel.hotel_repository import HotelRepository

__all__ = ["HotelRepository"]
