from hajzi.services.hotel.hotel_service import HotelService

__all__ = ["HotelService"]
