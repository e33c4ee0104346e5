from hajzi.schemas.hotel.hotel_base import HotelCreate, HotelResponse, HotelStatusUpdate

__all__ = ["HotelCreate", "HotelResponse", "HotelStatusUpdate"]
