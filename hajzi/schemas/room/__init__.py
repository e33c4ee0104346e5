from hajzi.schemas.room.room_base import RoomCreate, RoomResponse, RoomStatusUpdate, RoomUpdate

__all__ = ["RoomCreate", "RoomResponse", "RoomStatusUpdate", "RoomUpdate"]
