"""Room repository."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hajzi.models.base.enums import HotelStatus, RoomStatus
from hajzi.models.hotel.hotel import Hotel
from hajzi.models.room.room import Room
from hajzi.repositories.base.base_repository import BaseRepository


class RoomRepository(BaseRepository[Room]):

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def lock_for_update(self, room_id: str) -> Optional[Room]:
        """
        Load a room with a row lock held until the transaction ends.

        Backends without row locking (SQLite) ignore the FOR UPDATE clause.
        """
        return (
            self.db.query(Room)
            .filter(Room.id == room_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def find_by_hotel_and_name(self, hotel_id: str, name: str) -> Optional[Room]:
        """Case-insensitive lookup of a room name within a hotel."""
        return (
            self.db.query(Room)
            .filter(Room.hotel_id == hotel_id, func.lower(Room.name) == name.strip().lower())
            .first()
        )

    def find_rooms(
        self,
        hotel_id: Optional[str] = None,
        city_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        bookable_only: bool = False,
    ) -> List[Room]:
        """
        List rooms, optionally restricted to a hotel, a city or an owner.

        ``bookable_only`` keeps visible rooms of approved, visible hotels.
        """
        query = self.db.query(Room).join(Hotel, Room.hotel_id == Hotel.id)
        if hotel_id is not None:
            query = query.filter(Room.hotel_id == hotel_id)
        if city_id is not None:
            query = query.filter(Hotel.city_id == city_id)
        if owner_id is not None:
            query = query.filter(Hotel.owner_id == owner_id)
        if bookable_only:
            query = query.filter(
                Room.status == RoomStatus.VISIBLE,
                Hotel.status == HotelStatus.APPROVED,
                Hotel.is_visible.is_(True),
            )
        return query.order_by(Room.created_at.asc(), Room.id.asc()).all()
