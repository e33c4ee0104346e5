"""
Room service: room creation, edits, visibility and role-scoped listings.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from hajzi.core.exceptions import AuthorizationError
from hajzi.models.base.enums import RoomStatus
from hajzi.models.room.room import Room
from hajzi.repositories.hotel.hotel_repository import HotelRepository
from hajzi.repositories.room.room_repository import RoomRepository
from hajzi.schemas.room.room_base import RoomCreate, RoomUpdate
from hajzi.services.auth.access_control import AccessControl, Action
from hajzi.services.auth.principal import CityAdmin, Customer, Owner, Principal
from hajzi.services.base.base_service import BaseService
from hajzi.services.base.service_result import ServiceResult

# Columns a PATCH may not set to null
_REQUIRED_ROOM_FIELDS = ("name", "base_price", "currency", "capacity")


class RoomService(BaseService[Room, RoomRepository]):

    def __init__(self, db_session: Session):
        super().__init__(RoomRepository(db_session), db_session)
        self.hotel_repository = HotelRepository(db_session)
        self.access = AccessControl(self.hotel_repository.find_ids_by_city)

    def create_room(self, principal: Principal, hotel_id: str, data: RoomCreate) -> ServiceResult[Room]:
        """Add a room to a hotel the principal manages."""
        try:
            hotel = self.hotel_repository.find_by_id(hotel_id)
            if hotel is None:
                return ServiceResult.not_found("Hotel", hotel_id)
            self.access.ensure(principal, Action.MANAGE_ROOM, hotel)

            if self.repository.find_by_hotel_and_name(hotel_id, data.name):
                return ServiceResult.conflict(
                    "A room with this name already exists in this hotel",
                    details={"hotel_id": hotel_id, "name": data.name},
                )

            with self.transactions.start():
                room = Room(**data.model_dump(), hotel_id=hotel_id)
                self.repository.create(room)

            self._logger.info("Room created", extra={"room_id": room.id, "hotel_id": hotel_id})
            return ServiceResult.success(room, message="Room created successfully")
        except Exception as e:
            return self._handle_exception(e, "create room", hotel_id)

    def get_room(self, principal: Principal, room_id: str) -> ServiceResult[Room]:
        """Visible rooms are open to everyone; hidden ones only to whoever manages them."""
        try:
            room = self.repository.find_by_id(room_id)
            if room is None:
                return ServiceResult.not_found("Room", room_id)
            if not room.is_visible:
                self.access.ensure(principal, Action.MANAGE_ROOM, room)
            return ServiceResult.success(room, message="Room retrieved successfully")
        except Exception as e:
            return self._handle_exception(e, "get room", room_id)

    def update_room(self, principal: Principal, room_id: str, data: RoomUpdate) -> ServiceResult[Room]:
        """
        Edit a room's details. Existing bookings keep the price they were
        quoted; only new bookings see a changed ``base_price``.
        """
        try:
            room = self.repository.find_by_id(room_id)
            if room is None:
                return ServiceResult.not_found("Room", room_id)
            self.access.ensure(principal, Action.MANAGE_ROOM, room)

            changes = data.model_dump(exclude_unset=True)
            for name in _REQUIRED_ROOM_FIELDS:
                if name in changes and changes[name] is None:
                    return ServiceResult.validation_failure(f"{name} cannot be null", field=name)

            new_name = changes.get("name")
            if new_name is not None and new_name.lower() != room.name.lower():
                clash = self.repository.find_by_hotel_and_name(room.hotel_id, new_name)
                if clash is not None and clash.id != room.id:
                    return ServiceResult.conflict(
                        "A room with this name already exists in this hotel",
                        details={"hotel_id": room.hotel_id, "name": new_name},
                    )

            if changes:
                with self.transactions.start():
                    self.repository.update(room, changes)
                self._logger.info(
                    "Room updated",
                    extra={"room_id": room.id, "fields": sorted(changes), "changed_by": principal.id},
                )
            return ServiceResult.success(room, message="Room updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update room", room_id)

    def set_room_status(self, principal: Principal, room_id: str, status: RoomStatus) -> ServiceResult[Room]:
        """Show or hide a room. Hidden rooms take no new bookings."""
        try:
            room = self.repository.find_by_id(room_id)
            if room is None:
                return ServiceResult.not_found("Room", room_id)
            self.access.ensure(principal, Action.MANAGE_ROOM, room)

            if room.status != status:
                with self.transactions.start():
                    self.repository.update(room, {"status": status})
                self._logger.info(
                    "Room status changed",
                    extra={"room_id": room.id, "new_status": status.value, "changed_by": principal.id},
                )
            return ServiceResult.success(room, message=f"Room {status.value} successfully")
        except Exception as e:
            return self._handle_exception(e, "change room status", room_id)

    def list_rooms(self, principal: Principal, hotel_id: Optional[str] = None) -> ServiceResult[List[Room]]:
        """
        Rooms visible to the principal.

        Customers see visible rooms of bookable hotels, owners the rooms of
        their own hotels, city admins the rooms in their city and super
        admins every room.
        """
        try:
            if isinstance(principal, Customer):
                rooms = self.repository.find_rooms(hotel_id=hotel_id, bookable_only=True)
            elif isinstance(principal, Owner):
                rooms = self.repository.find_rooms(hotel_id=hotel_id, owner_id=principal.id)
            elif isinstance(principal, CityAdmin):
                if not principal.city_id:
                    raise AuthorizationError("City admin is not assigned to a city")
                rooms = self.repository.find_rooms(hotel_id=hotel_id, city_id=principal.city_id)
            else:
                rooms = self.repository.find_rooms(hotel_id=hotel_id)
            return ServiceResult.success(rooms, message="Rooms retrieved successfully")
        except Exception as e:
            return self._handle_exception(e, "list rooms", hotel_id)
