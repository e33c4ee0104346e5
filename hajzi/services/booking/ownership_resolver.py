"""
Ownership resolution for booking requests.

A booking's hotel and owner always come from the room's ownership chain
(room -> hotel -> owner), resolved fresh on every create and on every update
that moves the booking to another room.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from hajzi.core.constants import WHATSAPP_BASE_URL, YEMEN_COUNTRY_CODE
from hajzi.core.exceptions import BookingError, ErrorCode, ResourceNotFoundError
from hajzi.core.logging import get_logger
from hajzi.models.base.enums import UserRole
from hajzi.models.hotel.hotel import Hotel
from hajzi.models.room.room import Room
from hajzi.models.user.user import User
from hajzi.repositories.hotel.hotel_repository import HotelRepository
from hajzi.repositories.room.room_repository import RoomRepository
from hajzi.repositories.user.user_repository import UserRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class OwnershipChain:
    room: Room
    hotel: Hotel
    owner: User


def derive_associations(room: Room, hotel: Hotel) -> Dict[str, str]:
    """
    Booking foreign keys implied by a room and its hotel.

    Raises:
        ValueError: If the hotel is not the room's hotel
    """
    if room.hotel_id != hotel.id:
        raise ValueError("Room does not belong to the given hotel")
    return {"hotel_id": hotel.id, "owner_id": hotel.owner_id}


def normalize_whatsapp_number(number: Optional[str]) -> Optional[str]:
    """
    Bring a Yemeni WhatsApp number into +967XXXXXXXXX form.

    Numbers that match none of the known shapes are returned cleaned but
    otherwise untouched.
    """
    if not number:
        return None
    cleaned = re.sub(r"[^\d+]", "", number)
    if not cleaned:
        return None
    if cleaned.startswith("+" + YEMEN_COUNTRY_CODE):
        return cleaned
    if cleaned.startswith(YEMEN_COUNTRY_CODE):
        return "+" + cleaned
    if re.fullmatch(r"\d{9}", cleaned):
        return "+" + YEMEN_COUNTRY_CODE + cleaned
    return cleaned


def build_whatsapp_link(number: Optional[str]) -> Optional[str]:
    """wa.me link for an owner's WhatsApp number, or None without one."""
    normalized = normalize_whatsapp_number(number)
    if not normalized:
        return None
    digits = normalized.replace("+", "")
    if not digits:
        return None
    return f"{WHATSAPP_BASE_URL}{digits}"


class OwnershipResolver:
    """
    Resolves and checks the room -> hotel -> owner chain.
    """

    def __init__(
        self,
        room_repository: RoomRepository,
        hotel_repository: HotelRepository,
        user_repository: UserRepository,
    ):
        self.room_repository = room_repository
        self.hotel_repository = hotel_repository
        self.user_repository = user_repository

    def resolve(self, room_id: str, lock: bool = False) -> OwnershipChain:
        """
        Load the ownership chain of a room.

        Args:
            room_id: Room to resolve
            lock: Take a row lock on the room for the rest of the transaction

        Raises:
            ResourceNotFoundError: If the room, hotel or owner is missing
            BookingError: If the hotel's owner does not have the owner role
        """
        if lock:
            room = self.room_repository.lock_for_update(room_id)
        else:
            room = self.room_repository.find_by_id(room_id)
        if room is None:
            raise ResourceNotFoundError("Room", room_id)

        hotel = self.hotel_repository.find_by_id(room.hotel_id)
        if hotel is None:
            raise ResourceNotFoundError("Hotel", room.hotel_id)

        owner = self.user_repository.find_by_id(hotel.owner_id)
        if owner is None:
            raise ResourceNotFoundError("Hotel owner", hotel.owner_id)

        if owner.role != UserRole.OWNER:
            logger.warning(
                "Hotel owner does not have owner role",
                extra={"hotel_id": hotel.id, "owner_id": owner.id, "owner_role": owner.role.value},
            )
            raise BookingError(
                "Hotel owner does not have owner role",
                ErrorCode.INVALID_STATE,
                {"hotel_id": hotel.id, "owner_id": owner.id},
            )

        return OwnershipChain(room=room, hotel=hotel, owner=owner)

    def assert_bookable(self, chain: OwnershipChain) -> None:
        """
        Raises:
            BookingError: If the hotel is not approved and visible, or the room is hidden
        """
        if not chain.hotel.is_bookable:
            raise BookingError(
                "Hotel is not available for booking",
                ErrorCode.INVALID_STATE,
                {"hotel_id": chain.hotel.id, "hotel_status": chain.hotel.status.value},
            )
        if not chain.room.is_visible:
            raise BookingError(
                "Room is not available for booking",
                ErrorCode.INVALID_STATE,
                {"room_id": chain.room.id},
            )
