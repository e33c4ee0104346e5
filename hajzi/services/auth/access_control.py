"""
Access control for bookings, hotels and rooms.

``can_act`` answers whether a principal may perform an action on a target;
``booking_scope`` turns a principal into the filter its booking listings
are restricted to.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from hajzi.core.exceptions import AuthorizationError
from hajzi.core.logging import get_logger
from hajzi.models.booking.booking import Booking
from hajzi.models.hotel.hotel import Hotel
from hajzi.models.room.room import Room
from hajzi.services.auth.principal import CityAdmin, Customer, Owner, Principal, SuperAdmin

logger = get_logger(__name__)


class Action(str, enum.Enum):
    VIEW_BOOKING = "view_booking"
    MODIFY_BOOKING = "modify_booking"
    CANCEL_BOOKING = "cancel_booking"
    CHANGE_BOOKING_STATUS = "change_booking_status"
    CREATE_BOOKING = "create_booking"
    MANAGE_HOTEL = "manage_hotel"
    MANAGE_ROOM = "manage_room"
    MODERATE_HOTEL = "moderate_hotel"


@dataclass(frozen=True)
class BookingScope:
    """
    Row filter for booking listings.

    ``None`` means the dimension is unrestricted; an empty ``hotel_ids``
    tuple matches no booking at all.
    """

    user_id: Optional[str] = None
    owner_id: Optional[str] = None
    hotel_ids: Optional[Tuple[str, ...]] = None


def _hotel_owner_id(target: Any) -> Optional[str]:
    if isinstance(target, Hotel):
        return target.owner_id
    if isinstance(target, Room):
        return target.hotel.owner_id if target.hotel is not None else None
    return None


def can_act(principal: Principal, action: Action, target: Any = None) -> bool:
    """
    Decide whether ``principal`` may perform ``action`` on ``target``.

    Booking actions expect a Booking target, hotel and room actions a Hotel
    or Room target.
    """
    if action == Action.CREATE_BOOKING:
        return isinstance(principal, Customer)

    if action in (Action.VIEW_BOOKING, Action.MODIFY_BOOKING,
                  Action.CANCEL_BOOKING, Action.CHANGE_BOOKING_STATUS):
        if not isinstance(target, Booking):
            return False
        is_booker = principal.id == target.user_id
        is_hotel_owner = isinstance(principal, Owner) and principal.id == target.owner_id
        is_super_admin = isinstance(principal, SuperAdmin)

        if action == Action.VIEW_BOOKING:
            return is_booker or is_hotel_owner or is_super_admin
        if action in (Action.MODIFY_BOOKING, Action.CANCEL_BOOKING):
            return is_booker
        return is_hotel_owner or is_super_admin

    if action in (Action.MANAGE_HOTEL, Action.MANAGE_ROOM):
        if isinstance(principal, SuperAdmin):
            return True
        owner_id = _hotel_owner_id(target)
        return isinstance(principal, Owner) and owner_id is not None and owner_id == principal.id

    if action == Action.MODERATE_HOTEL:
        if isinstance(principal, SuperAdmin):
            return True
        return (
            isinstance(principal, CityAdmin)
            and isinstance(target, Hotel)
            and principal.city_id is not None
            and principal.city_id == target.city_id
        )

    return False


class AccessControl:
    """
    Permission checks bound to the hotel lookup needed for city scoping.
    """

    def __init__(self, hotels_in_city: Callable[[str], List[str]]):
        self._hotels_in_city = hotels_in_city

    def can_act(self, principal: Principal, action: Action, target: Any = None) -> bool:
        return can_act(principal, action, target)

    def ensure(self, principal: Principal, action: Action, target: Any = None) -> None:
        """
        Raises:
            AuthorizationError: If the principal may not act
        """
        if not can_act(principal, action, target):
            logger.warning(
                "Access denied",
                extra={
                    "principal_id": principal.id,
                    "principal_role": principal.role.value,
                    "action": action.value,
                    "target_id": getattr(target, "id", None),
                },
            )
            raise AuthorizationError(f"You do not have permission to {action.value.replace('_', ' ')}")

    def booking_scope(self, principal: Principal) -> BookingScope:
        """
        Listing filter for a principal.

        Raises:
            AuthorizationError: If a city admin has no city assigned
        """
        if isinstance(principal, SuperAdmin):
            return BookingScope()
        if isinstance(principal, Customer):
            return BookingScope(user_id=principal.id)
        if isinstance(principal, Owner):
            return BookingScope(owner_id=principal.id)
        if isinstance(principal, CityAdmin):
            if not principal.city_id:
                raise AuthorizationError("City admin is not assigned to a city")
            return BookingScope(hotel_ids=tuple(self._hotels_in_city(principal.city_id)))
        raise AuthorizationError("Unknown principal role")
