"""
Hotel service: listing creation, moderation and visibility.
"""

from typing import Optional

from sqlalchemy.orm import Session

from hajzi.core.exceptions import AuthorizationError
from hajzi.models.base.enums import HotelStatus, UserRole
from hajzi.models.hotel.hotel import Hotel
from hajzi.repositories.hotel.hotel_repository import HotelRepository
from hajzi.repositories.user.user_repository import UserRepository
from hajzi.schemas.hotel.hotel_base import HotelCreate
from hajzi.services.auth.access_control import AccessControl, Action
from hajzi.services.auth.principal import Owner, Principal, SuperAdmin
from hajzi.services.base.base_service import BaseService
from hajzi.services.base.service_result import ServiceResult


class HotelService(BaseService[Hotel, HotelRepository]):
    """
    Owners list their hotels; super admins may list on an owner's behalf.
    New hotels start pending and become bookable once approved.
    """

    def __init__(self, db_session: Session):
        super().__init__(HotelRepository(db_session), db_session)
        self.user_repository = UserRepository(db_session)
        self.access = AccessControl(self.repository.find_ids_by_city)

    def create_hotel(self, principal: Principal, data: HotelCreate) -> ServiceResult[Hotel]:
        try:
            owner_id = self._resolve_owner_id(principal, data.owner_id)
            if owner_id is None:
                return ServiceResult.validation_failure("owner_id is required", field="owner_id")

            owner = self.user_repository.find_by_id(owner_id)
            if owner is None:
                return ServiceResult.not_found("User", owner_id)
            if owner.role != UserRole.OWNER:
                return ServiceResult.invalid_state(
                    "Hotel owner must have the owner role",
                    details={"owner_id": owner_id},
                )

            if self.repository.find_by_owner_name_city(owner_id, data.name, data.city_id):
                return ServiceResult.conflict(
                    "A hotel with this name already exists in this city",
                    details={"name": data.name, "city_id": data.city_id},
                )

            with self.transactions.start():
                hotel = Hotel(
                    **data.model_dump(exclude={"owner_id"}),
                    owner_id=owner_id,
                    status=HotelStatus.PENDING,
                )
                self.repository.create(hotel)

            self._logger.info(
                "Hotel created",
                extra={"hotel_id": hotel.id, "owner_id": owner_id, "city_id": hotel.city_id},
            )
            return ServiceResult.success(hotel, message="Hotel created successfully")
        except Exception as e:
            return self._handle_exception(e, "create hotel", data.name)

    def set_hotel_status(
        self,
        principal: Principal,
        hotel_id: str,
        status: HotelStatus,
    ) -> ServiceResult[Hotel]:
        """Approve or reject a hotel as a super admin or the admin of its city."""
        try:
            hotel = self.repository.find_by_id(hotel_id)
            if hotel is None:
                return ServiceResult.not_found("Hotel", hotel_id)
            self.access.ensure(principal, Action.MODERATE_HOTEL, hotel)

            if hotel.status != status:
                with self.transactions.start():
                    self.repository.update(hotel, {"status": status})
                self._logger.info(
                    "Hotel status changed",
                    extra={"hotel_id": hotel.id, "new_status": status.value, "changed_by": principal.id},
                )
            return ServiceResult.success(hotel, message="Hotel status updated successfully")
        except Exception as e:
            return self._handle_exception(e, "change hotel status", hotel_id)

    def set_hotel_visibility(self, principal: Principal, hotel_id: str, is_visible: bool) -> ServiceResult[Hotel]:
        """
        Show or hide a hotel as its owner or a super admin. Only approved
        hotels can be shown; hiding is always allowed.
        """
        try:
            hotel = self.repository.find_by_id(hotel_id)
            if hotel is None:
                return ServiceResult.not_found("Hotel", hotel_id)
            self.access.ensure(principal, Action.MANAGE_HOTEL, hotel)

            if is_visible and hotel.status != HotelStatus.APPROVED:
                return ServiceResult.invalid_state(
                    "Only approved hotels can be made visible",
                    details={"hotel_id": hotel.id, "hotel_status": hotel.status.value},
                )

            if hotel.is_visible != is_visible:
                with self.transactions.start():
                    self.repository.update(hotel, {"is_visible": is_visible})
                self._logger.info(
                    "Hotel visibility changed",
                    extra={"hotel_id": hotel.id, "is_visible": is_visible, "changed_by": principal.id},
                )
            message = "Hotel is now visible" if is_visible else "Hotel is now hidden"
            return ServiceResult.success(hotel, message=message)
        except Exception as e:
            return self._handle_exception(e, "change hotel visibility", hotel_id)

    def _resolve_owner_id(self, principal: Principal, requested: Optional[str]) -> Optional[str]:
        if isinstance(principal, SuperAdmin):
            return requested
        if isinstance(principal, Owner):
            if requested is not None and requested != principal.id:
                raise AuthorizationError("Owners can only create hotels for themselves")
            return principal.id
        raise AuthorizationError("Only owners and super admins can create hotels")
