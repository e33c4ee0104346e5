"""
Booking service: create, read, update, cancel, status decisions and listings.

Every write runs in a single transaction that locks the room row, re-runs
the availability scan and claims the booked nights, so concurrent writers
on the same room serialize on the lock or fail on the night claim.
"""

from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from hajzi.core.exceptions import ResourceNotFoundError, ValidationError
from hajzi.core.pagination import normalize_pagination, paginate_items
from hajzi.models.base.enums import BookingStatus
from hajzi.models.booking.booking import Booking
from hajzi.repositories.booking.booking_repository import BookingRepository
from hajzi.repositories.hotel.hotel_repository import HotelRepository
from hajzi.repositories.room.room_repository import RoomRepository
from hajzi.repositories.user.user_repository import UserRepository
from hajzi.schemas.booking.booking_base import (
    BookingCreate,
    BookingFilterParams,
    BookingResponse,
    BookingUpdate,
)
from hajzi.schemas.common.pagination import PaginatedResponse
from hajzi.services.auth.access_control import AccessControl, Action
from hajzi.services.auth.principal import Principal, SuperAdmin
from hajzi.services.base.base_service import BaseService, track_performance
from hajzi.services.base.service_result import ServiceResult
from hajzi.services.base.transaction_manager import TransactionContext
from hajzi.services.booking.availability_service import AvailabilityService
from hajzi.services.booking.booking_lifecycle import BookingLifecycle, Clock
from hajzi.services.booking.booking_pricing_service import BookingPricingService
from hajzi.services.booking.ownership_resolver import (
    OwnershipResolver,
    build_whatsapp_link,
    derive_associations,
)

# Fields a customer may clear by sending null
NULLABLE_UPDATE_FIELDS = frozenset({"discount_code", "notes"})
STAY_FIELDS = frozenset({"room_id", "check_in", "check_out"})


class BookingService(BaseService[Booking, BookingRepository]):
    """
    Core booking operations.

    Responsibilities:
    - Booking lifecycle management (create, update, cancel, confirm/reject)
    - Ownership derivation, availability and pricing on every stay change
    - Role-scoped listings
    """

    def __init__(
        self,
        db_session: Session,
        clock: Optional[Clock] = None,
        lifecycle: Optional[BookingLifecycle] = None,
    ):
        super().__init__(BookingRepository(db_session), db_session)
        self.room_repository = RoomRepository(db_session)
        self.hotel_repository = HotelRepository(db_session)
        self.user_repository = UserRepository(db_session)

        self.resolver = OwnershipResolver(self.room_repository, self.hotel_repository, self.user_repository)
        self.availability = AvailabilityService(self.repository)
        self.pricing = BookingPricingService()
        self.lifecycle = lifecycle or BookingLifecycle(clock=clock)
        self.access = AccessControl(self.hotel_repository.find_ids_by_city)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @track_performance("create_booking")
    def create_booking(self, principal: Principal, data: BookingCreate) -> ServiceResult[Booking]:
        """
        Create a pending booking for the calling customer.

        Hotel, owner, price and the owner's WhatsApp link are derived from
        the room; any conflict with an active booking of the room fails the
        request with CONFLICT.
        """
        try:
            self.access.ensure(principal, Action.CREATE_BOOKING)
            self.lifecycle.ensure_check_in_in_future(data.check_in)

            def work(ctx: TransactionContext) -> Booking:
                chain = self.resolver.resolve(data.room_id, lock=True)
                self.resolver.assert_bookable(chain)
                self.availability.ensure_available(chain.room.id, data.check_in, data.check_out)
                quote = self.pricing.quote(chain.room, data.check_in, data.check_out)

                booking = Booking(
                    **data.model_dump(),
                    **derive_associations(chain.room, chain.hotel),
                    user_id=principal.id,
                    price=quote.total,
                    currency=quote.currency,
                    status=BookingStatus.PENDING,
                    owner_whatsapp_link=build_whatsapp_link(chain.owner.whatsapp_number),
                )
                self.repository.create(booking)
                self.repository.claim_nights(booking)
                self.repository.add_status_history(
                    booking, None, BookingStatus.PENDING, principal.id, "Booking created"
                )
                return booking

            booking = self.transactions.run_with_retry(work)

            self._logger.info(
                "Booking created",
                extra={
                    "booking_id": booking.id,
                    "room_id": booking.room_id,
                    "hotel_id": booking.hotel_id,
                    "customer_id": principal.id,
                    "nights": booking.night_count,
                },
            )
            return ServiceResult.success(booking, message="Room booking created successfully")
        except Exception as e:
            return self._handle_exception(e, "create booking", data.room_id)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def get_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        try:
            booking = self.repository.find_by_id(booking_id)
            if booking is None:
                return ServiceResult.not_found("Booking", booking_id)
            self.access.ensure(principal, Action.VIEW_BOOKING, booking)
            return ServiceResult.success(booking, message="Booking retrieved successfully")
        except Exception as e:
            return self._handle_exception(e, "get booking", booking_id)

    @track_performance("list_bookings")
    def list_bookings(
        self,
        principal: Principal,
        filters: BookingFilterParams,
    ) -> ServiceResult[PaginatedResponse[BookingResponse]]:
        """
        Paginated bookings visible to the principal.

        Customers see their own bookings, owners the bookings of their
        hotels, city admins the bookings of hotels in their city and super
        admins everything. ``owner_id`` filtering is honoured for super
        admins only.
        """
        try:
            scope = self.access.booking_scope(principal)
            params = normalize_pagination(filters.page, filters.page_size)

            bookings, total = self.repository.search(
                user_id=scope.user_id,
                owner_id=scope.owner_id or (
                    filters.owner_id if isinstance(principal, SuperAdmin) else None
                ),
                hotel_ids=scope.hotel_ids,
                status=filters.status,
                hotel_id=filters.hotel_id,
                search=filters.search,
                sort_by=filters.sort_by,
                sort_dir=filters.sort_dir,
                offset=params.offset,
                limit=params.limit,
            )
            page = paginate_items(
                items=bookings,
                total_items=total,
                params=params,
                mapper=BookingResponse.model_validate,
            )
            return ServiceResult.success(page, message="Bookings retrieved successfully")
        except Exception as e:
            return self._handle_exception(e, "list bookings", principal.id)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    @track_performance("update_booking")
    def update_booking(
        self,
        principal: Principal,
        booking_id: str,
        data: BookingUpdate,
    ) -> ServiceResult[Booking]:
        """
        Edit a pending booking more than the modification window before check-in.

        Changing the room or dates re-derives ownership (room change only),
        re-checks availability excluding this booking, re-prices the stay
        and re-claims its nights.
        """
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_UPDATE_FIELDS
        }

        try:
            def work(ctx: TransactionContext) -> Booking:
                booking = self._load_booking(booking_id)
                self.access.ensure(principal, Action.MODIFY_BOOKING, booking)
                self.lifecycle.ensure_can_modify(booking)

                values = dict(changes)
                if STAY_FIELDS & values.keys():
                    values.update(self._restay(booking, values))
                    self.repository.release_nights(booking)
                    self.repository.update(booking, values)
                    self.repository.claim_nights(booking)
                elif values:
                    self.repository.update(booking, values)
                return booking

            booking = self.transactions.run_with_retry(work)

            self._logger.info(
                "Booking updated",
                extra={"booking_id": booking.id, "updated_fields": sorted(changes)},
            )
            return ServiceResult.success(booking, message="Booking updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update booking", booking_id)

    def _restay(self, booking: Booking, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Derived fields for a booking whose room or dates change."""
        room_id = changes.get("room_id", booking.room_id)
        check_in: date = changes.get("check_in", booking.check_in)
        check_out: date = changes.get("check_out", booking.check_out)

        if check_out <= check_in:
            raise ValidationError(
                "check_out must be after check_in",
                field_errors={"check_out": ["check_out must be after check_in"]},
            )
        if "check_in" in changes:
            self.lifecycle.ensure_check_in_in_future(check_in)

        derived: Dict[str, Any] = {}
        if room_id != booking.room_id:
            chain = self.resolver.resolve(room_id, lock=True)
            self.resolver.assert_bookable(chain)
            room = chain.room
            derived.update(derive_associations(chain.room, chain.hotel))
            derived["owner_whatsapp_link"] = build_whatsapp_link(chain.owner.whatsapp_number)
        else:
            room = self.room_repository.lock_for_update(room_id)
            if room is None:
                raise ResourceNotFoundError("Room", room_id)

        self.availability.ensure_available(room_id, check_in, check_out, exclude_booking_id=booking.id)

        quote = self.pricing.quote(room, check_in, check_out)
        derived["price"] = quote.total
        derived["currency"] = quote.currency
        return derived

    # -------------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------------

    @track_performance("cancel_booking")
    def cancel_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        """Cancel the caller's own booking outside the cancellation window."""
        try:
            def work(ctx: TransactionContext) -> Booking:
                booking = self._load_booking(booking_id)
                self.access.ensure(principal, Action.CANCEL_BOOKING, booking)
                from_status = booking.status
                self.lifecycle.cancel(booking)
                self.repository.release_nights(booking)
                self.repository.add_status_history(
                    booking, from_status, BookingStatus.CANCELLED, principal.id, "Cancelled by customer"
                )
                return booking

            booking = self.transactions.run_with_retry(work)

            self._logger.info("Booking cancelled", extra={"booking_id": booking.id})
            return ServiceResult.success(booking, message="Booking cancelled successfully")
        except Exception as e:
            return self._handle_exception(e, "cancel booking", booking_id)

    @track_performance("set_booking_status")
    def set_booking_status(
        self,
        principal: Principal,
        booking_id: str,
        new_status: BookingStatus,
        reason: Optional[str] = None,
    ) -> ServiceResult[Booking]:
        """
        Confirm or reject a pending booking as its hotel owner or a super admin.

        Setting the status a booking already has changes nothing.
        """
        try:
            outcome: Dict[str, bool] = {}

            def work(ctx: TransactionContext) -> Booking:
                booking = self._load_booking(booking_id)
                self.access.ensure(principal, Action.CHANGE_BOOKING_STATUS, booking)
                from_status = booking.status
                outcome["changed"] = self.lifecycle.apply_status_change(booking, new_status)
                if outcome["changed"]:
                    if not booking.is_active:
                        self.repository.release_nights(booking)
                    self.repository.add_status_history(
                        booking, from_status, new_status, principal.id, reason
                    )
                return booking

            booking = self.transactions.run_with_retry(work)

            if not outcome.get("changed"):
                return ServiceResult.success(booking, message="Booking status unchanged")

            self._logger.info(
                "Booking status changed",
                extra={"booking_id": booking.id, "new_status": new_status.value, "changed_by": principal.id},
            )
            return ServiceResult.success(booking, message="Booking status updated successfully")
        except Exception as e:
            return self._handle_exception(e, "change booking status", booking_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load_booking(self, booking_id: str) -> Booking:
        booking = self.repository.find_by_id(booking_id)
        if booking is None:
            raise ResourceNotFoundError("Booking", booking_id)
        return booking
