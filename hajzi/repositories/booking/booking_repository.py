"""
Booking repository.

Date-range conflict queries, night claims and role-scoped searches over
room bookings.
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hajzi.core.exceptions import EntityAlreadyExistsError, RepositoryError
from hajzi.core.logging import get_logger
from hajzi.models.base.enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from hajzi.models.booking.booking import Booking, BookingNight, BookingStatusHistory
from hajzi.repositories.base.base_repository import BaseRepository, is_unique_violation

logger = get_logger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Booking.created_at,
    "check_in": Booking.check_in,
    "price": Booking.price,
}


class BookingRepository(BaseRepository[Booking]):

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    # ==================== Availability ====================

    def find_conflicts(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active bookings of a room whose stay overlaps [check_in, check_out).

        Two half-open ranges [a, b) and [c, d) overlap iff a < d and c < b,
        so a stay ending on another's check-in day does not conflict.
        """
        query = self.db.query(Booking).filter(
            Booking.room_id == room_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.order_by(Booking.check_in.asc()).all()

    # ==================== Night claims ====================

    def claim_nights(self, booking: Booking) -> List[BookingNight]:
        """
        Insert one BookingNight per night of the stay and flush.

        Raises:
            EntityAlreadyExistsError: If another booking already holds one of the nights
        """
        nights = [
            BookingNight(room_id=booking.room_id, night=night)
            for night in booking.stay_nights()
        ]
        booking.nights.extend(nights)
        try:
            self.db.flush()
        except IntegrityError as e:
            if not is_unique_violation(e):
                raise RepositoryError(f"Claiming nights violates a constraint: {e.orig}") from e
            logger.warning(
                "Night claim rejected by unique constraint",
                extra={"room_id": booking.room_id, "booking_id": booking.id},
            )
            raise EntityAlreadyExistsError(
                "BookingNight", "Room is already booked for one of the selected nights"
            ) from e
        return nights

    def release_nights(self, booking: Booking) -> None:
        """Delete the booking's night claims and flush."""
        booking.nights.clear()
        self.db.flush()

    # ==================== Audit trail ====================

    def add_status_history(
        self,
        booking: Booking,
        from_status: Optional[BookingStatus],
        to_status: BookingStatus,
        changed_by: Optional[str],
        change_reason: Optional[str] = None,
    ) -> BookingStatusHistory:
        entry = BookingStatusHistory(
            from_status=from_status,
            to_status=to_status,
            changed_by=changed_by,
            change_reason=change_reason,
        )
        booking.status_history.append(entry)
        self.db.flush()
        return entry

    def find_status_history(self, booking_id: str) -> List[BookingStatusHistory]:
        return (
            self.db.query(BookingStatusHistory)
            .filter(BookingStatusHistory.booking_id == booking_id)
            .order_by(BookingStatusHistory.changed_at.asc(), BookingStatusHistory.id.asc())
            .all()
        )

    # ==================== Search ====================

    def search(
        self,
        *,
        user_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        hotel_ids: Optional[Sequence[str]] = None,
        status: Optional[BookingStatus] = None,
        hotel_id: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Booking], int]:
        """
        Filtered, sorted and paginated booking listing.

        ``user_id``, ``owner_id`` and ``hotel_ids`` carry the caller's scope;
        an empty ``hotel_ids`` sequence matches nothing.

        Returns:
            (bookings on the requested page, total matching bookings)
        """
        query = self.db.query(Booking)

        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if owner_id is not None:
            query = query.filter(Booking.owner_id == owner_id)
        if hotel_ids is not None:
            query = query.filter(Booking.hotel_id.in_(list(hotel_ids)))
        if status is not None:
            query = query.filter(Booking.status == status)
        if hotel_id is not None:
            query = query.filter(Booking.hotel_id == hotel_id)
        if search:
            term = search.strip().lower()
            query = query.filter(
                or_(
                    func.lower(Booking.full_name).contains(term, autoescape=True),
                    func.lower(Booking.guest_name).contains(term, autoescape=True),
                    Booking.phone_number.contains(term, autoescape=True),
                )
            )

        column = SORTABLE_COLUMNS.get(sort_by, Booking.created_at)
        if sort_dir == "asc":
            query = query.order_by(column.asc(), Booking.id.asc())
        else:
            query = query.order_by(column.desc(), Booking.id.desc())

        return self.paginate_query(query, offset, limit)
