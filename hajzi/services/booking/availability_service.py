"""
Room availability checks.

Stays are half-open ranges [check_in, check_out): a guest leaving on the
morning another arrives does not collide with them. Only pending and
confirmed bookings hold a room.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from hajzi.core.exceptions import BookingConflictError
from hajzi.core.logging import get_logger
from hajzi.models.booking.booking import Booking
from hajzi.repositories.booking.booking_repository import BookingRepository

logger = get_logger(__name__)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """[start_a, end_a) and [start_b, end_b) share at least one night."""
    return start_a < end_b and start_b < end_a


def describe_conflict(booking: Booking) -> Dict[str, Any]:
    return {
        "booking_id": booking.id,
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "status": booking.status.value,
    }


class AvailabilityService:

    def __init__(self, booking_repository: BookingRepository):
        self.booking_repository = booking_repository

    def find_conflicts(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Active bookings of the room overlapping the requested stay."""
        return self.booking_repository.find_conflicts(
            room_id, check_in, check_out, exclude_booking_id=exclude_booking_id
        )

    def has_conflict(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return bool(self.find_conflicts(room_id, check_in, check_out, exclude_booking_id))

    def ensure_available(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Raises:
            BookingConflictError: With the conflicting ranges in ``details["conflicts"]``
        """
        conflicts = self.find_conflicts(room_id, check_in, check_out, exclude_booking_id)
        if conflicts:
            logger.info(
                "Room not available for requested dates",
                extra={
                    "room_id": room_id,
                    "check_in": check_in.isoformat(),
                    "check_out": check_out.isoformat(),
                    "conflict_count": len(conflicts),
                },
            )
            raise BookingConflictError(
                room_id=room_id,
                conflicts=[describe_conflict(b) for b in conflicts],
            )
