"""
Booking lifecycle rules.

    (new) ---------------------> pending       customer
    pending -------------------> confirmed     hotel owner, super admin
    pending -------------------> rejected      hotel owner, super admin
    pending | confirmed -------> cancelled     booking customer, outside the cancellation window
    pending (edit) ------------> pending       booking customer, outside the modification window

Cancelled and rejected are terminal. Time windows are measured from "now"
to the check-in date at BOOKING_CHECK_IN_HOUR UTC.
"""

from datetime import date, datetime, time, timezone
from typing import Callable, Dict, FrozenSet, Optional

from hajzi.config.settings import settings
from hajzi.core.exceptions import InvalidTransitionError, ValidationError
from hajzi.models.base.enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from hajzi.models.booking.booking import Booking

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


class BookingLifecycle:
    """
    Guards and applies booking status transitions.
    """

    # Owner/admin decisions; cancellation and edits have their own guards
    ALLOWED_STATUS_CHANGES: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
        BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED}),
    }

    def __init__(
        self,
        clock: Optional[Clock] = None,
        cancellation_window_hours: Optional[int] = None,
        modification_window_hours: Optional[int] = None,
        check_in_hour: Optional[int] = None,
    ):
        self.clock = clock or utc_clock
        self.cancellation_window_hours = (
            settings.BOOKING_CANCELLATION_WINDOW_HOURS
            if cancellation_window_hours is None else cancellation_window_hours
        )
        self.modification_window_hours = (
            settings.BOOKING_MODIFICATION_WINDOW_HOURS
            if modification_window_hours is None else modification_window_hours
        )
        self.check_in_hour = settings.BOOKING_CHECK_IN_HOUR if check_in_hour is None else check_in_hour

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        current = self.clock()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current

    def check_in_moment(self, check_in: date) -> datetime:
        return datetime.combine(check_in, time(hour=self.check_in_hour), tzinfo=timezone.utc)

    def hours_until_check_in(self, check_in: date) -> float:
        return (self.check_in_moment(check_in) - self.now()).total_seconds() / 3600

    def ensure_check_in_in_future(self, check_in: date) -> None:
        """
        Raises:
            ValidationError: If check-in has already started
        """
        if self.hours_until_check_in(check_in) <= 0:
            raise ValidationError(
                "Check-in date must be in the future",
                field_errors={"check_in": ["Check-in date must be in the future"]},
            )

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def can_be_cancelled(self, booking: Booking) -> bool:
        return (
            booking.status in ACTIVE_BOOKING_STATUSES
            and self.hours_until_check_in(booking.check_in) > self.cancellation_window_hours
        )

    def can_be_modified(self, booking: Booking) -> bool:
        return (
            booking.status == BookingStatus.PENDING
            and self.hours_until_check_in(booking.check_in) > self.modification_window_hours
        )

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def ensure_can_cancel(self, booking: Booking) -> None:
        """
        Raises:
            InvalidTransitionError: If the booking is terminal or check-in is too soon
        """
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise InvalidTransitionError(
                booking.status.value,
                BookingStatus.CANCELLED.value,
                f"booking is already {booking.status.value}",
            )
        if not self.can_be_cancelled(booking):
            raise InvalidTransitionError(
                booking.status.value,
                BookingStatus.CANCELLED.value,
                f"check-in is less than {self.cancellation_window_hours} hours away",
            )

    def ensure_can_modify(self, booking: Booking) -> None:
        """
        Raises:
            InvalidTransitionError: If the booking is not pending or check-in is too soon
        """
        if booking.status != BookingStatus.PENDING:
            raise InvalidTransitionError(
                booking.status.value,
                booking.status.value,
                "only pending bookings can be modified",
            )
        if not self.can_be_modified(booking):
            raise InvalidTransitionError(
                booking.status.value,
                booking.status.value,
                f"check-in is less than {self.modification_window_hours} hours away",
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def cancel(self, booking: Booking) -> None:
        self.ensure_can_cancel(booking)
        booking.cancel()

    def apply_status_change(self, booking: Booking, new_status: BookingStatus) -> bool:
        """
        Apply an owner or admin status decision.

        Returns:
            False when the booking already has ``new_status`` (no-op), True otherwise

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        if booking.status == new_status:
            return False

        allowed = self.ALLOWED_STATUS_CHANGES.get(booking.status, frozenset())
        if new_status not in allowed:
            raise InvalidTransitionError(booking.status.value, new_status.value)

        if new_status == BookingStatus.CONFIRMED:
            booking.confirm()
        else:
            booking.reject()
        return True
