from datetime import date, datetime, timezone

import pytest

from hajzi.core.exceptions import InvalidTransitionError, ValidationError
from hajzi.models.base.enums import BookingStatus
from hajzi.models.booking.booking import Booking
from hajzi.services.booking.booking_lifecycle import BookingLifecycle

CHECK_IN = date(2025, 3, 10)


def lifecycle_at(*args) -> BookingLifecycle:
    now = datetime(*args, tzinfo=timezone.utc)
    return BookingLifecycle(
        clock=lambda: now,
        cancellation_window_hours=24,
        modification_window_hours=48,
        check_in_hour=0,
    )


def booking_with(status: BookingStatus) -> Booking:
    return Booking(status=status, check_in=CHECK_IN, check_out=date(2025, 3, 12))


def test_hours_until_check_in_uses_check_in_hour():
    lifecycle = lifecycle_at(2025, 3, 9, 14)
    assert lifecycle.hours_until_check_in(CHECK_IN) == pytest.approx(10)


def test_cancel_confirmed_booking_ten_hours_before_check_in_is_rejected():
    booking = booking_with(BookingStatus.CONFIRMED)

    with pytest.raises(InvalidTransitionError):
        lifecycle_at(2025, 3, 9, 14).cancel(booking)
    assert booking.status == BookingStatus.CONFIRMED


def test_cancel_confirmed_booking_thirty_hours_before_check_in():
    booking = booking_with(BookingStatus.CONFIRMED)

    lifecycle_at(2025, 3, 8, 18).cancel(booking)

    assert booking.status == BookingStatus.CANCELLED
    assert booking.cancelled_at is not None


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.REJECTED])
def test_terminal_bookings_cannot_be_cancelled(status):
    with pytest.raises(InvalidTransitionError):
        lifecycle_at(2025, 3, 1).cancel(booking_with(status))


def test_modification_window():
    booking = booking_with(BookingStatus.PENDING)

    assert lifecycle_at(2025, 3, 7, 23).can_be_modified(booking)
    assert not lifecycle_at(2025, 3, 8, 1).can_be_modified(booking)
    with pytest.raises(InvalidTransitionError):
        lifecycle_at(2025, 3, 8, 1).ensure_can_modify(booking)


def test_confirmed_bookings_cannot_be_modified():
    with pytest.raises(InvalidTransitionError):
        lifecycle_at(2025, 3, 1).ensure_can_modify(booking_with(BookingStatus.CONFIRMED))


def test_check_in_must_be_in_the_future():
    lifecycle = lifecycle_at(2025, 3, 10, 0)

    with pytest.raises(ValidationError) as exc_info:
        lifecycle.ensure_check_in_in_future(CHECK_IN)
    assert "check_in" in exc_info.value.details["field_errors"]

    lifecycle.ensure_check_in_in_future(date(2025, 3, 11))


@pytest.mark.parametrize("target", [BookingStatus.CONFIRMED, BookingStatus.REJECTED])
def test_pending_booking_can_be_decided(target):
    booking = booking_with(BookingStatus.PENDING)

    assert lifecycle_at(2025, 3, 1).apply_status_change(booking, target) is True
    assert booking.status == target


def test_setting_the_current_status_is_a_no_op():
    booking = booking_with(BookingStatus.CONFIRMED)

    assert lifecycle_at(2025, 3, 1).apply_status_change(booking, BookingStatus.CONFIRMED) is False
    assert booking.confirmed_at is None


@pytest.mark.parametrize(
    "current, target",
    [
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.REJECTED, BookingStatus.CONFIRMED),
        (BookingStatus.CONFIRMED, BookingStatus.REJECTED),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
    ],
)
def test_disallowed_status_changes(current, target):
    with pytest.raises(InvalidTransitionError):
        lifecycle_at(2025, 3, 1).apply_status_change(booking_with(current), target)
