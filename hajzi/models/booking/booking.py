"""
Booking models for managing room reservations.

This module defines the core booking entity with lifecycle mutations,
the per-night claim rows that back the no-double-booking rule at the
database level, and the status change audit trail.
"""

import re
from datetime import date as Date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date as SQLDate,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hajzi.core.constants import (
    MAX_ADULTS,
    MAX_CHILDREN,
    MAX_DISCOUNT_CODE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MIN_ADULTS,
    MIN_CHILDREN,
    PHONE_NUMBER_PATTERN,
)
from hajzi.models.base.base_model import BaseModel, TimestampModel, utcnow
from hajzi.models.base.enums import ACTIVE_BOOKING_STATUSES, BookingStatus, Currency

if TYPE_CHECKING:
    from hajzi.models.hotel.hotel import Hotel
    from hajzi.models.room.room import Room
    from hajzi.models.user.user import User

booking_status_type = Enum(BookingStatus, name="booking_status")

__all__ = [
    "Booking",
    "BookingNight",
    "BookingStatusHistory",
]


class Booking(TimestampModel):
    """
    Room reservation made by a customer.

    ``owner_id`` and ``hotel_id`` are copied from the room's ownership chain
    whenever the room is set and are never taken from client input. ``price``
    is the room's base price times the number of nights.

    Attributes:
        user_id: Customer who made the booking
        owner_id: Owner of the booked hotel
        room_id: Booked room
        hotel_id: Hotel the room belongs to
        check_in: First night (inclusive)
        check_out: Departure day (exclusive)
        adults: Number of adults (1-20)
        children: Number of children (0-10)
        price: Total price for the stay
        currency: Currency of the room at booking time
        status: Lifecycle status
        full_name: Name of the person booking
        guest_name: Name of the guest staying
        phone_number: Contact number
        discount_code: Optional discount code
        notes: Free-form notes for the owner
        owner_whatsapp_link: wa.me link to the owner
    """

    __tablename__ = "bookings"

    # Foreign Keys
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Customer making the booking",
    )
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Hotel owner, derived from the room",
    )
    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    hotel_id: Mapped[str] = mapped_column(
        ForeignKey("hotels.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Hotel, derived from the room",
    )

    # Stay
    check_in: Mapped[Date] = mapped_column(SQLDate, nullable=False)
    check_out: Mapped[Date] = mapped_column(SQLDate, nullable=False)
    adults: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="booking_currency"),
        nullable=False,
        default=Currency.YER,
    )

    status: Mapped[BookingStatus] = mapped_column(
        booking_status_type,
        nullable=False,
        default=BookingStatus.PENDING,
    )

    # Guest details
    full_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    guest_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_code: Mapped[Optional[str]] = mapped_column(
        String(MAX_DISCOUNT_CODE_LENGTH), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    owner_whatsapp_link: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Lifecycle timestamps
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="select")
    owner: Mapped["User"] = relationship("User", foreign_keys=[owner_id], lazy="select")
    room: Mapped["Room"] = relationship("Room", lazy="select")
    hotel: Mapped["Hotel"] = relationship("Hotel", lazy="select")

    nights: Mapped[List["BookingNight"]] = relationship(
        "BookingNight",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="select",
    )
    status_history: Mapped[List["BookingStatusHistory"]] = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingStatusHistory.changed_at",
        lazy="select",
    )

    __table_args__ = (
        Index("ix_booking_user_created", "user_id", "created_at"),
        Index("ix_booking_owner_created", "owner_id", "created_at"),
        Index("ix_booking_hotel_status", "hotel_id", "status"),
        Index("ix_booking_room_dates", "room_id", "check_in", "check_out"),
        Index("ix_booking_status_created", "status", "created_at"),
        CheckConstraint("check_out > check_in", name="ck_booking_date_order"),
        CheckConstraint(
            f"adults >= {MIN_ADULTS} AND adults <= {MAX_ADULTS}",
            name="ck_booking_adults_range",
        ),
        CheckConstraint(
            f"children >= {MIN_CHILDREN} AND children <= {MAX_CHILDREN}",
            name="ck_booking_children_range",
        ),
        CheckConstraint("price >= 0", name="ck_booking_price_positive"),
    )

    # Validators
    @validates("adults")
    def validate_adults(self, key: str, value: int) -> int:
        if value < MIN_ADULTS or value > MAX_ADULTS:
            raise ValueError(f"Number of adults must be between {MIN_ADULTS} and {MAX_ADULTS}")
        return value

    @validates("children")
    def validate_children(self, key: str, value: int) -> int:
        if value < MIN_CHILDREN or value > MAX_CHILDREN:
            raise ValueError(f"Number of children must be between {MIN_CHILDREN} and {MAX_CHILDREN}")
        return value

    @validates("phone_number")
    def validate_phone_number(self, key: str, value: str) -> str:
        value = re.sub(r"\s+", "", value)
        if not re.match(PHONE_NUMBER_PATTERN, value):
            raise ValueError("Please provide a valid Yemen phone number")
        return value

    @validates("notes")
    def validate_notes(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) > MAX_NOTES_LENGTH:
            raise ValueError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
        return value

    @validates("price")
    def validate_price(self, key: str, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("price cannot be negative")
        return value

    # Properties
    @property
    def night_count(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def is_active(self) -> bool:
        """Booking currently holds its room's nights."""
        return self.status in ACTIVE_BOOKING_STATUSES

    def stay_nights(self) -> List[Date]:
        """Each night of the stay, check-in inclusive, check-out exclusive."""
        return [self.check_in + timedelta(days=offset) for offset in range(self.night_count)]

    # Lifecycle mutations
    def confirm(self) -> None:
        if self.status != BookingStatus.PENDING:
            raise ValueError(f"Cannot confirm booking with status {self.status.value}")
        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = utcnow()

    def reject(self) -> None:
        if self.status != BookingStatus.PENDING:
            raise ValueError(f"Cannot reject booking with status {self.status.value}")
        self.status = BookingStatus.REJECTED
        self.rejected_at = utcnow()

    def cancel(self) -> None:
        if self.status not in ACTIVE_BOOKING_STATUSES:
            raise ValueError(f"Cannot cancel booking with status {self.status.value}")
        self.status = BookingStatus.CANCELLED
        self.cancelled_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, room_id={self.room_id}, "
            f"{self.check_in}..{self.check_out}, status={self.status})>"
        )


class BookingNight(BaseModel):
    """
    One night of a room held by an active booking.

    The unique (room_id, night) constraint guarantees that two concurrent
    transactions can never both hold the same night.
    """

    __tablename__ = "booking_nights"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
    )
    night: Mapped[Date] = mapped_column(SQLDate, nullable=False)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="nights")

    __table_args__ = (
        UniqueConstraint("room_id", "night", name="uq_booking_night_room_night"),
    )

    def __repr__(self) -> str:
        return f"<BookingNight(room_id={self.room_id}, night={self.night})>"


class BookingStatusHistory(BaseModel):
    """
    Booking status change history for audit trail.

    Attributes:
        booking_id: Reference to the booking
        from_status: Previous status, NULL for the initial status
        to_status: New status
        changed_by: User who changed the status
        change_reason: Reason for status change
        changed_at: When status was changed
    """

    __tablename__ = "booking_status_history"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[Optional[BookingStatus]] = mapped_column(
        booking_status_type,
        nullable=True,
    )
    to_status: Mapped[BookingStatus] = mapped_column(
        booking_status_type,
        nullable=False,
    )
    changed_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    change_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="status_history")

    __table_args__ = (
        Index("ix_status_history_booking_changed", "booking_id", "changed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<BookingStatusHistory(booking_id={self.booking_id}, "
            f"{self.from_status} -> {self.to_status})>"
        )
