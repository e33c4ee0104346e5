"""
Room model.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hajzi.models.base.base_model import TimestampModel
from hajzi.models.base.enums import Currency, RoomStatus

if TYPE_CHECKING:
    from hajzi.models.hotel.hotel import Hotel

__all__ = ["Room"]


class Room(TimestampModel):
    """
    Bookable room belonging to a hotel.

    Attributes:
        hotel_id: Owning hotel
        name: Room name, unique per hotel ignoring case
        base_price: Nightly price
        currency: Currency of base_price
        capacity: Maximum number of guests
        status: Listing visibility
    """

    __tablename__ = "rooms"

    hotel_id: Mapped[str] = mapped_column(
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="room_currency"),
        nullable=False,
        default=Currency.YER,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[RoomStatus] = mapped_column(
        Enum(RoomStatus, name="room_status"),
        nullable=False,
        default=RoomStatus.VISIBLE,
    )

    hotel: Mapped["Hotel"] = relationship("Hotel", back_populates="rooms", lazy="select")

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_room_price_positive"),
        CheckConstraint("capacity >= 1", name="ck_room_capacity_positive"),
    )

    @validates("base_price")
    def validate_base_price(self, key: str, value: Decimal) -> Decimal:
        value = Decimal(value)
        if value < 0:
            raise ValueError("base_price cannot be negative")
        return value

    @validates("capacity")
    def validate_capacity(self, key: str, value: int) -> int:
        if value < 1:
            raise ValueError("capacity must be at least 1")
        return value

    @validates("name")
    def validate_name(self, key: str, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Room name cannot be empty")
        return value

    @property
    def is_visible(self) -> bool:
        return self.status == RoomStatus.VISIBLE

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, hotel_id={self.hotel_id}, name={self.name})>"


# Room names are unique per hotel, case-insensitively
Index("uq_room_hotel_name_ci", Room.hotel_id, func.lower(Room.name), unique=True)
