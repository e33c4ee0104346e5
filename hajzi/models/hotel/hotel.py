"""
Hotel model.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hajzi.models.base.base_model import TimestampModel
from hajzi.models.base.enums import HotelStatus

if TYPE_CHECKING:
    from hajzi.models.room.room import Room
    from hajzi.models.user.user import User

__all__ = ["Hotel"]


class Hotel(TimestampModel):
    """
    Hotel listed by an owner in a city.

    A hotel accepts bookings only while it is approved and visible.
    """

    __tablename__ = "hotels"

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    city_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[HotelStatus] = mapped_column(
        Enum(HotelStatus, name="hotel_status"),
        nullable=False,
        default=HotelStatus.PENDING,
    )
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped["User"] = relationship("User", back_populates="hotels", lazy="select")
    rooms: Mapped[List["Room"]] = relationship(
        "Room",
        back_populates="hotel",
        lazy="select",
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "name", "city_id", name="uq_hotel_owner_name_city"),
        Index("ix_hotel_city_status", "city_id", "status"),
    )

    @validates("name")
    def validate_name(self, key: str, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Hotel name cannot be empty")
        return value

    @property
    def is_bookable(self) -> bool:
        """Hotel is approved and publicly visible."""
        return self.status == HotelStatus.APPROVED and bool(self.is_visible)

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, name={self.name}, status={self.status})>"
