"""
User model.

Identity records consumed by the booking engine. Credentials and session
issuance live in the identity service; this table only carries what
access control and booking need.
"""

import re
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hajzi.models.base.base_model import TimestampModel
from hajzi.models.base.enums import UserRole, UserStatus

if TYPE_CHECKING:
    from hajzi.models.hotel.hotel import Hotel

__all__ = ["User"]


class User(TimestampModel):
    """
    Platform user.

    Attributes:
        full_name: Display name
        email: Unique login email
        phone: Unique phone number
        whatsapp_number: Owner contact number used for booking links
        role: Business role, immutable once assigned
        status: Account status; only active users may act
        city_id: City scope, required for city admins
    """

    __tablename__ = "users"

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, name="user_status"),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    city_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        comment="Administered city for city admins",
    )

    hotels: Mapped[List["Hotel"]] = relationship(
        "Hotel",
        back_populates="owner",
        lazy="select",
    )

    __table_args__ = (
        Index("ix_users_role_status", "role", "status"),
        Index("ix_users_city", "city_id"),
    )

    @validates("email")
    def validate_email(self, key: str, value: str) -> str:
        value = value.strip().lower()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", value):
            raise ValueError("Invalid email address")
        return value

    @validates("phone", "whatsapp_number")
    def validate_phone(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return re.sub(r"\s+", "", value)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role}, status={self.status})>"
