"""
Booking request and response schemas.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, computed_field, field_validator, model_validator

from hajzi.core.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_ADULTS,
    MAX_CHILDREN,
    MAX_DISCOUNT_CODE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_PAGE_SIZE,
    MIN_ADULTS,
    MIN_CHILDREN,
    PHONE_NUMBER_PATTERN,
)
from hajzi.models.base.enums import BookingStatus, Currency
from hajzi.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema, BaseUpdateSchema

__all__ = [
    "BookingCreate",
    "BookingUpdate",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingFilterParams",
]


def _normalize_phone_number(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = re.sub(r"\s+", "", value)
    if not re.match(PHONE_NUMBER_PATTERN, value):
        raise ValueError("Please provide a valid Yemen phone number")
    return value


class BookingCreate(BaseCreateSchema):
    """
    Booking request from a customer.

    Hotel, owner and price are derived server-side from ``room_id``.
    """

    room_id: str = Field(..., min_length=1, description="Room to book")
    check_in: date = Field(..., description="First night of the stay")
    check_out: date = Field(..., description="Departure day")
    adults: int = Field(default=1, ge=MIN_ADULTS, le=MAX_ADULTS)
    children: int = Field(default=0, ge=MIN_CHILDREN, le=MAX_CHILDREN)
    full_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    guest_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    phone_number: str = Field(..., description="Yemen phone number, +967 optional")
    discount_code: Optional[str] = Field(default=None, max_length=MAX_DISCOUNT_CODE_LENGTH)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return _normalize_phone_number(v)

    @model_validator(mode="after")
    def validate_dates(self) -> "BookingCreate":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseUpdateSchema):
    """
    Partial booking update by its customer.

    Status, price, user, owner and hotel are not client-editable and are
    rejected as unknown fields.
    """

    room_id: Optional[str] = Field(default=None, min_length=1)
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: Optional[int] = Field(default=None, ge=MIN_ADULTS, le=MAX_ADULTS)
    children: Optional[int] = Field(default=None, ge=MIN_CHILDREN, le=MAX_CHILDREN)
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    guest_name: Optional[str] = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    phone_number: Optional[str] = None
    discount_code: Optional[str] = Field(default=None, max_length=MAX_DISCOUNT_CODE_LENGTH)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_phone_number(v)

    @model_validator(mode="after")
    def validate_dates(self) -> "BookingUpdate":
        if self.check_in and self.check_out and self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingStatusUpdate(BaseCreateSchema):
    """Owner or admin decision on a booking."""

    status: BookingStatus = Field(..., description="Target status")
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingResponse(BaseResponseSchema):
    user_id: str
    owner_id: str
    room_id: str
    hotel_id: str
    check_in: date
    check_out: date
    adults: int
    children: int
    price: Decimal
    currency: Currency
    status: BookingStatus
    full_name: str
    guest_name: str
    phone_number: str
    discount_code: Optional[str] = None
    notes: Optional[str] = None
    owner_whatsapp_link: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class BookingFilterParams(BaseSchema):
    """Listing filters; ``all`` for status or hotel_id means no filter."""

    status: Optional[BookingStatus] = None
    hotel_id: Optional[str] = None
    owner_id: Optional[str] = Field(default=None, description="Super admin only")
    search: Optional[str] = Field(default=None, max_length=100)
    sort_by: Literal["created_at", "check_in", "price"] = "created_at"
    sort_dir: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("status", "hotel_id", mode="before")
    @classmethod
    def all_means_unfiltered(cls, v):
        if v is None or (isinstance(v, str) and v.strip().lower() in {"", "all"}):
            return None
        return v

    @field_validator("search", "owner_id")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None
