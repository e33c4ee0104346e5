"""
Room schemas.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from hajzi.models.base.enums import Currency, RoomStatus
from hajzi.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema

__all__ = ["RoomCreate", "RoomUpdate", "RoomStatusUpdate", "RoomResponse"]


class RoomCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    base_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    currency: Currency = Currency.YER
    capacity: int = Field(default=1, ge=1)
    status: RoomStatus = RoomStatus.VISIBLE


class RoomUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    base_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: Optional[Currency] = None
    capacity: Optional[int] = Field(default=None, ge=1)


class RoomStatusUpdate(BaseCreateSchema):
    status: RoomStatus


class RoomResponse(BaseResponseSchema):
    hotel_id: str
    name: str
    description: Optional[str] = None
    base_price: Decimal
    currency: Currency
    capacity: int
    status: RoomStatus
