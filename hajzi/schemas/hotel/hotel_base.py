"""
Hotel schemas.
"""

from typing import Optional

from pydantic import Field

from hajzi.models.base.enums import HotelStatus
from hajzi.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = ["HotelCreate", "HotelStatusUpdate", "HotelResponse"]


class HotelCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    city_id: str = Field(..., min_length=1, max_length=36)
    description: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=255)
    is_visible: bool = True
    owner_id: Optional[str] = Field(
        default=None,
        description="Owning user; super admins only, owners always own what they create",
    )


class HotelStatusUpdate(BaseCreateSchema):
    status: HotelStatus


class HotelResponse(BaseResponseSchema):
    owner_id: str
    city_id: str
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    status: HotelStatus
    is_visible: bool
