"""
Standard API response wrappers.
"""

from typing import Generic, Optional, TypeVar

from pydantic import Field

from hajzi.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["SuccessResponse", "HealthResponse"]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: str = Field(..., description="Response message")
    data: Optional[T] = Field(default=None, description="Response data")

    @classmethod
    def create(cls, message: Optional[str], data: Optional[T] = None) -> "SuccessResponse[T]":
        """Create success response."""
        return cls(success=True, message=message or "OK", data=data)


class HealthResponse(BaseSchema):
    status: str
    version: str
    database: str
