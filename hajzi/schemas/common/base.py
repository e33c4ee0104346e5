"""
Shared pydantic bases for request and response models.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseResponseSchema",
]


class BaseSchema(BaseModel):
    """Reads ORM attributes, trims strings and revalidates on assignment."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseCreateSchema(BaseSchema):
    model_config = ConfigDict(extra="forbid")


class BaseUpdateSchema(BaseSchema):
    # Every field optional in subclasses; unset ones are left untouched.
    model_config = ConfigDict(extra="forbid")


class BaseResponseSchema(BaseSchema):
    id: str = Field(..., description="Record id")
    created_at: datetime
    updated_at: datetime
