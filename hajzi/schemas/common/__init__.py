from hajzi.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema, BaseUpdateSchema
from hajzi.schemas.common.pagination import PaginatedResponse, PaginationMeta, PaginationParams
from hajzi.schemas.common.response import HealthResponse, SuccessResponse

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseResponseSchema",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "HealthResponse",
    "SuccessResponse",
]
