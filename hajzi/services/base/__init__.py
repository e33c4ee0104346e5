from hajzi.services.base.base_service import BaseService, track_performance
from hajzi.services.base.service_result import ErrorCode, ErrorSeverity, ServiceError, ServiceResult
from hajzi.services.base.transaction_manager import TransactionContext, TransactionManager

__all__ = [
    "BaseService",
    "track_performance",
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
    "TransactionContext",
    "TransactionManager",
]
