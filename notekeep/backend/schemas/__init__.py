# Pydantic schemas package
from notekeep.backend.schemas.base import (
    ErrorDetail,
    OperationResult,
    ResultMetadata,
)

__all__ = [
    "ErrorDetail",
    "OperationResult",
    "ResultMetadata",
]
