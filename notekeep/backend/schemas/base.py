"""
Base Schemas.

Result envelope returned by every service operation. Services never raise
application errors to their callers; they return an OperationResult that
either carries data or an ErrorDetail describing what went wrong.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from notekeep.backend.core.exceptions import ApplicationError, ValidationError
from notekeep.backend.core.utils import utc_now

DataT = TypeVar("DataT")


class ResultMetadata(BaseModel):
    """Metadata included in every result."""

    timestamp: datetime = Field(default_factory=utc_now)
    operation: str | None = None


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None

    @classmethod
    def from_exception(cls, exc: ApplicationError) -> "ErrorDetail":
        details = exc.details if isinstance(exc, ValidationError) else None
        return cls(code=exc.code, message=exc.message, details=details or None)


class OperationResult(BaseModel, Generic[DataT]):
    """
    Standard operation result envelope.

    All service operations use this structure for consistency.
    """

    success: bool = True
    data: DataT | None = None
    error: ErrorDetail | None = None
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def ok(cls, data: Any = None, operation: str | None = None) -> "OperationResult":
        return cls(success=True, data=data, metadata=ResultMetadata(operation=operation))

    @classmethod
    def fail(cls, exc: ApplicationError, operation: str | None = None) -> "OperationResult":
        return cls(
            success=False,
            error=ErrorDetail.from_exception(exc),
            metadata=ResultMetadata(operation=operation),
        )

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None
