"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, validate input, and turn every
application error into an OperationResult so callers never see an
uncaught fault.

Usage:
    from notekeep.backend.services.base import BaseService

    class ProfileService(BaseService):
        async def rename(self, profile_id: str, full_name: str) -> OperationResult:
            async def _rename() -> Profile:
                self._validate_required({"full_name": full_name}, ["full_name"])
                return await self._execute_remote_operation(
                    "rename_profile", self.repo.update(profile_id, full_name=full_name),
                )
            return await self._run("rename_profile", _rename())
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from notekeep.backend.core.exceptions import (
    ApplicationError,
    RemoteError,
    ValidationError,
)
from notekeep.backend.core.logging import get_logger
from notekeep.backend.core.store import StoreClient
from notekeep.backend.schemas.base import OperationResult

logger = get_logger(__name__)

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Store client access
    - Logging context
    - Error wrapping for remote operations
    - Result conversion at the service boundary
    - Common validation patterns
    """

    def __init__(self, store: StoreClient) -> None:
        """
        Initialize the service with a store client.

        Args:
            store: Client for the remote store
        """
        self._store = store
        self._logger = get_logger(self.__class__.__module__)

    @property
    def store(self) -> StoreClient:
        """Get the store client."""
        return self._store

    async def _execute_remote_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Execute a remote operation with error handling.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute

        Returns:
            Result of the coroutine

        Raises:
            RemoteError: If the store returned a record that does not fit its schema
        """
        try:
            return await coro
        except PydanticValidationError as e:
            self._logger.error(
                "Malformed record from remote store",
                extra={"operation": operation, "error": str(e)},
            )
            raise RemoteError(f"Malformed record from remote store: {operation}") from e

    async def _run(self, operation: str, coro: Awaitable[Any]) -> OperationResult:
        """
        Await coro and wrap its outcome.

        ApplicationError subclasses become failed results and are logged
        with their code. Cancellation propagates unchanged.
        """
        try:
            data = await coro
        except ApplicationError as e:
            level = "info" if isinstance(e, ValidationError) else "warning"
            getattr(self._logger, level)(
                "Operation failed",
                extra={
                    "service": self.__class__.__name__,
                    "operation": operation,
                    "code": e.code,
                    "error": e.message,
                },
            )
            return OperationResult.fail(e, operation=operation)
        return OperationResult.ok(data, operation=operation)

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
        message: str = "Required fields missing",
    ) -> None:
        """
        Validate that required fields are present and not blank.

        Raises:
            ValidationError: If any required field is missing or empty after trimming
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                message,
                details={"missing_fields": missing},
            )

    def _validate_string_length(
        self,
        value: str,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None,
        message: str | None = None,
    ) -> None:
        """
        Validate string length constraints.

        Raises:
            ValidationError: If string length is out of bounds
        """
        if min_length is not None and len(value) < min_length:
            raise ValidationError(
                message or f"{field_name} too short",
                details={field_name: f"Minimum length is {min_length}"},
            )
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                message or f"{field_name} too long",
                details={field_name: f"Maximum length is {max_length}"},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """Log a service operation with context."""
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """Log debug information."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
