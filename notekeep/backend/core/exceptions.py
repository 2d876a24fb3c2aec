"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when an operation targets a record that is not held locally."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when local input validation fails. Never reaches the store."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when there is no usable session."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict", code: str = "RES_CONFLICT") -> None:
        super().__init__(message, code=code)


class StaleResponseError(ConflictError):
    """Raised when a response arrives after a newer request for the same record."""

    def __init__(self, message: str = "Response superseded by a newer request") -> None:
        super().__init__(message, code="RES_STALE")


class RemoteError(ApplicationError):
    """Raised when the remote store or the network rejects an operation."""

    def __init__(
        self,
        message: str = "Remote store error",
        status_code: int | None = None,
        code: str = "SYS_REMOTE_ERROR",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, code=code)


class RemoteTimeoutError(RemoteError):
    """Raised when a remote call exceeds its time budget."""

    def __init__(self, message: str = "Remote store timed out") -> None:
        super().__init__(message, code="SYS_REMOTE_TIMEOUT")
