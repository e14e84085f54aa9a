"""
Custom exceptions for the Academic Records application.

Every error raised by the ledger contracts, the content store adapter and the
service layer derives from AcademicRecordsException so the API layer can map
it to an HTTP status in one place.
"""

from typing import Any, Dict, Optional


class AcademicRecordsException(Exception):
    """Base exception class for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(message)


# Invalid input (400)


class ValidationError(AcademicRecordsException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: str = "VALIDATION_ERROR",
    ):
        details = {"field": field} if field else {}
        super().__init__(
            message, status_code=400, details=details, error_code=error_code
        )


class InvalidAddressError(ValidationError):
    """Raised when an account address is not a 20-byte hex identifier."""

    def __init__(self, address: Any, field: Optional[str] = None):
        super().__init__(
            f"Invalid address format: {address!r}",
            field=field,
            error_code="INVALID_ADDRESS",
        )
        self.details["address"] = str(address)


class InvalidRangeError(ValidationError):
    """Raised when pagination bounds are out of range."""

    def __init__(self, message: str = "Invalid pagination range"):
        super().__init__(message, error_code="INVALID_RANGE")


class InvalidFormatError(ValidationError):
    """Raised when a hash or content identifier is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field, error_code="INVALID_FORMAT")


class InvalidSignerError(ValidationError):
    """Raised when a signing key cannot be turned into an account."""

    def __init__(self, message: str = "Invalid signing key"):
        super().__init__(message, field="privateKey", error_code="INVALID_SIGNER")


# Capability (403)


class AuthorizationError(AcademicRecordsException):
    """Raised when the caller does not hold the admin role."""

    def __init__(self, message: str = "Caller is not an admin"):
        super().__init__(message, status_code=403, error_code="UNAUTHORIZED")


# Lookups (404)


class NotFoundError(AcademicRecordsException):
    """Raised when a resource is not found."""

    def __init__(
        self, message: str = "Resource not found", resource_type: Optional[str] = None
    ):
        details = {"resource_type": resource_type} if resource_type else {}
        super().__init__(
            message, status_code=404, details=details, error_code="NOT_FOUND"
        )


class NotRegisteredError(NotFoundError):
    """Raised when a directory mutation targets an unknown subject."""

    def __init__(self, address: str):
        super().__init__(f"Student not registered: {address}", resource_type="student")
        self.error_code = "NOT_REGISTERED"


# Domain conflicts (409)


class ConflictError(AcademicRecordsException):
    """Raised when there's a conflict with the current state."""

    def __init__(self, message: str = "Resource conflict", error_code: str = "CONFLICT"):
        super().__init__(message, status_code=409, error_code=error_code)


class AlreadyRegisteredError(ConflictError):
    def __init__(self, address: str):
        super().__init__(
            f"Student already registered: {address}", error_code="ALREADY_REGISTERED"
        )


class AlreadyInStateError(ConflictError):
    def __init__(self, address: str, active: bool):
        state = "active" if active else "inactive"
        super().__init__(
            f"Student {address} is already {state}", error_code="ALREADY_IN_STATE"
        )


class AlreadyRevokedError(ConflictError):
    def __init__(self, address: str, index: int):
        super().__init__(
            f"Credential {index} of {address} is already revoked",
            error_code="ALREADY_REVOKED",
        )


# Infrastructure


class StoreUnavailableError(AcademicRecordsException):
    """Raised when no content store backend could accept or serve content."""

    def __init__(self, message: str = "Content store unavailable"):
        super().__init__(message, status_code=503, error_code="STORE_UNAVAILABLE")


class LedgerUnavailableError(AcademicRecordsException):
    """Raised when the ledger cannot execute a call."""

    def __init__(self, message: str = "Ledger unavailable"):
        super().__init__(message, status_code=500, error_code="LEDGER_UNAVAILABLE")
