"""
Tintura SST - Custom Exception Hierarchy

Provides structured, typed exceptions with error codes for consistent
error handling across the application.

Usage:
    from tintura.exceptions import NotFoundError, ValidationError

    # In a service
    raise NotFoundError("Order", order_id)

    # With custom message
    raise ValidationError("Order quantity must be greater than zero", field="size_breakdown")
"""
from typing import Any, Dict, Optional


class TinturaException(Exception):
    """
    Base exception for all Tintura SST errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "NOT_FOUND", "VALIDATION_ERROR")
        status_code: HTTP status code to return
        details: Additional context for debugging
    """

    error_code: str = "TINTURA_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ===================
# 400 Bad Request Errors
# ===================


class ValidationError(TinturaException):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details)


class InvalidStateError(TinturaException):
    """Raised when an operation is invalid for the current state."""

    error_code = "INVALID_STATE"
    status_code = 400

    def __init__(
        self,
        message: str = "Operation not allowed in current state",
        *,
        current_state: Optional[str] = None,
        allowed_states: Optional[list] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if current_state:
            details["current_state"] = current_state
        if allowed_states:
            details["allowed_states"] = allowed_states
        super().__init__(message, details=details)


# ===================
# 404 Not Found Errors
# ===================


class NotFoundError(TinturaException):
    """Raised when a resource is not found."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details=details)


# ===================
# 409 Conflict Errors
# ===================


class ConflictError(TinturaException):
    """Raised when there's a resource conflict."""

    error_code = "CONFLICT"
    status_code = 409

    def __init__(
        self,
        message: str = "Resource conflict",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class DuplicateError(ConflictError):
    """Raised when attempting to create a duplicate resource."""

    error_code = "DUPLICATE_ERROR"

    def __init__(
        self,
        resource: str = "Resource",
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        message = f"{resource} already exists"
        if field and value:
            message = f"{resource} with {field}='{value}' already exists"
        super().__init__(message, details=details)


class ConcurrencyError(ConflictError):
    """Raised when concurrent modification is detected."""

    error_code = "CONCURRENCY_ERROR"

    def __init__(
        self,
        message: str = "Resource was modified by another user",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# ===================
# 422 Unprocessable Entity Errors
# ===================


class BusinessRuleError(TinturaException):
    """Raised when a business rule is violated."""

    error_code = "BUSINESS_RULE_ERROR"
    status_code = 422

    def __init__(
        self,
        message: str = "Business rule violation",
        *,
        rule: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if rule:
            details["rule"] = rule
        super().__init__(message, details=details)


# ===================
# 503 Service Unavailable Errors
# ===================


class PersistenceError(TinturaException):
    """
    Raised when a store call fails or times out.

    The caller's transaction has already been rolled back, so retrying the
    triggering action is safe.
    """

    error_code = "PERSISTENCE_ERROR"
    status_code = 503

    def __init__(
        self,
        message: str = "Storage operation failed",
        *,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["retryable"] = True
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details)


class ServiceUnavailableError(TinturaException):
    """Raised when a service is temporarily unavailable."""

    error_code = "SERVICE_UNAVAILABLE"
    status_code = 503

    def __init__(
        self,
        service: str = "Service",
        message: str = "temporarily unavailable",
        *,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["service"] = service
        if retry_after:
            details["retry_after_seconds"] = retry_after
        super().__init__(f"{service} {message}", details=details)
