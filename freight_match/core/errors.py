"""
Core Errors Module

Standardized error classes for the freight matching service.
Every error the core raises derives from AppError and carries the HTTP
status the API layer renders it with.

Usage:
    from freight_match.core.errors import InvalidLocationFormat

    raise InvalidLocationFormat("Chicago")
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


# ==================== Base Error Class ====================

class AppError(Exception):
    """
    Base application error class.

    Attributes:
        code: Error code (e.g., "validation_error", "not_found")
        message: Human-readable error message
        details: Optional additional error context
        status_code: HTTP status code for this error type
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._default_code()
        self.details = details or {}
        self.status_code = status_code

    def _default_code(self) -> str:
        """
        Generate default error code from class name.

        Returns:
            snake_case version of class name
        """
        name = self.__class__.__name__
        if name.endswith("Error"):
            name = name[:-5]

        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())

        return "".join(result)

    def to_dict(self, trace_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON responses.

        Args:
            trace_id: Optional request trace ID

        Returns:
            Error dict with code, message, details, trace_id
        """
        return error_payload(self.code, self.message, self.details, trace_id)


# ==================== HTTP Category Classes ====================

class ValidationError(AppError):
    """Validation error (400 Bad Request)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        code: str = "validation_error"
    ):
        super().__init__(message=message, code=code, details=details, status_code=400)


class NotFoundError(AppError):
    """Not found error (404 Not Found)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
        code: str = "not_found"
    ):
        super().__init__(message=message, code=code, details=details, status_code=404)


class ConflictError(AppError):
    """Conflict error (409 Conflict) for state-changing operations that lost a race."""

    def __init__(
        self,
        message: str = "Conflicting state",
        details: Optional[Dict[str, Any]] = None,
        code: str = "conflict"
    ):
        super().__init__(message=message, code=code, details=details, status_code=409)


class InternalError(AppError):
    """Internal server error (500 Internal Server Error)."""

    def __init__(
        self,
        message: str = "Internal server error",
        details: Optional[Dict[str, Any]] = None,
        code: str = "internal_error"
    ):
        super().__init__(message=message, code=code, details=details, status_code=500)


# ==================== Domain Errors ====================

class InvalidIdentifierFormat(ValidationError):
    """Carrier MC number is not 1-7 decimal digits after normalization."""

    def __init__(self, raw_value: Any):
        super().__init__(
            message=f"Invalid MC number format: {raw_value!r}. Expected 1-7 digits",
            details={"field": "mc_number", "value": str(raw_value)},
            code="invalid_identifier_format"
        )


class InvalidLocationFormat(ValidationError):
    """Location text does not parse as "City, State"."""

    def __init__(self, location: Any):
        super().__init__(
            message=f'Invalid location format: {location!r}. Expected "City, State"',
            details={"field": "location", "value": str(location)},
            code="invalid_location_format"
        )


class CarrierNotFound(NotFoundError):
    """Identity lookup returned no carrier for the MC number."""

    def __init__(self, mc_number: str):
        super().__init__(
            message=f"No carrier found for MC number: {mc_number}",
            details={"mc_number": mc_number},
            code="carrier_not_found"
        )


class LoadNotFound(NotFoundError):

    def __init__(self, load_id: int):
        super().__init__(
            message=f"Load {load_id} not found",
            details={"load_id": load_id},
            code="load_not_found"
        )


class AssignmentNotFound(NotFoundError):

    def __init__(self, assignment_id: int):
        super().__init__(
            message=f"Assignment {assignment_id} not found",
            details={"assignment_id": assignment_id},
            code="assignment_not_found"
        )


class NoEligibleLoads(NotFoundError):
    """No available load survived filtering and scoring for this carrier."""

    def __init__(self, mc_number: str, message: str = "No suitable loads found for this carrier"):
        super().__init__(
            message=message,
            details={"mc_number": mc_number},
            code="no_eligible_loads"
        )


class DuplicateActiveAssignment(ConflictError):
    """Load already holds a pending or confirmed assignment."""

    def __init__(self, load_id: int, assignment_id: Optional[int] = None):
        details: Dict[str, Any] = {"load_id": load_id}
        if assignment_id is not None:
            details["active_assignment_id"] = assignment_id
        super().__init__(
            message=f"Load {load_id} already has an active assignment",
            details=details,
            code="duplicate_active_assignment"
        )


class InvalidAssignmentTransition(ConflictError):

    def __init__(self, assignment_id: int, current: str, target: str):
        super().__init__(
            message=f"Assignment {assignment_id} cannot move from {current} to {target}",
            details={"assignment_id": assignment_id, "status": current, "target": target},
            code="invalid_assignment_transition"
        )


class VerificationUpstreamFailure(InternalError):
    """
    A carrier lookup failed (network error, timeout, or 5xx).

    Aborts the whole verification attempt; nothing is cached.
    """

    def __init__(
        self,
        lookup: str,
        reason: str,
        upstream_status: Optional[int] = None
    ):
        details: Dict[str, Any] = {"lookup": lookup, "reason": reason}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(
            message=f"Carrier verification failed during {lookup} lookup",
            details=details,
            code="verification_upstream_failure"
        )
        self.lookup = lookup
        self.reason = reason
        self.upstream_status = upstream_status


class CorruptRecordStore(InternalError):
    """The record store file exists but does not hold a valid document."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Record store is unreadable: {reason}",
            details={"reason": reason},
            code="corrupt_record_store"
        )


# ==================== Helper Functions ====================

def error_payload(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    trace_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a standardized error payload dict.

    Args:
        code: Error code
        message: Error message
        details: Optional error details
        trace_id: Optional request trace ID

    Returns:
        Error dict suitable for JSON response

    Example:
        >>> payload = error_payload("bad_request", "Invalid input", trace_id="abc123")
        >>> payload["code"]
        'bad_request'
    """
    result: Dict[str, Any] = {
        "code": code,
        "message": message,
    }

    if details:
        result["details"] = details

    if trace_id:
        result["trace_id"] = trace_id

    return result
