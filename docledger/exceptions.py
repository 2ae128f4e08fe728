"""Custom exception hierarchy for docledger."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Not-found errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    PENDING_CHANGE_NOT_FOUND = "PENDING_CHANGE_NOT_FOUND"
    BRANCH_REQUEST_NOT_FOUND = "BRANCH_REQUEST_NOT_FOUND"
    MERGE_NOT_FOUND = "MERGE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Concurrency / state-machine errors
    CONFLICT = "CONFLICT"
    ALREADY_RESOLVED = "ALREADY_RESOLVED"

    # Infrastructure errors
    DATABASE_ERROR = "DATABASE_ERROR"


class LedgerException(Exception):
    """
    Base exception for all docledger errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class NotFoundError(LedgerException):
    """Base for missing documents, branches, versions, changes and requests."""

    resource = "Resource"
    error_code = ErrorCode.DOCUMENT_NOT_FOUND
    id_field = "id"

    def __init__(self, resource_id: str):
        super().__init__(
            f"{self.resource} not found: {resource_id}",
            type(self).error_code,
            status_code=404,
            details={self.id_field: resource_id}
        )


class DocumentNotFoundError(NotFoundError):
    """Document not found in database."""
    resource = "Document"
    error_code = ErrorCode.DOCUMENT_NOT_FOUND
    id_field = "doc_id"


class BranchNotFoundError(NotFoundError):
    """Branch not found in database."""
    resource = "Branch"
    error_code = ErrorCode.BRANCH_NOT_FOUND
    id_field = "branch_id"


class VersionNotFoundError(NotFoundError):
    """Version not found in database."""
    resource = "Version"
    error_code = ErrorCode.VERSION_NOT_FOUND
    id_field = "version_id"


class PendingChangeNotFoundError(NotFoundError):
    resource = "Pending change"
    error_code = ErrorCode.PENDING_CHANGE_NOT_FOUND
    id_field = "change_id"


class BranchRequestNotFoundError(NotFoundError):
    resource = "Branch request"
    error_code = ErrorCode.BRANCH_REQUEST_NOT_FOUND
    id_field = "request_id"


class MergeNotFoundError(NotFoundError):
    resource = "Merge"
    error_code = ErrorCode.MERGE_NOT_FOUND
    id_field = "merge_id"


class ValidationError(LedgerException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(LedgerException):
    """Request lacks a caller identity."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(LedgerException):
    """Authenticated caller lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class ConflictError(LedgerException):
    """Operation conflicts with the current state or a concurrent writer."""

    def __init__(self, resource_id: str, message: str = "Resource was modified concurrently"):
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details={"resource_id": resource_id}
        )


class AlreadyResolvedError(ConflictError):
    """A pending change or branch request has already left the pending state."""

    def __init__(self, resource_id: str, status: str):
        super().__init__(resource_id, f"Already resolved with status '{status}'")
        self.error_code = ErrorCode.ALREADY_RESOLVED
        self.details["status"] = status


class DatabaseError(LedgerException):
    """Storage-layer failure, kept apart from domain-rule violations."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=503,
            details=details
        )
