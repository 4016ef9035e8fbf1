"""
VoterReg Backend — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for intake and review errors.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the store, bucket storage and services; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    VoterRegError (base)
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── NotFoundError              → 404 Not Found (applicant, application, bucket)
    ├── AccessDeniedError          → 403 Forbidden (no officer / bucket permission)
    ├── DuplicateSubmissionError   → 409 Conflict (pending/verified register exists)
    ├── AlreadyApprovedError       → 409 Conflict (approved register exists)
    ├── StorageWriteError          → 500 Internal Server Error
    │   ├── DuplicateError         → 409 Conflict (upload path already taken)
    │   ├── UnknownUploadError     → 500
    │   └── UrlResolutionError     → 500 (stored, but no public URL)
    └── DatabaseError              → 500 Internal Server Error
        ├── ConflictError          → unique/foreign-key/check violation
        └── PersistenceError       → one named sub-record could not be written

Messages are written for the person filling in the form; `context` carries
the debugging detail and is logged, never returned.
"""

from typing import Any, Dict, Optional


class VoterRegError(Exception):
    """
    Base exception for all VoterReg application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(VoterRegError):
    """
    Raised when client input fails validation.

    When:    File size/type, missing disapproval reason, unknown status value.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(VoterRegError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown public application id, no applicant for a non-register
             request, storage bucket missing.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class AccessDeniedError(VoterRegError):
    """
    Raised when the caller may not perform the action.

    When:    No officer record behind the caller identity for a review action,
             or the storage layer refused the write.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateSubmissionError(VoterRegError):
    """
    Raised when a register application is already pending or verified.

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        blocking_status: str = "pending",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"You already have a {blocking_status} registration application. "
            f"Please wait for it to be processed."
        )
        ctx = context or {}
        ctx["blocking_status"] = blocking_status
        super().__init__(message=message, context=ctx)
        self.blocking_status = blocking_status


class AlreadyApprovedError(VoterRegError):
    """
    Raised when the applicant already holds an approved registration.

    HTTP:    409 Conflict
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=(
                "You already have an approved registration. "
                "Please use transfer, correction, or other application types."
            ),
            context=context,
        )


class StorageWriteError(VoterRegError):
    """
    Base for failures while writing an upload to a bucket.

    HTTP:    500 Internal Server Error (subclasses may narrow this)
    """

    def __init__(
        self,
        message: str = "File upload failed",
        bucket: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if bucket:
            ctx["bucket"] = bucket
        super().__init__(message=message, context=ctx)
        self.bucket = bucket


class DuplicateError(StorageWriteError):
    """Raised when the destination path already holds a file. HTTP 409."""

    def __init__(self, bucket: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="A file with this name already exists. Please try again or rename your file.",
            bucket=bucket,
            context=context,
        )


class UnknownUploadError(StorageWriteError):
    """Raised for any storage failure that has no more specific type."""


class UrlResolutionError(StorageWriteError):
    """Raised when the file was stored but no public URL could be produced."""

    def __init__(self, bucket: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Failed to generate public URL for uploaded file in {bucket}",
            bucket=bucket,
            context=context,
        )


class DatabaseError(VoterRegError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the SQL error
    detail stays in `context` and the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(DatabaseError):
    """Raised when a write violates a unique, foreign-key, not-null or check constraint."""


class PersistenceError(DatabaseError):
    """
    Raised when one sub-record of a multi-table write fails.

    Attributes:
        record: Name of the sub-record that failed (e.g. "declared_address").
    """

    def __init__(
        self,
        record: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["record"] = record
        super().__init__(
            message=message or f"Failed to save {record.replace('_', ' ')} details.",
            context=ctx,
        )
        self.record = record
