"""
QuickNote - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the error scenarios of the service.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch these and
       return a response with the matching HTTP status code.
Who:   Raised by the normalizer, NoteService, storage backends and routes.

Exception Hierarchy:
    QuickNoteError (base)            → 500 Internal Server Error
    ├── ValidationError              → 400 Bad Request (bad id, malformed body)
    ├── NotFoundError                → 404 Not Found (terminal client, empty note)
    ├── MethodNotAllowedError        → 405 Method Not Allowed
    └── StorageError                 → 500 Internal Server Error

A missing note is NOT an error anywhere in this hierarchy: storage backends
return empty content for unknown ids. NotFoundError only exists for the
plain-text reply given to terminal clients.
"""

from typing import Any, Dict, Optional


class QuickNoteError(Exception):
    """
    Base exception for all QuickNote application errors.

    Attributes:
        message:      User-facing error description (safe to return in a response)
        context:      Additional debug info (logged, NEVER returned to the client)
        status_code:  HTTP status the global handler responds with
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuickNoteError):
    """
    Raised when client input fails validation.

    When:    Note id is not strictly alphanumeric (after trimming and
             defaulting), or a JSON body cannot be decoded.
    HTTP:    400 Bad Request

    No storage access happens once this has been raised for a request.
    """

    status_code = 400

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


class NotFoundError(QuickNoteError):
    """
    Raised when a terminal client asks for a note that has no content.

    HTTP:    404 Not Found

    Browsers and JSON callers never see this: for them an unknown id is an
    empty note (see Storage.read).
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class MethodNotAllowedError(QuickNoteError):
    """Raised for HTTP methods a path does not serve. HTTP 405."""

    status_code = 405

    def __init__(
        self,
        method: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if method:
            ctx["method"] = method
        super().__init__(message="Method not allowed", context=ctx)


class StorageError(QuickNoteError):
    """
    Raised when a storage backend operation fails.

    What:    A read, write or delete against the disk or S3 backend failed.
    When:    Permission denied, disk full, network failure, service fault.
             Never for a missing key.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Backend error
        text (OS errors, S3 error codes, file paths, bucket names) goes into
        `context` and is logged server-side only.
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: Optional[str] = None,
        note_id: Optional[str] = None,
        backend: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        if note_id:
            ctx["note_id"] = note_id
        if backend:
            ctx["backend"] = backend
        super().__init__(message=message, context=ctx)
        self.operation = operation
        self.note_id = note_id
        self.backend = backend
