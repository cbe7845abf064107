"""
All-Server Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these and
       return `{"message": ...}` with the matching HTTP status code.
Who:   Raised by services and route dependencies; caught by global handlers.

Exception Hierarchy:
    AllServerError (base)
    ├── ValidationError   → 400 Bad Request
    ├── NotFoundError     → 404 Not Found
    ├── FileStorageError  → 500 Internal Server Error
    └── DatabaseError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class AllServerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Something went wrong!",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AllServerError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, malformed logo path, wrong upload type,
             oversized upload, or file content that is not SVG.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "请求参数无效",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(AllServerError):
    """
    Raised when a requested row does not exist.

    SQLAlchemy returns None (or rowcount 0) for missing records; services
    convert that into this exception so routes stay free of status logic.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "资源不存在",
        resource: Optional[str] = None,
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(AllServerError):
    """
    Raised when file system operations fail during an upload.

    HTTP:    500 Internal Server Error
    The client only sees the generic message; OS error details go to the log.
    """

    def __init__(
        self,
        message: str = "上传SVG文件失败",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(AllServerError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:    500 Internal Server Error
    The message returned to the client is always the operation's generic
    message; SQL text and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "数据库操作失败",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
