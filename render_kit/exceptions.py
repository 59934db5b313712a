"""Custom exceptions for render-kit with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    RENDER_ERROR = "RENDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Template resolution errors
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    LAYOUT_NOT_FOUND = "LAYOUT_NOT_FOUND"

    # Content negotiation errors
    NOT_ACCEPTABLE = "NOT_ACCEPTABLE"

    # Content buffer errors
    CONTENT_ARGUMENT_ERROR = "CONTENT_ARGUMENT_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"


class RenderException(Exception):
    """Base exception for rendering errors with HTTP status code support.

    All custom exceptions should inherit from this class so the transport
    layer can turn them into consistent error responses.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RENDER_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize render exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TemplateNotFound(RenderException):
    """No template or layout could be resolved for a required lookup."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TEMPLATE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=500, details=details)


class NotAcceptable(RenderException):
    """The negotiated content type cannot be produced for this object."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.NOT_ACCEPTABLE,
            status_code=406,
            details=details,
        )


class ContentArgumentError(RenderException, ValueError):
    """A content buffer mutation received neither a string nor a block."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.CONTENT_ARGUMENT_ERROR,
            status_code=500,
            details=details,
        )


class ConfigurationException(RenderException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
