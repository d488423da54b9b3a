"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        body: Dict[str, Any] = {
            "message": self.message,
            "code": self.error_code,
        }
        if self.details:
            body["details"] = self.details
        return body


# Authentication & Authorization Errors
class AuthenticationError(DomainError):
    """Token missing, invalid, or expired"""
    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


class AuthorizationError(DomainError):
    """User lacks permission for action"""
    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


class PermissionDeniedError(AuthorizationError):
    """Specific permission denied"""
    error_code = "PERMISSION_DENIED"


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class InvalidTransitionError(ValidationError):
    """Requested status change is not in the transition table"""
    error_code = "INVALID_TRANSITION"


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class AlertNotFoundError(NotFoundError):
    """Repair alert not found"""
    error_code = "ALERT_NOT_FOUND"


class UserNotFoundError(NotFoundError):
    """User not found"""
    error_code = "USER_NOT_FOUND"


class MessageNotFoundError(NotFoundError):
    """Chat message not found"""
    error_code = "MESSAGE_NOT_FOUND"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict"""
    error_code = "CONFLICT"
    http_status = 409


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"


class ConcurrencyError(ConflictError):
    """Conditional update lost against a concurrent writer"""
    error_code = "CONCURRENCY_CONFLICT"


# External Service Errors
class EmailSendError(DomainError):
    """Email sending failed"""
    error_code = "EMAIL_SEND_ERROR"
    http_status = 500


# Media Errors
class MediaError(DomainError):
    """Uploaded media related error"""
    error_code = "MEDIA_ERROR"


class AttachmentTooLargeError(MediaError):
    """Upload exceeds max size"""
    error_code = "ATTACHMENT_TOO_LARGE"
    http_status = 413


class InvalidMimeTypeError(MediaError):
    """File type not allowed"""
    error_code = "INVALID_MIME_TYPE"
    http_status = 400
