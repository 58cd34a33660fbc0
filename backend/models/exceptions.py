"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to JSON error
responses by centralized exception handlers in main.py, so services stay
HTTP-agnostic.

Every exception carries a correlation ID for Sentry and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message, safe to return to the caller.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
        headers: Extra response headers the exception handler must emit.
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        self.headers: dict[str, str] = {}
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


# ============================================================================
# Localization Exceptions
# ============================================================================


class LocaleNotFoundException(NotFoundException):
    """Raised when a path names a locale the site is not published in."""

    def __init__(self, locale: str):
        super().__init__(f"Unsupported locale: {locale}")
        self.locale = locale


class PageNotFoundException(NotFoundException):
    """Raised when a localized slug does not map to any page."""

    def __init__(self, slug: str):
        super().__init__("Page not found")
        self.slug = slug


# ============================================================================
# Contact Form Exceptions
# ============================================================================


class ContactValidationException(ValidationException):
    """Raised when a contact submission fails a validation step.

    The message is one of the fixed strings returned verbatim to the caller.
    """

    pass


class InvalidRequestFormatException(ContactValidationException):
    """Raised when the request body is not a JSON object."""

    def __init__(self, message: str = "Invalid request format"):
        super().__init__(message)


class MissingFieldsException(ContactValidationException):
    """Raised when a required contact field is absent or empty."""

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message)


class FieldLengthExceededException(ContactValidationException):
    """Raised when a contact field is longer than its cap."""

    def __init__(self, message: str = "Field length exceeded"):
        super().__init__(message)


class InvalidEmailException(ContactValidationException):
    """Raised when the submitted email address has an invalid shape."""

    def __init__(self, message: str = "Invalid email address"):
        super().__init__(message)


# ============================================================================
# Rate Limiting Exceptions
# ============================================================================


class RateLimitExceededException(DomainException):
    """Raised when a client has used up its fixed-window quota."""

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: int | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after
        self.headers = headers or {}


# ============================================================================
# Email Exceptions
# ============================================================================


class EmailException(DomainException):
    """Base exception for email dispatch errors."""

    pass


class EmailConfigurationException(EmailException):
    """Raised when the configured email provider is missing credentials."""

    def __init__(
        self,
        message: str = "Email service is not properly configured. Please try again later.",
    ):
        super().__init__(message)


class EmailDeliveryException(EmailException):
    """Raised when email fails to send."""

    def __init__(self, message: str = "Failed to send email. Please try again later."):
        super().__init__(message)
