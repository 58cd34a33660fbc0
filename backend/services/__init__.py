"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .contact_service import ContactService
from .email_service import EmailService
from .rate_limit_service import RateLimitService
from .spam_service import SpamService

__all__ = [
    "ContactService",
    "EmailService",
    "RateLimitService",
    "SpamService",
]
