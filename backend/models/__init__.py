"""Models package - settings, Pydantic schemas and domain types."""

from .locale import DEFAULT_LOCALE, SUPPORTED_LOCALES, Locale, Page

__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "Locale",
    "Page",
]
