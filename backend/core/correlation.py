"""
Correlation ID generation and context management.

Every request gets a short ID that is echoed in the ``X-Correlation-ID``
response header, attached to every log line and to every JSON error body,
so a visitor can quote it when reporting a failed contact submission.
"""

import re
import uuid
from contextvars import ContextVar

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Incoming IDs are accepted only if they look like something we would generate
_VALID_INCOMING_ID = re.compile(r"^[A-Za-z0-9-]{1,64}$")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string (e.g., "abc123de").
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """
    Get current request's correlation ID.

    Returns:
        The correlation ID for the current request context, or empty string if not set.
    """
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for current request context."""
    correlation_id_var.set(correlation_id)


def resolve_incoming_correlation_id(header_value: str | None) -> str:
    """
    Reuse a client-supplied correlation ID when it is well formed.

    Anything missing, oversized or containing characters outside
    ``[A-Za-z0-9-]`` is replaced by a freshly generated ID so that header
    values cannot inject content into log lines.
    """
    if header_value and _VALID_INCOMING_ID.match(header_value):
        return header_value
    return generate_correlation_id()
