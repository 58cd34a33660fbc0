"""
Sentry SDK configuration with privacy-preserving settings.

Implements:
- Environment-based initialization (disabled without SENTRY_DSN)
- Scrubbing of contact form PII before events leave the process
- Health-check transactions dropped from performance sampling
- Loguru integration
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.types import Event, Hint

# Contact form fields that must never reach Sentry
SCRUBBED_FIELDS = ("name", "email", "message", "reason", "honeypot", "recaptchaToken")

HEALTH_PATHS = ("/api/health", "/api/email-health")


def _scrub_payload(data: Any) -> Any:
    """Replace contact form values in a request payload with a marker."""
    if isinstance(data, dict):
        return {
            key: "[Filtered]" if key in SCRUBBED_FIELDS else value
            for key, value in data.items()
        }
    return data


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII before sending to Sentry.

    - Remove user email/username, anonymize IP
    - Drop cookies and filter the Authorization header
    - Filter contact form fields from captured request bodies

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        Modified event with PII removed.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict) and "Authorization" in headers:
            headers["Authorization"] = "[Filtered]"
        if "data" in request:
            request["data"] = _scrub_payload(request["data"])

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health-check transactions; they are polled by uptime monitors."""
    transaction_name = event.get("transaction", "")
    for path in HEALTH_PATHS:
        if transaction_name in (path, f"GET {path}", f"HEAD {path}"):
            return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Dynamic sampling based on endpoint.

    Args:
        sampling_context: Context about the request being sampled.

    Returns:
        Sample rate between 0.0 and 1.0.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path in HEALTH_PATHS:
        return 0.0

    # Contact submissions are rare and worth tracing in full
    if path.startswith("/api/contact"):
        return 1.0

    return float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))


def init_sentry() -> bool:
    """
    Initialize Sentry SDK with FastAPI integration.

    Call this BEFORE creating the FastAPI app instance.

    Returns:
        True if Sentry was initialized, False when SENTRY_DSN is not set.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        # Privacy: Do NOT send PII automatically
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
    return True
