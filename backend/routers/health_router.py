"""Health check endpoints for uptime monitors and deploy verification."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response

from helpers.rate_limiter import limiter
from models.config import settings
from models.locale import SUPPORTED_LOCALES
from services.email_service import EmailService, get_email_provider
from services.rate_limit_service import RateLimitService, get_rate_limit_config
from services.translation_service import missing_keys

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.api_route("/health", methods=["GET", "HEAD"])
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def health_check(request: Request, response: Response) -> dict:
    """Liveness plus the state of the services the contact form depends on."""
    response.headers.update(NO_CACHE_HEADERS)

    provider = get_email_provider()
    config = get_rate_limit_config()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {
            "email_service": {
                "provider": provider.name,
                "configured": EmailService.is_configured(provider),
            },
            "rate_limiting": {
                "window_ms": config.window_ms,
                "max_requests": config.max_requests,
                "active_identifiers": RateLimitService.active_identifiers(),
            },
            "translations": {
                "locales": list(SUPPORTED_LOCALES),
                "missing_keys": {
                    locale: len(missing_keys(locale)) for locale in SUPPORTED_LOCALES
                },
            },
        },
    }


@router.get("/email-health")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def email_health(request: Request, response: Response) -> dict:
    """Email configuration summary. Reports presence and lengths, never values."""
    response.headers.update(NO_CACHE_HEADERS)
    provider = get_email_provider()

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": {
            "provider": provider.name,
            "provider_configured": provider.is_configured(),
            "has_resend_api_key": bool(settings.RESEND_API_KEY),
            "resend_api_key_length": len(settings.RESEND_API_KEY),
            "has_smtp_host": bool(settings.SMTP_HOST),
            "contact_email_set": bool(settings.CONTACT_EMAIL),
            "from_email_set": bool(settings.RESEND_FROM_EMAIL),
            "environment": settings.ENVIRONMENT,
        },
    }
