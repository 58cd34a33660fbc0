# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    generate_correlation_id,
    get_correlation_id,
    resolve_incoming_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.locale_middleware import LocaleRedirectMiddleware
from helpers.rate_limiter import limiter
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    ContactValidationException,
    DomainException,
    EmailConfigurationException,
    EmailDeliveryException,
    NotFoundException,
    RateLimitExceededException,
)
from routers import contact_router, health_router, pages_router
from services.translation_service import preload_translations

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# Initialize Sentry BEFORE app creation
init_sentry()

# Configure logging with Loguru
configure_logging(
    environment=settings.ENVIRONMENT,
    level=settings.LOG_LEVEL,
    log_format=settings.LOG_FORMAT,
    log_file=settings.LOG_FILE,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Load every translation dictionary so requests never touch the disk.
    """
    counts = preload_translations()
    logger.info(
        f"{settings.APP_NAME} API starting "
        f"(environment={settings.ENVIRONMENT}, locales={list(counts)})"
    )
    yield
    logger.info(f"{settings.APP_NAME} API stopped")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        # Reuse the frontend's ID when it is well formed
        correlation_id = resolve_incoming_correlation_id(
            request.headers.get("X-Correlation-ID")
        )
        set_correlation_id(correlation_id)

        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        logger.debug(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response


# Middleware runs in reverse order of registration: CORS is outermost and
# the locale redirect sits closest to the routes.
app.add_middleware(LocaleRedirectMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# In development, allow all origins for mobile/network testing
cors_origins = ["*"] if settings.ENVIRONMENT == "development" else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=settings.ENVIRONMENT != "development",
    allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[
        "X-Correlation-ID",
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
        "Retry-After",
    ],
)


def _error_response(
    status_code: int, exc: DomainException, **extra: object
) -> JSONResponse:
    """Render a domain exception as ``{"error", "correlation_id"}`` JSON."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.message,
            "correlation_id": exc.correlation_id,
            **extra,
        },
        headers=exc.headers or None,
    )


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # Caller-controlled text goes in as an argument: loguru runs .format()
    # on the message whenever arguments are passed
    logger.bind(
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    ).exception("Unhandled exception: {!r}", exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": UNEXPECTED_ERROR_MESSAGE,
            "correlation_id": correlation_id,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework errors (unknown route, wrong method) in the same error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "correlation_id": get_correlation_id() or generate_correlation_id(),
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(ContactValidationException)
async def contact_validation_exception_handler(
    request: Request, exc: ContactValidationException
) -> JSONResponse:
    """Handle rejected contact submissions."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    logger.bind(
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    ).info("Contact submission rejected: {}", exc.message)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    """Handle unknown locales and pages."""
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.bind(
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    ).debug("Not found: {}", exc.message)
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceededException
) -> JSONResponse:
    """Handle contact-form rate limit exceeded exception."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    logger.bind(path=str(request.url.path)).warning(
        "Rate limit exceeded: {}", exc.message
    )
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS, exc, retryAfter=exc.retry_after
    )


@app.exception_handler(EmailConfigurationException)
async def email_configuration_exception_handler(
    request: Request, exc: EmailConfigurationException
) -> JSONResponse:
    """Handle missing email credentials. Configuration issues are critical."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.capture_exception(exc)
    logger.bind(path=str(request.url.path)).error(
        "Email configuration error: {}", exc.message
    )
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


@app.exception_handler(EmailDeliveryException)
async def email_delivery_exception_handler(
    request: Request, exc: EmailDeliveryException
) -> JSONResponse:
    """Handle email dispatch failures."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.capture_exception(exc)
    logger.bind(path=str(request.url.path)).error(
        "Email delivery failed: {}", exc.message
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Fallback for domain exceptions without a dedicated handler."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.bind(
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    ).warning("Domain exception: {}", exc.message)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


# API routers first: the page routes below match any two-segment path
app.include_router(contact_router.router, prefix="/api")
app.include_router(health_router.router, prefix="/api")
app.include_router(pages_router.translations_router, prefix="/api")
app.include_router(pages_router.router)
