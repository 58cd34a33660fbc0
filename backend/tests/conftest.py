"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["CONTACT_EMAIL"] = "owner@example.com"
os.environ["EMAIL_MAX_ATTEMPTS"] = "1"
os.environ["EMAIL_RETRY_BASE_DELAY"] = "0"
os.environ["RECAPTCHA_SECRET_KEY"] = ""
os.environ["RATE_LIMIT_WINDOW_MS"] = "900000"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "5"
os.environ.pop("SENTRY_DSN", None)

from helpers.rate_limiter import limiter  # noqa: E402
from services.email_service import EmailProvider  # noqa: E402
from services.rate_limit_service import (  # noqa: E402
    InMemoryRateLimitStore,
    RateLimitService,
)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty contact-form and slowapi counters."""
    RateLimitService.reset_limits()
    limiter.reset()
    yield
    RateLimitService.reset_limits()


@pytest.fixture(scope="function")
def client():
    """Create a test client running the app lifespan."""
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def lenient_client():
    """Test client that renders unhandled errors as 500s instead of raising."""
    from main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def rate_limit_store() -> InMemoryRateLimitStore:
    """A private store so tests never share counters."""
    return InMemoryRateLimitStore()


@pytest.fixture
def fake_provider() -> MagicMock:
    """Email provider double that accepts every message."""
    provider = MagicMock(spec=EmailProvider)
    provider.name = "fake"
    provider.is_configured.return_value = True
    provider.send.return_value = True
    return provider


@pytest.fixture
def mock_email_provider(fake_provider):
    """Route all contact emails to ``fake_provider``."""
    with patch(
        "services.email_service.get_email_provider", return_value=fake_provider
    ):
        yield fake_provider


@pytest.fixture
def contact_payload() -> dict:
    """A submission that passes every validation and spam check."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "reason": "Consulting",
        "message": "Hello, I would like to talk about an analytical engine project.",
    }
