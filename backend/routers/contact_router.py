"""Contact form router for handling visitor inquiries."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from helpers.rate_limiter import rate_limit_middleware
from models.schemas import ContactFormResponse
from services.contact_service import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=ContactFormResponse)
async def submit_contact_form(request: Request) -> JSONResponse:
    """Submit a contact form.

    The body is parsed by hand so malformed input gets the fixed
    ``Invalid request format`` error rather than a 422.
    No authentication required - public endpoint.
    Rate limited per client (IP and user agent) in a fixed window.

    Raises:
        RateLimitExceededException: 429 when the window quota is used up
        ContactValidationException: 400 for malformed submissions
        EmailConfigurationException: 503 when email is not configured
        EmailDeliveryException: 500 when the notification cannot be sent
    """

    async def handle() -> JSONResponse:
        body = await request.body()
        result = await ContactService.process_submission(body)
        return JSONResponse(content=result.model_dump())

    return await rate_limit_middleware(request, handle)
