"""Contact form service for handling visitor inquiries.

A submission goes through a fixed sequence and stops at the first failure:
parse, required fields, length caps, email shape, spam heuristics, then
email dispatch. Spam is answered with the same kind of 200 a real
submission gets so automated senders learn nothing.
"""

import json
import re
from typing import Any, Optional

from loguru import logger
from starlette.concurrency import run_in_threadpool

from helpers.ip_utils import hash_email_for_audit
from models.exceptions import (
    FieldLengthExceededException,
    InvalidEmailException,
    InvalidRequestFormatException,
    MissingFieldsException,
)
from models.schemas import ContactFormResponse, ContactSubmission
from services.email_service import EmailService
from services.spam_service import SpamService

SUCCESS_MESSAGE = "Thank you for your message! I'll get back to you soon."
SPAM_SUCCESS_MESSAGE = "Contact form submitted successfully"


class ContactService:
    """Service for handling contact form submissions."""

    REQUIRED_FIELDS = ("name", "email", "reason", "message")

    MAX_LENGTHS = {
        "name": 100,
        "email": 100,
        "reason": 200,
        "message": 5000,
    }

    EMAIL_PATTERN = re.compile(
        r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE
    )

    @staticmethod
    def parse_body(raw_body: bytes) -> dict[str, Any]:
        """Decode the request body, which must be a JSON object.

        Raises:
            InvalidRequestFormatException: Not JSON, or JSON but not an object
        """
        try:
            data = json.loads(raw_body)
        except (ValueError, UnicodeDecodeError):
            raise InvalidRequestFormatException()

        if not isinstance(data, dict):
            raise InvalidRequestFormatException()
        return data

    @staticmethod
    def _optional_str(value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @staticmethod
    def _optional_number(value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    @classmethod
    def validate_submission(cls, data: dict[str, Any]) -> ContactSubmission:
        """Apply field checks in order and build the submission.

        Raises:
            MissingFieldsException: A required field is absent, empty or not a string
            FieldLengthExceededException: A field is longer than its cap
            InvalidEmailException: The email address is malformed
        """
        for field in cls.REQUIRED_FIELDS:
            value = data.get(field)
            if not isinstance(value, str) or not value:
                raise MissingFieldsException()

        for field, max_length in cls.MAX_LENGTHS.items():
            if len(data[field]) > max_length:
                raise FieldLengthExceededException()

        if not cls.EMAIL_PATTERN.fullmatch(data["email"]):
            raise InvalidEmailException()

        return ContactSubmission(
            name=data["name"],
            email=data["email"],
            reason=data["reason"],
            message=data["message"],
            honeypot=cls._optional_str(data.get("honeypot")),
            recaptcha_token=cls._optional_str(data.get("recaptchaToken")),
            page_load_time=cls._optional_number(data.get("pageLoadTime")),
        )

    @classmethod
    async def process_submission(cls, raw_body: bytes) -> ContactFormResponse:
        """Run a raw contact request body through the whole pipeline.

        Args:
            raw_body: Undecoded request body

        Returns:
            Response message for the visitor (identical shape for spam)

        Raises:
            ContactValidationException: 400-class input problems
            EmailConfigurationException: Email provider not configured
            EmailDeliveryException: Admin notification could not be sent
        """
        data = cls.parse_body(raw_body)
        submission = cls.validate_submission(data)
        sender = hash_email_for_audit(submission.email)

        verdict = await SpamService.perform_spam_checks(submission)
        if verdict.is_spam:
            logger.warning(f"Spam detected: reason={verdict.reason} from={sender}")
            return ContactFormResponse(message=SPAM_SUCCESS_MESSAGE)

        # Providers are blocking (smtplib, sync httpx)
        await run_in_threadpool(EmailService.send_contact_emails, submission)

        logger.info(
            f"Contact form processed: from={sender} "
            f"reason_length={len(submission.reason)} "
            f"message_length={len(submission.message)}"
        )
        return ContactFormResponse(message=SUCCESS_MESSAGE)
