"""
Spam heuristics for contact form submissions.

Every check returns a SpamVerdict and none of them raise: a check that
cannot run (no load time, no reCAPTCHA secret, verification endpoint down)
is skipped rather than failed. One positive signal marks the whole
submission as spam.
"""

import re
import time
from typing import Any, Optional

import httpx
from loguru import logger

from models.config import settings
from models.schemas import ContactSubmission, SpamVerdict

REASON_HONEYPOT = "honeypot"
REASON_TOO_FAST = "too-fast"
REASON_SUSPICIOUS_CONTENT = "suspicious-content"
REASON_EXCESSIVE_CAPS = "excessive-caps"
REASON_RECAPTCHA_FAILED = "recaptcha-failed"
REASON_RECAPTCHA_LOW_SCORE = "recaptcha-low-score"

NOT_SPAM = SpamVerdict(is_spam=False)


class SpamService:
    """Service for classifying contact submissions as spam."""

    SPAM_PATTERNS = [
        re.compile(
            r"\b(viagra|cialis|pharmacy|casino|lottery|winner|congratulations)\b",
            re.IGNORECASE,
        ),
        # Shouting: the whole message is capitals and whitespace
        re.compile(r"^[A-Z\s]{50,}$"),
        re.compile(r"\b1-800-\d{3}-\d{4}\b"),
        re.compile(
            r"\b(bitcoin|crypto|ethereum|binance)\s+(wallet|investment|opportunity)\b",
            re.IGNORECASE,
        ),
    ]

    URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
    MAX_URLS = 5

    CAPS_MIN_LETTERS = 20
    CAPS_MAX_RATIO = 0.7

    RECAPTCHA_TIMEOUT = 5.0

    @staticmethod
    def check_honeypot(value: Optional[str]) -> SpamVerdict:
        """A hidden field humans never see; any content means a bot filled it."""
        if isinstance(value, str) and value.strip():
            return SpamVerdict(is_spam=True, reason=REASON_HONEYPOT)
        return NOT_SPAM

    @staticmethod
    def check_submission_timing(
        page_load_time: Any,
        submission_time: Optional[float] = None,
        min_elapsed_ms: Optional[int] = None,
    ) -> SpamVerdict:
        """
        Flag forms submitted faster than a person could fill them in.

        Args:
            page_load_time: Epoch milliseconds when the form was rendered
            submission_time: Epoch milliseconds of submission (defaults to now)
            min_elapsed_ms: Threshold override (defaults to SPAM_MIN_SUBMIT_MS)

        Returns:
            ``too-fast`` verdict, or clean when the load time is unusable
        """
        if isinstance(page_load_time, bool) or not isinstance(
            page_load_time, (int, float)
        ):
            return NOT_SPAM
        if not page_load_time:
            return NOT_SPAM

        if submission_time is None:
            submission_time = time.time() * 1000
        if min_elapsed_ms is None:
            min_elapsed_ms = settings.SPAM_MIN_SUBMIT_MS

        if submission_time - page_load_time < min_elapsed_ms:
            return SpamVerdict(is_spam=True, reason=REASON_TOO_FAST)
        return NOT_SPAM

    @classmethod
    def check_message_patterns(cls, message: str) -> SpamVerdict:
        """Content heuristics: spam vocabulary, link stuffing and shouting."""
        for pattern in cls.SPAM_PATTERNS:
            if pattern.search(message):
                return SpamVerdict(is_spam=True, reason=REASON_SUSPICIOUS_CONTENT)

        if len(cls.URL_PATTERN.findall(message)) >= cls.MAX_URLS:
            return SpamVerdict(is_spam=True, reason=REASON_SUSPICIOUS_CONTENT)

        letters = sum(1 for c in message if c.isascii() and c.isalpha())
        capitals = sum(1 for c in message if "A" <= c <= "Z")
        if letters > cls.CAPS_MIN_LETTERS and capitals / letters > cls.CAPS_MAX_RATIO:
            return SpamVerdict(is_spam=True, reason=REASON_EXCESSIVE_CAPS)

        return NOT_SPAM

    @classmethod
    async def verify_recaptcha(cls, token: str) -> SpamVerdict:
        """
        Verify a reCAPTCHA token with Google.

        Skipped (clean) when no secret is configured. Network and decoding
        errors are logged and treated as clean so an outage at Google never
        blocks real visitors.
        """
        secret = settings.RECAPTCHA_SECRET_KEY
        if not secret:
            logger.debug("reCAPTCHA secret not configured, skipping verification")
            return NOT_SPAM

        try:
            async with httpx.AsyncClient(timeout=cls.RECAPTCHA_TIMEOUT) as client:
                response = await client.post(
                    settings.RECAPTCHA_VERIFY_URL,
                    data={"secret": secret, "response": token},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.warning("reCAPTCHA verification timed out, skipping")
            return NOT_SPAM
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"reCAPTCHA verification HTTP error {e.response.status_code}, skipping"
            )
            return NOT_SPAM
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"reCAPTCHA verification error, skipping: {e!r}")
            return NOT_SPAM

        if not isinstance(data, dict) or not data.get("success"):
            return SpamVerdict(is_spam=True, reason=REASON_RECAPTCHA_FAILED)

        score = data.get("score")
        if isinstance(score, (int, float)) and score < settings.RECAPTCHA_MIN_SCORE:
            return SpamVerdict(is_spam=True, reason=REASON_RECAPTCHA_LOW_SCORE)

        return NOT_SPAM

    @classmethod
    async def perform_spam_checks(
        cls,
        submission: ContactSubmission,
        submission_time: Optional[float] = None,
    ) -> SpamVerdict:
        """
        Run every heuristic, stopping at the first positive.

        Order is honeypot, timing, content, then reCAPTCHA (the only check
        that needs the network), so the reported reason is deterministic
        when several signals fire.
        """
        verdict = cls.check_honeypot(submission.honeypot)
        if verdict.is_spam:
            return verdict

        verdict = cls.check_submission_timing(
            submission.page_load_time, submission_time
        )
        if verdict.is_spam:
            return verdict

        verdict = cls.check_message_patterns(submission.message)
        if verdict.is_spam:
            return verdict

        if submission.recaptcha_token:
            verdict = await cls.verify_recaptcha(submission.recaptcha_token)
            if verdict.is_spam:
                return verdict

        return NOT_SPAM
