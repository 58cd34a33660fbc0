"""Email service for sending contact form emails.

This module provides a unified interface for sending emails through various providers.
Supports:
- resend: Resend REST API (production)
- smtp: Standard SMTP delivery
- console: Logs emails to console (development)

All user-supplied text is HTML-escaped before it is placed in an HTML body,
and the admin notification is retried with exponential backoff.
"""

import html
import re
import smtplib
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import httpx
from loguru import logger

from helpers.ip_utils import hash_email_for_audit
from models.config import settings
from models.exceptions import EmailConfigurationException, EmailDeliveryException
from models.schemas import ContactSubmission


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    name: str = "abstract"

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send an email. Returns False on failure instead of raising."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        pass


class ResendProvider(EmailProvider):
    """Resend email provider (https://resend.com) over its REST API."""

    name = "resend"
    TIMEOUT = 10.0

    def __init__(self) -> None:
        self.api_key = settings.RESEND_API_KEY
        self.api_url = settings.RESEND_API_URL
        self.from_email = settings.RESEND_FROM_EMAIL

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send email via the Resend API."""
        payload: dict[str, object] = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            with httpx.Client(timeout=self.TIMEOUT) as client:
                response = client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            logger.info(
                f"Email sent to {hash_email_for_audit(to_email)} via Resend "
                f"(id={response.json().get('id', 'unknown')})"
            )
            return True
        except httpx.TimeoutException:
            logger.error("Resend: request timed out")
            return False
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Resend: HTTP {e.response.status_code} - {e.response.text[:200]}"
            )
            return False
        except Exception as e:
            logger.error(f"Resend: failed to send email: {e!r}")
            return False


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    name = "smtp"

    def __init__(self) -> None:
        """Initialize SMTP provider with settings."""
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS
        self.use_ssl = settings.SMTP_USE_SSL

    def is_configured(self) -> bool:
        return bool(self.host)

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send email via SMTP.

        Supports both:
        - Implicit SSL (port 465): use SMTP_USE_SSL=true
        - STARTTLS (port 587): use SMTP_USE_TLS=true
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        if reply_to:
            msg["Reply-To"] = reply_to

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            logger.debug(
                f"SMTP: Connecting to {self.host}:{self.port} "
                f"(SSL={self.use_ssl}, TLS={self.use_tls})"
            )
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port, timeout=10)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=10)
                if self.use_tls:
                    server.starttls()

            try:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())
            finally:
                server.quit()

            logger.info(f"Email sent to {hash_email_for_audit(to_email)} via SMTP")
            return True

        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {list(e.recipients)}")
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}")
            return False
        except smtplib.SMTPException as e:
            logger.error(f"SMTP: {e!r}")
            return False
        except OSError as e:
            logger.error(f"SMTP: Connection failed - {e!r}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    name = "console"

    def is_configured(self) -> bool:
        return True

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Log email to console."""
        clean_html = re.sub(r"<[^>]+>", "", html_body)[:500]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"To: {to_email}\n"
            f"Reply-To: {reply_to or '-'}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"PLAIN TEXT:\n{text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview):\n{clean_html}\n"
            f"{'=' * 60}\n"
        )
        return True


PROVIDERS: dict[str, type[EmailProvider]] = {
    "resend": ResendProvider,
    "smtp": SMTPProvider,
    "console": ConsoleProvider,
}


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()
    provider_class = PROVIDERS.get(provider_name)
    if provider_class is None:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()
    return provider_class()


class EmailService:
    """Builds and sends the two emails produced by a contact submission."""

    @staticmethod
    def _escape(text: str) -> str:
        return html.escape(str(text))

    @classmethod
    def is_configured(cls, provider: Optional[EmailProvider] = None) -> bool:
        """Provider credentials present and a destination inbox set."""
        provider = provider or get_email_provider()
        return provider.is_configured() and bool(settings.CONTACT_EMAIL)

    @classmethod
    def _send_with_retry(
        cls,
        send_func: Callable[[], bool],
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
    ) -> bool:
        """
        Send email with exponential backoff retry.

        Args:
            send_func: Function that sends the email and returns success status
            max_attempts: Maximum number of send attempts
            base_delay: Base delay in seconds (doubles each retry)

        Returns:
            True if email sent successfully, False after all attempts fail
        """
        max_attempts = max_attempts or settings.EMAIL_MAX_ATTEMPTS
        if base_delay is None:
            base_delay = settings.EMAIL_RETRY_BASE_DELAY

        for attempt in range(max_attempts):
            try:
                if send_func():
                    return True
            except Exception as e:
                logger.warning(f"Email send attempt {attempt + 1} failed: {e!r}")

            if attempt < max_attempts - 1:
                delay = base_delay * (2**attempt)
                logger.info(f"Retrying email in {delay}s...")
                time.sleep(delay)

        logger.error(f"Email send failed after {max_attempts} attempts")
        return False

    @classmethod
    def build_admin_notification(
        cls, submission: ContactSubmission, timestamp: Optional[datetime] = None
    ) -> tuple[str, str, str]:
        """Build the notification sent to the site owner.

        Returns:
            Tuple of (subject, html_body, text_body)
        """
        timestamp = timestamp or datetime.now(timezone.utc)
        sent_at = timestamp.strftime("%Y-%m-%d %H:%M:%S %Z")
        app_name = settings.APP_NAME

        # Reason is single-line, strip newlines so it cannot inject headers
        subject_reason = " ".join(submission.reason.split())
        subject = f"New Contact Form Submission: {subject_reason}"

        text_body = f"""New Contact Form Submission

Name: {submission.name}
Email: {submission.email}
Reason: {submission.reason}

Message:
{submission.message}

---
This message was sent from the {app_name} contact form.
Timestamp: {sent_at}"""

        safe_name = cls._escape(submission.name)
        safe_email = cls._escape(submission.email)
        safe_reason = cls._escape(submission.reason)
        safe_message = cls._escape(submission.message)
        safe_app_name = cls._escape(app_name)

        html_body = f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
        <h2 style="margin: 0;">New Contact Form Submission</h2>
    </div>
    <div style="background: #ffffff; padding: 20px; border: 1px solid #e9ecef; border-radius: 8px;">
        <p><strong>Name:</strong><br>{safe_name}</p>
        <p><strong>Email:</strong><br><a href="mailto:{safe_email}">{safe_email}</a></p>
        <p><strong>Reason:</strong><br>{safe_reason}</p>
        <p><strong>Message:</strong></p>
        <div style="background: #f8f9fa; padding: 15px; border-radius: 5px; white-space: pre-wrap;">{safe_message}</div>
    </div>
    <p style="margin-top: 20px; font-size: 14px; color: #6c757d;">
        This message was sent from the {safe_app_name} contact form.<br>
        Timestamp: {sent_at}
    </p>
</body>
</html>"""

        return subject, html_body, text_body

    @classmethod
    def build_confirmation(cls, submission: ContactSubmission) -> tuple[str, str, str]:
        """Build the acknowledgement sent back to the visitor.

        Returns:
            Tuple of (subject, html_body, text_body)
        """
        app_name = settings.APP_NAME
        subject = "Thank you for contacting me"

        text_body = f"""Hi {submission.name},

Thank you for getting in touch through the {app_name} website. I've received your message and will get back to you as soon as possible.

Here's a copy of your message for your records:

Reason: {submission.reason}
Message:
{submission.message}

I typically respond within 24-48 hours.

Best regards

---
This is an automated response from the {app_name} website."""

        safe_name = cls._escape(submission.name)
        safe_reason = cls._escape(submission.reason)
        safe_message = cls._escape(submission.message)
        safe_app_name = cls._escape(app_name)

        html_body = f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #007bff; color: white; padding: 30px; border-radius: 8px 8px 0 0; text-align: center;">
        <h1 style="margin: 0;">Thank You for Reaching Out!</h1>
    </div>
    <div style="background: #ffffff; padding: 30px; border: 1px solid #e9ecef; border-radius: 0 0 8px 8px;">
        <p>Hi {safe_name},</p>
        <p>Thank you for getting in touch through the {safe_app_name} website. I've received your message and will get back to you as soon as possible.</p>
        <p>Here's a copy of your message for your records:</p>
        <div style="background: #f8f9fa; padding: 15px; border-radius: 5px;">
            <p><strong>Reason:</strong> {safe_reason}</p>
            <p style="white-space: pre-wrap;"><strong>Message:</strong><br>{safe_message}</p>
        </div>
        <p>I typically respond within 24-48 hours.</p>
        <p>Best regards</p>
    </div>
    <p style="margin-top: 30px; text-align: center; font-size: 14px; color: #6c757d;">
        This is an automated response from the {safe_app_name} website.
    </p>
</body>
</html>"""

        return subject, html_body, text_body

    @classmethod
    def send_contact_emails(
        cls,
        submission: ContactSubmission,
        provider: Optional[EmailProvider] = None,
    ) -> None:
        """Send the admin notification, then the visitor confirmation.

        The confirmation is best-effort: its failure is logged and the
        submission still counts as delivered.

        Args:
            submission: Validated, non-spam contact submission
            provider: Provider override (defaults to EMAIL_PROVIDER)

        Raises:
            EmailConfigurationException: Provider credentials or CONTACT_EMAIL missing
            EmailDeliveryException: Admin notification could not be sent
        """
        provider = provider or get_email_provider()
        if not cls.is_configured(provider):
            logger.error(
                f"Email provider '{provider.name}' is not configured "
                f"(contact_email_set={bool(settings.CONTACT_EMAIL)})"
            )
            raise EmailConfigurationException()

        admin_email = settings.CONTACT_EMAIL
        sender = hash_email_for_audit(submission.email)

        subject, html_body, text_body = cls.build_admin_notification(submission)
        admin_sent = cls._send_with_retry(
            lambda: provider.send(
                admin_email, subject, html_body, text_body, reply_to=submission.email
            )
        )
        if not admin_sent:
            logger.error(f"Failed to send contact notification for {sender}")
            raise EmailDeliveryException()

        logger.info(f"Contact notification sent for {sender}")

        subject, html_body, text_body = cls.build_confirmation(submission)
        try:
            user_sent = provider.send(
                submission.email, subject, html_body, text_body, reply_to=admin_email
            )
        except Exception as e:
            logger.warning(f"Confirmation email to {sender} raised: {e!r}")
            user_sent = False

        if not user_sent:
            logger.warning(f"Failed to send confirmation email to {sender}")
