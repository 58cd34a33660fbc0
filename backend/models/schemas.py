from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContactSubmission(BaseModel):
    """A validated contact form submission.

    Lives only for the duration of one request; never persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    reason: str
    message: str
    honeypot: Optional[str] = None
    recaptcha_token: Optional[str] = Field(default=None, alias="recaptchaToken")
    page_load_time: Optional[float] = Field(default=None, alias="pageLoadTime")


class ContactFormResponse(BaseModel):
    message: str


class SpamVerdict(BaseModel):
    """Outcome of the spam heuristics for one submission."""

    is_spam: bool
    reason: Optional[str] = None


class NavItem(BaseModel):
    page: str
    label: str
    href: str


class PageDescriptor(BaseModel):
    """Data a rendering layer needs to draw one localized page."""

    locale: str
    page: str
    path: str
    title: str
    subtitle: Optional[str] = None
    nav: list[NavItem]
    alternates: dict[str, str]


class TranslationsResponse(BaseModel):
    locale: str
    translations: dict[str, Any]
