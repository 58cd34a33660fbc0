"""Localized page descriptors and translation dictionaries.

Pages are served as JSON descriptors (title, navigation, alternate-locale
links); rendering them is up to the frontend.
"""

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from helpers.locale_routing import (
    alternate_paths,
    find_page_for_any_slug,
    localized_path,
    resolve_page_slug,
)
from helpers.rate_limiter import limiter
from models.config import settings
from models.exceptions import LocaleNotFoundException, PageNotFoundException
from models.locale import Locale, Page, coerce_locale, is_supported_locale
from models.schemas import NavItem, PageDescriptor, TranslationsResponse
from services.translation_service import create_translator, get_translations

router = APIRouter(tags=["pages"])

translations_router = APIRouter(prefix="/translations", tags=["translations"])


def _build_page(page: Page, locale: Locale) -> PageDescriptor:
    t = create_translator(locale.value)
    return PageDescriptor(
        locale=locale.value,
        page=page.value,
        path=localized_path(page, locale),
        title=t(f"{page.value}.title"),
        subtitle=t(f"{page.value}.subtitle"),
        nav=[
            NavItem(
                page=item.value,
                label=t(f"nav.{item.value}"),
                href=localized_path(item, locale),
            )
            for item in Page
        ],
        alternates=alternate_paths(page),
    )


def _require_locale(locale: str) -> Locale:
    if not is_supported_locale(locale):
        raise LocaleNotFoundException(locale)
    return Locale(locale)


@router.get("/{locale}", response_model=PageDescriptor)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def get_home_page(request: Request, locale: str) -> PageDescriptor:
    """Home page of a locale."""
    return _build_page(Page.HOME, _require_locale(locale))


@router.get("/{locale}/{slug}", response_model=PageDescriptor)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def get_page(request: Request, locale: str, slug: str) -> PageDescriptor | RedirectResponse:
    """Page addressed by its localized slug.

    A slug belonging to another locale (``/pt-BR/about``) is permanently
    redirected to this locale's slug (``/pt-BR/sobre``).

    Raises:
        LocaleNotFoundException: 404 for an unsupported locale
        PageNotFoundException: 404 for a slug no locale knows
    """
    active = _require_locale(locale)

    page = resolve_page_slug(slug, active)
    if page is not None:
        return _build_page(page, active)

    page = find_page_for_any_slug(slug)
    if page is None:
        raise PageNotFoundException(slug)

    target = localized_path(page, active)
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(url=target, status_code=308)


@translations_router.get("/{locale}", response_model=TranslationsResponse)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def get_locale_translations(request: Request, locale: str) -> TranslationsResponse:
    """Full dictionary for a locale.

    Unsupported locales get the default locale's dictionary, and the
    response names the locale actually served.
    """
    return TranslationsResponse(
        locale=coerce_locale(locale).value,
        translations=get_translations(locale),
    )
