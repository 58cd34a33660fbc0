"""
Locale-prefixed URL rules.

Every page lives under ``/<locale>/...``. A request for a path without a
locale segment is redirected to the same path under the visitor's detected
locale, unless the path is an API route, a static asset or a framework
route. Page slugs are localized per locale (``/pt-BR/sobre`` is the
Portuguese ``/en/about``).
"""

from models.locale import (
    ROUTE_SLUGS,
    SUPPORTED_LOCALES,
    Locale,
    Page,
)

from helpers.language import detect_locale

SKIPPED_PREFIXES = (
    "/api/",
    "/static/",
    "/images/",
    "/_internal/",
)

# Exact framework routes and well-known root files
SKIPPED_PATHS = frozenset(
    {
        "/api",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
        "/robots.txt",
        "/sitemap.xml",
        "/manifest.json",
        "/sw.js",
    }
)


def should_skip_locale_routing(path: str) -> bool:
    """Return True for paths that are never locale-prefixed."""
    if path in SKIPPED_PATHS:
        return True
    if path.startswith(SKIPPED_PREFIXES) or path.startswith("/docs/"):
        return True
    # Anything with a file extension is an asset
    return "." in path


def get_path_locale(path: str) -> Locale | None:
    """Return the locale named by the first path segment, if any."""
    for locale in SUPPORTED_LOCALES:
        if path == f"/{locale}" or path.startswith(f"/{locale}/"):
            return Locale(locale)
    return None


def path_has_locale(path: str) -> bool:
    return get_path_locale(path) is not None


def resolve_locale_redirect(path: str, accept_language: str | None) -> str | None:
    """
    Decide whether a request must be redirected to a locale-prefixed path.

    Args:
        path: Request path (no query string).
        accept_language: Raw Accept-Language header value.

    Returns:
        The redirect target path, or None when the request passes through.
    """
    if should_skip_locale_routing(path) or path_has_locale(path):
        return None

    locale = detect_locale(accept_language)
    if path in ("", "/"):
        return f"/{locale.value}"
    return f"/{locale.value}{path}"


def localized_path(page: Page, locale: Locale) -> str:
    """Build the canonical URL path of *page* in *locale*."""
    slug = ROUTE_SLUGS[locale][page]
    return f"/{locale.value}/{slug}" if slug else f"/{locale.value}"


def alternate_paths(page: Page) -> dict[str, str]:
    """Path of *page* in every supported locale, keyed by locale tag."""
    return {locale.value: localized_path(page, locale) for locale in Locale}


def resolve_page_slug(slug: str, locale: Locale) -> Page | None:
    """Map a slug to a page using *locale*'s own route names only."""
    for page, page_slug in ROUTE_SLUGS[locale].items():
        if page_slug == slug:
            return page
    return None


def find_page_for_any_slug(slug: str) -> Page | None:
    """Map a slug to a page using the route names of any locale."""
    for locale in Locale:
        page = resolve_page_slug(slug, locale)
        if page is not None:
            return page
    return None
