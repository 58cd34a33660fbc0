"""
Locale redirect middleware for FastAPI.

Sends visitors who hit an unprefixed page path to the same path under the
locale detected from their Accept-Language header.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from helpers.locale_routing import get_path_locale, resolve_locale_redirect


class LocaleRedirectMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces a locale prefix on page paths.

    - Exempt paths (API, assets, docs) pass through untouched.
    - Paths already carrying a supported locale pass through and expose it
      as ``request.state.locale``.
    - Everything else gets a 307 to ``/<locale><path>``, query string kept.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        path = request.url.path
        target = resolve_locale_redirect(path, request.headers.get("Accept-Language"))

        if target is None:
            locale = get_path_locale(path)
            if locale is not None:
                request.state.locale = locale
            return await call_next(request)

        if request.url.query:
            target = f"{target}?{request.url.query}"

        logger.debug(f"Locale redirect: {path} -> {target}")
        return RedirectResponse(url=target, status_code=307)
