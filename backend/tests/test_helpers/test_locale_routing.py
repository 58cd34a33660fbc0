"""Tests for locale-prefixed routing rules and the redirect middleware."""

import pytest

from helpers.locale_routing import (
    alternate_paths,
    find_page_for_any_slug,
    get_path_locale,
    localized_path,
    path_has_locale,
    resolve_locale_redirect,
    resolve_page_slug,
    should_skip_locale_routing,
)
from models.locale import Locale, Page

PT = "pt-BR,pt;q=0.9"


class TestShouldSkipLocaleRouting:
    """Tests for exempt paths."""

    @pytest.mark.parametrize(
        "path",
        [
            "/api/contact",
            "/api/health",
            "/api",
            "/static/app.css",
            "/images/me.png",
            "/_internal/build",
            "/docs",
            "/docs/oauth2-redirect",
            "/redoc",
            "/openapi.json",
            "/favicon.ico",
            "/robots.txt",
            "/sitemap.xml",
            "/resume.pdf",
            "/logo.png",
            "/blog/post.html",
        ],
    )
    def test_exempt(self, path: str) -> None:
        assert should_skip_locale_routing(path) is True

    @pytest.mark.parametrize("path", ["/", "/about", "/apis", "/documentation"])
    def test_not_exempt(self, path: str) -> None:
        assert should_skip_locale_routing(path) is False


class TestGetPathLocale:
    """Tests for locale prefix detection."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/en", Locale.EN),
            ("/en/about", Locale.EN),
            ("/pt-BR", Locale.PT_BR),
            ("/pt-BR/sobre", Locale.PT_BR),
            ("/english", None),
            ("/pt-br/sobre", None),
            ("/fr/about", None),
            ("/", None),
        ],
    )
    def test_detects_prefix(self, path, expected) -> None:
        assert get_path_locale(path) == expected
        assert path_has_locale(path) is (expected is not None)


class TestResolveLocaleRedirect:
    """Tests for redirect target computation."""

    def test_root_goes_to_locale_home(self) -> None:
        assert resolve_locale_redirect("/", PT) == "/pt-BR"

    def test_path_is_prefixed(self) -> None:
        assert resolve_locale_redirect("/about", "en-US") == "/en/about"

    def test_nested_path_is_prefixed(self) -> None:
        assert resolve_locale_redirect("/blog/my-post", PT) == "/pt-BR/blog/my-post"

    def test_default_without_header(self) -> None:
        assert resolve_locale_redirect("/contact", None) == "/en/contact"

    @pytest.mark.parametrize("path", ["/en", "/pt-BR/sobre", "/api/contact", "/x.png"])
    def test_no_redirect(self, path: str) -> None:
        assert resolve_locale_redirect(path, PT) is None

    def test_unsupported_locale_segment_is_treated_as_path(self) -> None:
        assert resolve_locale_redirect("/fr/about", PT) == "/pt-BR/fr/about"


class TestLocalizedSlugs:
    """Tests for per-locale page slugs."""

    @pytest.mark.parametrize(
        "page,locale,expected",
        [
            (Page.HOME, Locale.EN, "/en"),
            (Page.HOME, Locale.PT_BR, "/pt-BR"),
            (Page.ABOUT, Locale.EN, "/en/about"),
            (Page.ABOUT, Locale.PT_BR, "/pt-BR/sobre"),
            (Page.PROJECTS, Locale.PT_BR, "/pt-BR/projetos"),
            (Page.CONTACT, Locale.PT_BR, "/pt-BR/contato"),
        ],
    )
    def test_localized_path(self, page, locale, expected) -> None:
        assert localized_path(page, locale) == expected

    def test_alternate_paths(self) -> None:
        assert alternate_paths(Page.LEARN) == {
            "en": "/en/learn",
            "pt-BR": "/pt-BR/aprender",
        }

    def test_resolve_in_own_locale_only(self) -> None:
        assert resolve_page_slug("sobre", Locale.PT_BR) == Page.ABOUT
        assert resolve_page_slug("sobre", Locale.EN) is None

    def test_shared_slug(self) -> None:
        assert resolve_page_slug("blog", Locale.EN) == Page.BLOG
        assert resolve_page_slug("blog", Locale.PT_BR) == Page.BLOG

    def test_find_in_any_locale(self) -> None:
        assert find_page_for_any_slug("projetos") == Page.PROJECTS
        assert find_page_for_any_slug("projects") == Page.PROJECTS
        assert find_page_for_any_slug("nope") is None


class TestLocaleRedirectMiddleware:
    """Tests for the middleware wired into the app."""

    def test_root_redirects_with_307(self, client) -> None:
        response = client.get(
            "/", headers={"Accept-Language": PT}, follow_redirects=False
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/pt-BR"

    def test_query_string_is_kept(self, client) -> None:
        response = client.get(
            "/projects?tag=python&page=2",
            headers={"Accept-Language": "en-US"},
            follow_redirects=False,
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/en/projects?tag=python&page=2"

    def test_post_is_redirected_preserving_method(self, client) -> None:
        response = client.post("/contact", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/en/contact"

    def test_prefixed_path_passes_through(self, client) -> None:
        response = client.get("/en/about", follow_redirects=False)
        assert response.status_code == 200

    def test_api_path_is_not_redirected(self, client) -> None:
        response = client.get("/api/health", follow_redirects=False)
        assert response.status_code == 200

    def test_redirect_carries_security_headers(self, client) -> None:
        response = client.get("/", follow_redirects=False)
        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert "X-Correlation-ID" in response.headers
