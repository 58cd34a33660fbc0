"""Supported locales and localized route names for the site."""

from enum import Enum


class Locale(str, Enum):
    """Locales the site is published in."""

    EN = "en"
    PT_BR = "pt-BR"


DEFAULT_LOCALE = Locale.EN

SUPPORTED_LOCALES: tuple[str, ...] = tuple(locale.value for locale in Locale)


class Page(str, Enum):
    """Top-level site sections that have a localized URL slug."""

    HOME = "home"
    ABOUT = "about"
    PROJECTS = "projects"
    BLOG = "blog"
    LEARN = "learn"
    CONTACT = "contact"


# URL slug of each page per locale ("" is the locale root)
ROUTE_SLUGS: dict[Locale, dict[Page, str]] = {
    Locale.EN: {
        Page.HOME: "",
        Page.ABOUT: "about",
        Page.PROJECTS: "projects",
        Page.BLOG: "blog",
        Page.LEARN: "learn",
        Page.CONTACT: "contact",
    },
    Locale.PT_BR: {
        Page.HOME: "",
        Page.ABOUT: "sobre",
        Page.PROJECTS: "projetos",
        Page.BLOG: "blog",
        Page.LEARN: "aprender",
        Page.CONTACT: "contato",
    },
}


def is_supported_locale(value: str | None) -> bool:
    """Return True if *value* is exactly one of the supported locale tags."""
    return value in SUPPORTED_LOCALES


def coerce_locale(value: str | None) -> Locale:
    """Return the matching Locale, or the default for anything unsupported."""
    if value is not None and is_supported_locale(value):
        return Locale(value)
    return DEFAULT_LOCALE
