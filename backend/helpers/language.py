"""Language utility functions."""

from models.locale import DEFAULT_LOCALE, Locale


def parse_accept_language(accept_language: str | None) -> list[str]:
    """
    Split an Accept-Language header into language tags in header order.

    Quality values are discarded, not used for ordering:
    - "pt-BR,pt;q=0.9,en;q=0.8" -> ["pt-BR", "pt", "en"]
    - "en;q=0.1, pt;q=0.9" -> ["en", "pt"]
    """
    if not accept_language:
        return []

    tags = []
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip()
        if tag:
            tags.append(tag)
    return tags


def detect_locale(accept_language: str | None) -> Locale:
    """
    Pick the site locale for a visitor from their Accept-Language header.

    The first tag (in header order) starting with "pt" selects pt-BR and the
    first starting with "en" selects en. This is a prefix match, not
    quality-weighted negotiation. Returns the default locale otherwise.
    """
    for tag in parse_accept_language(accept_language):
        primary = tag.lower()
        if primary.startswith("pt"):
            return Locale.PT_BR
        if primary.startswith("en"):
            return Locale.EN
    return DEFAULT_LOCALE
