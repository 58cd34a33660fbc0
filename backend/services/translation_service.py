"""Translation lookup over the per-locale dictionaries in ``backend/locales``.

Dictionaries are nested JSON objects addressed with dotted keys
(``"nav.home"``). They are read once per process and never modified.

Lookup rules:
- ``get_translations`` falls back to the default locale's *whole* dictionary
  for an unsupported locale.
- A translator falls back *per key* to the default locale when a partial
  dictionary lacks a key, and returns the key itself when no dictionary has
  a string at that path.
"""

import json
import re
from collections.abc import Callable, Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from loguru import logger

from models.locale import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    Locale,
    is_supported_locale,
)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

Translator = Callable[..., str]


def _locale_tag(locale: Locale | str) -> str:
    """Plain BCP 47 tag for a Locale member or a raw string."""
    return str(getattr(locale, "value", locale))


@lru_cache(maxsize=len(SUPPORTED_LOCALES))
def _load_dictionary(locale: str) -> dict[str, Any]:
    """Load the JSON dictionary for a supported locale."""
    path = LOCALES_DIR / f"{locale}.json"
    if not path.exists():
        logger.warning(f"Translation file not found: {path}")
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def preload_translations() -> dict[str, int]:
    """Load every supported dictionary up front.

    Returns:
        Number of leaf strings per locale.
    """
    counts = {}
    for locale in SUPPORTED_LOCALES:
        counts[locale] = sum(1 for _ in _iter_keys(_load_dictionary(locale)))
    logger.info(f"Translations loaded: {counts}")
    return counts


def clear_translation_cache() -> None:
    """Forget loaded dictionaries (tests point LOCALES_DIR elsewhere)."""
    _load_dictionary.cache_clear()


def get_translations(locale: Locale | str) -> dict[str, Any]:
    """Return the full dictionary for *locale*.

    Unsupported locales get the default locale's dictionary in its entirety.
    """
    locale = _locale_tag(locale)
    if not is_supported_locale(locale):
        return _load_dictionary(DEFAULT_LOCALE.value)
    return _load_dictionary(locale)


def _resolve(dictionary: Mapping[str, Any], key: str) -> str | None:
    """Walk *dictionary* along the dotted *key*; None on any miss."""
    node: Any = dictionary
    for segment in key.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            return None
        node = node[segment]
    return node if isinstance(node, str) else None


def _interpolate(text: str, params: Mapping[str, Any]) -> str:
    if not params:
        return text

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        return str(params[name]) if name in params else match.group(0)

    return _PLACEHOLDER.sub(replace, text)


def create_translator(locale: Locale | str) -> Translator:
    """Build a ``translate(key, **params)`` function bound to *locale*."""
    primary = get_translations(locale)
    fallback = _load_dictionary(DEFAULT_LOCALE.value)

    def translate(key: str, **params: Any) -> str:
        value = _resolve(primary, key)
        if value is None and primary is not fallback:
            value = _resolve(fallback, key)
        if value is None:
            return key
        return _interpolate(value, params)

    return translate


def get_translation(locale: Locale | str, key: str, **params: Any) -> str:
    """Convenience form of ``create_translator(locale)(key)``."""
    return create_translator(locale)(key, **params)


def _iter_keys(node: Mapping[str, Any], prefix: str = "") -> Iterator[str]:
    for name, value in node.items():
        path = f"{prefix}.{name}" if prefix else name
        if isinstance(value, Mapping):
            yield from _iter_keys(value, path)
        else:
            yield path


def missing_keys(locale: Locale | str) -> list[str]:
    """Dotted keys of the default dictionary that *locale* does not define."""
    locale = _locale_tag(locale)
    if not is_supported_locale(locale):
        return []
    dictionary = _load_dictionary(locale)
    return [
        key
        for key in _iter_keys(_load_dictionary(DEFAULT_LOCALE.value))
        if _resolve(dictionary, key) is None
    ]
