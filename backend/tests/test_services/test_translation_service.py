"""Tests for the translation service."""

import json

import pytest

from models.locale import Locale
from services import translation_service
from services.translation_service import (
    _iter_keys,
    _resolve,
    clear_translation_cache,
    create_translator,
    get_translation,
    get_translations,
    missing_keys,
    preload_translations,
)


class TestGetTranslations:
    """Tests for whole-dictionary lookup."""

    def test_supported_locale_returns_own_dictionary(self) -> None:
        """pt-BR gets its own (partial) dictionary."""
        translations = get_translations("pt-BR")
        assert translations["nav"]["home"] == "Início"

    def test_unsupported_locale_returns_default_dictionary(self) -> None:
        """Unknown locales get the English dictionary in its entirety."""
        assert get_translations("fr") == get_translations("en")

    def test_locale_match_is_case_sensitive(self) -> None:
        """'pt-br' is not a supported tag."""
        assert get_translations("pt-br") == get_translations("en")

    def test_accepts_locale_member(self) -> None:
        assert get_translations(Locale.PT_BR) is get_translations("pt-BR")
        assert get_translations(Locale.PT_BR)["nav"]["home"] == "Início"


class TestCreateTranslator:
    """Tests for per-key translation with fallback."""

    def test_translates_existing_key(self) -> None:
        t = create_translator("pt-BR")
        assert t("nav.about") == "Sobre"

    def test_accepts_locale_member(self) -> None:
        assert create_translator(Locale.PT_BR)("nav.about") == "Sobre"
        assert get_translation(Locale.EN, "nav.about") == "About"

    def test_falls_back_to_default_per_key(self) -> None:
        """A key missing from pt-BR resolves from English."""
        t = create_translator("pt-BR")
        assert t("footer.builtWith") == "Built with FastAPI and Python"
        # Sibling keys in the same section still come from pt-BR
        assert t("footer.copyright") == "Todos os direitos reservados"

    def test_missing_everywhere_returns_key(self) -> None:
        t = create_translator("pt-BR")
        assert t("does.not.exist") == "does.not.exist"

    def test_non_string_node_returns_key(self) -> None:
        """A key naming a section rather than a string is treated as missing."""
        t = create_translator("en")
        assert t("nav") == "nav"

    def test_path_through_string_returns_key(self) -> None:
        t = create_translator("en")
        assert t("nav.home.extra") == "nav.home.extra"

    def test_unsupported_locale_translates_in_default(self) -> None:
        t = create_translator("de")
        assert t("nav.home") == "Home"

    def test_empty_key_returns_key(self) -> None:
        t = create_translator("en")
        assert t("") == ""

    def test_interpolates_placeholders(self) -> None:
        t = create_translator("en")
        assert t("projects.showingAll", count=3) == "Showing all 3 projects"

    def test_interpolates_in_fallback_value(self) -> None:
        t = create_translator("pt-BR")
        assert (
            t("projects.showingFiltered", filtered=2, total=9)
            == "Showing 2 of 9 projects"
        )

    def test_unknown_placeholder_left_intact(self) -> None:
        t = create_translator("en")
        assert t("projects.showingAll") == "Showing all {{count}} projects"

    @pytest.mark.parametrize("locale", ["en", "pt-BR"])
    def test_every_present_key_translates_to_its_value(self, locale: str) -> None:
        """For every key a dictionary defines, the translator returns that value."""
        dictionary = get_translations(locale)
        t = create_translator(locale)
        for key in _iter_keys(dictionary):
            assert t(key) == _resolve(dictionary, key)

    def test_get_translation_matches_translator(self) -> None:
        assert get_translation("pt-BR", "nav.contact") == "Contato"
        assert get_translation("pt-BR", "nope") == "nope"


class TestMissingKeys:
    """Tests for translation coverage reporting."""

    def test_default_locale_is_complete(self) -> None:
        assert missing_keys("en") == []

    def test_partial_locale_reports_gaps(self) -> None:
        missing = missing_keys("pt-BR")
        assert "footer.builtWith" in missing
        assert "contact.reason" in missing
        assert "nav.home" not in missing

    def test_unsupported_locale_reports_nothing(self) -> None:
        assert missing_keys("fr") == []

    def test_accepts_locale_member(self) -> None:
        assert missing_keys(Locale.PT_BR) == missing_keys("pt-BR")
        assert missing_keys(Locale.PT_BR)


class TestDictionaryLoading:
    """Tests for loading dictionaries from disk."""

    @pytest.fixture
    def locales_dir(self, tmp_path, monkeypatch):
        """Point the loader at a temporary directory."""
        (tmp_path / "en.json").write_text(
            json.dumps({"greeting": {"hello": "Hello {{name}}"}, "only": "en"}),
            encoding="utf-8",
        )
        (tmp_path / "pt-BR.json").write_text(
            json.dumps({"greeting": {"hello": "Olá {{name}}"}}), encoding="utf-8"
        )
        monkeypatch.setattr(translation_service, "LOCALES_DIR", tmp_path)
        clear_translation_cache()
        yield tmp_path
        clear_translation_cache()

    def test_loads_from_directory(self, locales_dir) -> None:
        t = create_translator("pt-BR")
        assert t("greeting.hello", name="Ana") == "Olá Ana"
        assert t("only") == "en"

    def test_missing_file_yields_empty_dictionary(self, locales_dir) -> None:
        (locales_dir / "pt-BR.json").unlink()
        clear_translation_cache()

        assert get_translations("pt-BR") == {}
        # Everything falls back to English
        assert create_translator("pt-BR")("only") == "en"

    def test_preload_counts_leaf_strings(self, locales_dir) -> None:
        assert preload_translations() == {"en": 2, "pt-BR": 1}
