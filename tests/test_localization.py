"""Tests for Localization: fallback chains, missing keys and switching."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path

import pytest

from ftlcatalog.catalog import FallbackInfo, Localization, MemoryResourceLoader, PathResourceLoader
from ftlcatalog.catalog.types import LocaleCode, ResourceId, TemplateSource
from ftlcatalog.config import LocalizationConfig
from ftlcatalog.diagnostics import (
    CatalogError,
    DiagnosticCode,
    DuplicateKeyError,
    MissingKeyError,
    TemplateParseError,
)
from ftlcatalog.enums import MissingKeyPolicy
from ftlcatalog.runtime import PluralRuleRegistry
from ftlcatalog.runtime.plural_rules import get_default_registry


def _plain(**kwargs: object) -> LocalizationConfig:
    return LocalizationConfig(use_isolating=False, **kwargs)  # type: ignore[arg-type]


class CountingLoader(MemoryResourceLoader):
    """Memory loader that records how often each resource is read."""

    __slots__ = ("calls", "_calls_lock")

    def __init__(self, resources: Mapping[LocaleCode, Mapping[ResourceId, TemplateSource]]) -> None:
        super().__init__(resources)
        self.calls: dict[tuple[str, str], int] = {}
        self._calls_lock = threading.Lock()

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> TemplateSource:
        with self._calls_lock:
            self.calls[(locale, resource_id)] = self.calls.get((locale, resource_id), 0) + 1
        return super().load(locale, resource_id)


# ============================================================================
# CONSTRUCTION
# ============================================================================


class TestConstruction:
    """Reference catalog loads eagerly; others lazily."""

    def test_reference_loaded_at_construction(self, sample_resources: dict) -> None:
        loader = CountingLoader(sample_resources)

        l10n = Localization(loader)

        assert l10n.reference_locale == "en"
        assert len(l10n.reference_catalog) == 5
        assert ("en", "main.ftl") in loader.calls
        assert ("de", "main.ftl") not in loader.calls

    def test_broken_reference_fails_construction(self) -> None:
        loader = MemoryResourceLoader({"en": {"main.ftl": "broken = {\n"}})

        with pytest.raises(TemplateParseError):
            Localization(loader)

    def test_initial_language(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, language="de-DE")

        assert l10n.language == "de_DE"
        assert l10n.active.chain == ("de", "en")

    def test_custom_reference_locale(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain(reference_locale="de"))

        assert l10n.reference_locale == "de"
        assert l10n.format_value("close-button") == "Schließen"

    def test_available_locales(self, memory_loader: MemoryResourceLoader) -> None:
        assert Localization(memory_loader).available_locales() == ("de", "en", "pt", "pt_BR")


# ============================================================================
# LOOKUP AND FALLBACK
# ============================================================================


class TestFallback:
    """Keys fall back along the chain to the reference catalog."""

    def test_own_translation(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain(), language="de")

        assert l10n.format_value("greeting", {"name": "Anna"}) == "Hallo, Anna!"

    def test_plural_in_active_language(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain(), language="de")

        assert l10n.format_value("addons-you-have-count", {"count": 1}) == "Sie haben 1 Add-on."
        assert l10n.format_value("addons-you-have-count", {"count": 4}) == "Sie haben 4 Add-ons."

    def test_missing_translation_uses_reference(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain(), language="de")

        assert l10n.format_value("addons-title") == "Add-ons"

    def test_regional_chain(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain())

        language = l10n.switch_language("pt", "BR")

        assert language.chain == ("pt_BR", "pt", "en")
        assert l10n.format_value("close-button") == "Fechar janela"
        assert l10n.format_value("addons-you-have-count", {"count": 3}) == "Você tem 3 complementos."
        assert l10n.format_value("addons-title") == "Add-ons"

    def test_default_substitution_is_isolated(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, language="pt-BR")

        assert l10n.format_value("addons-you-have-count", {"count": 3}) == (
            "Você tem \u20683\u2069 complementos."
        )

    def test_on_fallback_callback(self, memory_loader: MemoryResourceLoader) -> None:
        events: list[FallbackInfo] = []
        l10n = Localization(memory_loader, language="pt_BR", on_fallback=events.append)

        l10n.format_value("close-button")
        l10n.format_value("addons-you-have-count", {"count": 2})
        l10n.format_value("addons-title")

        assert events == [
            FallbackInfo("pt_BR", "pt", "addons-you-have-count"),
            FallbackInfo("pt_BR", "en", "addons-title"),
        ]

    def test_unknown_language_uses_reference(
        self, memory_loader: MemoryResourceLoader, caplog: pytest.LogCaptureFixture
    ) -> None:
        l10n = Localization(memory_loader, _plain())

        with caplog.at_level(logging.WARNING, logger="ftlcatalog.catalog.localization"):
            language = l10n.switch_language("fr")

        assert language.chain == ("en",)
        assert language.reference_only
        assert l10n.format_value("close-button") == "Close"
        assert "No catalogs for language fr" in caplog.text

    def test_format_in_explicit_locale(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain())

        assert l10n.format_value("close-button", locale="de") == "Schließen"
        assert l10n.language == "en"

    def test_fallback_uses_catalog_locale_plural_rules(self) -> None:
        loader = MemoryResourceLoader(
            {
                "en": {"main.ftl": "n = { $n -> [one] one *[other] other }\n"},
                "ja": {"main.ftl": "other-key = x\n"},
            }
        )
        l10n = Localization(loader, _plain(), language="ja")

        assert l10n.format_value("n", {"n": 1}) == "one"

    def test_has_message(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, language="de")

        assert l10n.has_message("addons-title")
        assert not l10n.has_message("nope")
        assert l10n.has_message("close-button", locale="pt")

    def test_invalid_key(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader)

        value, errors = l10n.format_pattern("")

        assert value == "{???}"
        assert len(errors) == 1
        assert isinstance(errors[0], CatalogError)


# ============================================================================
# MISSING KEYS
# ============================================================================


class TestMissingKeys:
    """Keys absent from every catalog."""

    def test_placeholder_policy(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, language="de")

        value, errors = l10n.format_pattern("does-not-exist")

        assert value == "{does-not-exist}"
        (error,) = errors
        assert isinstance(error, MissingKeyError)
        assert (error.key, error.locale) == ("does-not-exist", "de")

    def test_raise_policy(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, LocalizationConfig(missing_key=MissingKeyPolicy.RAISE))

        with pytest.raises(MissingKeyError):
            l10n.format_value("does-not-exist")

    def test_policy_from_string(self, memory_loader: MemoryResourceLoader) -> None:
        config = LocalizationConfig(missing_key="raise")  # type: ignore[arg-type]

        assert config.missing_key is MissingKeyPolicy.RAISE

    def test_format_value_logs_argument_errors(
        self, memory_loader: MemoryResourceLoader, caplog: pytest.LogCaptureFixture
    ) -> None:
        l10n = Localization(memory_loader, _plain())

        with caplog.at_level(logging.WARNING, logger="ftlcatalog.catalog.localization"):
            value = l10n.format_value("greeting")

        assert value == "Hello, {$name}!"
        assert "Argument '$name' was not provided" in caplog.text


# ============================================================================
# LOADING AND SWITCHING
# ============================================================================


class TestLazyLoading:
    """Catalogs load once, on first use."""

    def test_language_loads_once(self, sample_resources: dict) -> None:
        loader = CountingLoader(sample_resources)
        l10n = Localization(loader)

        l10n.switch_language("de")
        l10n.switch_language("en")
        l10n.switch_language("de")

        assert loader.calls[("de", "main.ftl")] == 1

    def test_concurrent_first_use_loads_once(self, sample_resources: dict) -> None:
        loader = CountingLoader(sample_resources)
        l10n = Localization(loader)
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            l10n.get_catalog("pt")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert loader.calls[("pt", "main.ftl")] == 1

    def test_junk_in_language_falls_back(self) -> None:
        loader = MemoryResourceLoader(
            {
                "en": {"main.ftl": "a = A\nb = B\n"},
                "de": {"main.ftl": "a = { broken\nb = Bee\n"},
            }
        )
        l10n = Localization(loader, _plain(), language="de")

        assert l10n.format_value("a") == "A"
        assert l10n.format_value("b") == "Bee"
        assert l10n.get_load_summary().junk_count == 1

    def test_strict_mode_rejects_junk_on_switch(self) -> None:
        loader = MemoryResourceLoader(
            {
                "en": {"main.ftl": "a = A\n"},
                "de": {"main.ftl": "a = { broken\n"},
            }
        )
        l10n = Localization(loader, LocalizationConfig(strict=True))

        with pytest.raises(TemplateParseError):
            l10n.switch_language("de")
        assert l10n.language == "en"

    def test_invalid_language_code(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader)

        with pytest.raises(ValueError):
            l10n.switch_language("de/../..")


class TestSwitchAtomicity:
    """Readers see one language or the other, never a mix."""

    def test_concurrent_switch_and_format(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain())
        allowed = {"Close", "Schließen", "Fechar janela"}
        seen: set[str] = set()
        errors: list[BaseException] = []
        stop = threading.Event()

        def reader() -> None:
            try:
                while not stop.is_set():
                    seen.add(l10n.format_value("close-button"))
            except BaseException as e:  # noqa: BLE001 - surfaced by the assertion below
                errors.append(e)

        def switcher() -> None:
            for _ in range(200):
                for language in ("de", "pt-BR", "en"):
                    l10n.switch_language(language)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()
        switcher()
        stop.set()
        for thread in readers:
            thread.join()

        assert errors == []
        assert seen <= allowed

    def test_active_language_is_immutable(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader)
        before = l10n.active

        l10n.switch_language("de")

        assert before.locale == "en"
        assert l10n.active.locale == "de"
        with pytest.raises(AttributeError):
            before.locale = "de"  # type: ignore[misc]


class TestCustomPluralRules:
    """Localization threads a custom registry to catalogs and resolvers."""

    def test_registry_used_for_selection(self) -> None:
        registry = PluralRuleRegistry()
        registry.register("en", lambda n: "other")
        loader = MemoryResourceLoader(
            {"en": {"main.ftl": "n = { $n -> [one] one *[other] other }\n"}}
        )

        l10n = Localization(loader, _plain(), plural_rules=registry)

        assert l10n.format_value("n", {"n": 1}) == "other"


class TestReferenceRulesForUnknownLanguages:
    """Languages outside CLDR borrow the configured reference's conventions."""

    @pytest.fixture
    def french_reference(self) -> Localization:
        loader = MemoryResourceLoader(
            {
                "fr": {"main.ftl": "n = { $n -> [one] un *[other] plusieurs }\nv = { $v }\n"},
                "qq": {"main.ftl": "n = { $n -> [one] A *[other] B }\nv = { $v }\n"},
            }
        )
        return Localization(loader, _plain(reference_locale="fr"), language="qq")

    def test_plural_rule_of_reference(self, french_reference: Localization) -> None:
        # French puts 0 in "one"; English would pick "other"
        assert french_reference.format_value("n", {"n": 0}) == "A"
        assert french_reference.format_value("n", {"n": 2}) == "B"

    def test_number_conventions_of_reference(self, french_reference: Localization) -> None:
        value = french_reference.format_value("v", {"v": 1234.5})

        assert value.endswith("234,5")
        assert value != "1,234.5"

    def test_default_reference_keeps_process_registry(
        self, memory_loader: MemoryResourceLoader
    ) -> None:
        l10n = Localization(memory_loader)

        assert l10n.active.resolvers[0].plural_rules is get_default_registry()


class TestLocaleOverride:
    """A per-call locale that cannot be used degrades instead of raising."""

    def test_malformed_locale_with_path_loader(self, locales_dir: Path) -> None:
        l10n = Localization(PathResourceLoader(f"{locales_dir.as_posix()}/{{locale}}"), _plain())

        value, errors = l10n.format_pattern("close-button", locale="a/b")

        assert value == "Close"
        (error,) = errors
        assert error.diagnostic is not None
        assert error.diagnostic.code is DiagnosticCode.LOCALE_UNAVAILABLE

    def test_malformed_locale_with_missing_key(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader, _plain())

        value, errors = l10n.format_pattern("nope", locale="../de")

        assert value == "{nope}"
        assert [type(e) for e in errors] == [CatalogError, MissingKeyError]

    def test_broken_lazy_catalog(self) -> None:
        loader = MemoryResourceLoader(
            {
                "en": {"main.ftl": "a = A\n"},
                "de": {"main.ftl": "a = Eins\n", "more.ftl": "a = Zwei\n"},
            }
        )
        l10n = Localization(loader, _plain())

        value, errors = l10n.format_pattern("a", locale="de")

        assert value == "A"
        (error,) = errors
        assert isinstance(error, DuplicateKeyError)
        assert l10n.format_value("a", locale="de") == "A"
        assert not l10n.has_message("a", locale="de")

    def test_strict_junk_in_override(self) -> None:
        loader = MemoryResourceLoader(
            {"en": {"main.ftl": "a = A\n"}, "de": {"main.ftl": "a = { broken\n"}}
        )
        l10n = Localization(loader, LocalizationConfig(use_isolating=False, strict=True))

        value, errors = l10n.format_pattern("a", locale="de")

        assert value == "A"
        assert isinstance(errors[0], TemplateParseError)

    def test_malformed_locale_has_no_messages(self, memory_loader: MemoryResourceLoader) -> None:
        l10n = Localization(memory_loader)

        assert not l10n.has_message("close-button", locale="de/..")
