"""Tests for CLDR plural rule selection and the rule registry."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ftlcatalog.runtime.plural_rules import (
    CLDR_PLURAL_CATEGORIES,
    PluralRuleRegistry,
    plural_categories,
    select_plural_category,
)


class TestCLDRSelection:
    """Categories come from Babel's CLDR data."""

    @pytest.mark.parametrize(
        ("n", "expected"),
        [(0, "other"), (1, "one"), (2, "other"), (3, "other"), (101, "other")],
    )
    def test_english(self, n: int, expected: str) -> None:
        assert select_plural_category(n, "en") == expected

    @pytest.mark.parametrize(
        ("n", "expected"),
        [(1, "one"), (21, "one"), (2, "few"), (4, "few"), (22, "few"), (5, "many"), (11, "many")],
    )
    def test_russian(self, n: int, expected: str) -> None:
        assert select_plural_category(n, "ru") == expected

    @pytest.mark.parametrize(("n", "expected"), [(0, "zero"), (10, "zero"), (1, "one"), (2, "other")])
    def test_latvian(self, n: int, expected: str) -> None:
        assert select_plural_category(n, "lv") == expected

    @pytest.mark.parametrize(
        ("n", "expected"),
        [(0, "zero"), (1, "one"), (2, "two"), (3, "few"), (11, "many"), (100, "other")],
    )
    def test_arabic(self, n: int, expected: str) -> None:
        assert select_plural_category(n, "ar") == expected

    def test_japanese_has_only_other(self) -> None:
        assert plural_categories("ja") == frozenset({"other"})

    def test_region_uses_language_rule(self) -> None:
        assert select_plural_category(5, "ru-RU") == "many"

    def test_decimal_input(self) -> None:
        assert select_plural_category(Decimal("1.5"), "en") == "other"

    def test_categories(self) -> None:
        assert plural_categories("en") == frozenset({"one", "other"})
        assert plural_categories("ar") == CLDR_PLURAL_CATEGORIES

    @given(n=st.integers(min_value=-10**6, max_value=10**6))
    def test_result_is_always_a_cldr_category(self, n: int) -> None:
        for locale in ("en", "ru", "ar", "lv", "pl", "ja"):
            category = select_plural_category(n, locale)
            assert category in CLDR_PLURAL_CATEGORIES
            assert category in plural_categories(locale)


class TestRegistry:
    """Explicit registration and fallback."""

    def test_registered_rule_wins_over_cldr(self) -> None:
        registry = PluralRuleRegistry()
        registry.register("en", lambda n: "other")

        assert registry.select(1, "en") == "other"
        assert registry.categories("en") == frozenset({"other"})

    def test_language_rule_applies_to_regions(self) -> None:
        registry = PluralRuleRegistry()
        registry.register("xx", lambda n: "few" if n < 5 else "other")

        assert registry.select(2, "xx-YY") == "few"
        assert registry.categories("xx_YY") == frozenset({"few", "other"})

    def test_explicit_categories(self) -> None:
        registry = PluralRuleRegistry()
        registry.register("xx", lambda n: "other", categories=["one"])

        assert registry.categories("xx") == frozenset({"one", "other"})

    def test_non_cldr_category_rejected(self) -> None:
        registry = PluralRuleRegistry()

        with pytest.raises(ValueError, match="non-CLDR"):
            registry.register("xx", lambda n: "several")

    def test_registration_clears_resolved_cache(self) -> None:
        registry = PluralRuleRegistry()
        assert registry.select(1, "en") == "one"

        registry.register("en", lambda n: "other")

        assert registry.select(1, "en") == "other"

    def test_unknown_language_uses_reference_rule(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = PluralRuleRegistry(reference_locale="en")

        with caplog.at_level(logging.WARNING, logger="ftlcatalog.runtime.plural_rules"):
            assert registry.select(1, "qq") == "one"
            assert registry.select(2, "qq") == "other"

        assert "No plural rule for locale 'qq'" in caplog.text

    def test_reference_locale_rule_used_for_fallback(self) -> None:
        registry = PluralRuleRegistry(reference_locale="ru")

        assert registry.reference_locale == "ru"
        assert registry.select(5, "qq") == "many"

    def test_get_rule_is_callable(self) -> None:
        rule = PluralRuleRegistry().get_rule("pl")

        assert rule(1) == "one"
        assert rule(3) == "few"
        assert rule(5) == "many"
