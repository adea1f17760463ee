"""Tests for PatternResolver: substitution, plural selection and errors."""

from __future__ import annotations

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ftlcatalog.diagnostics import CatalogError, DiagnosticCode, MissingArgumentError
from ftlcatalog.runtime import PatternResolver, PluralRuleRegistry, strip_isolation_marks
from ftlcatalog.syntax import parse_template

ADDONS = parse_template(
    "{ $count -> [one] You have 1 add-on. *[other] You have { $count } add-ons. }"
)


class TestSubstitution:
    """Argument values in output."""

    def test_substituted_count_is_isolated(self) -> None:
        result, errors = PatternResolver("en").resolve(ADDONS, {"count": 3})

        assert result == "You have \u20683\u2069 add-ons."
        assert errors == ()

    def test_selected_branch_without_substitution_is_unchanged(self) -> None:
        result, errors = PatternResolver("en").resolve(ADDONS, {"count": 1})

        assert result == "You have 1 add-on."
        assert errors == ()

    def test_isolation_can_be_disabled(self) -> None:
        resolver = PatternResolver("en", use_isolating=False)

        assert resolver.resolve(ADDONS, {"count": 3})[0] == "You have 3 add-ons."

    def test_string_argument(self) -> None:
        pattern = parse_template("Hello, { $name }!")

        result, _ = PatternResolver("en", use_isolating=False).resolve(pattern, {"name": "Anna"})

        assert result == "Hello, Anna!"

    def test_literals_are_not_isolated(self) -> None:
        pattern = parse_template('{ "{" } and { 42 }')

        assert PatternResolver("en").resolve(pattern)[0] == "{ and 42"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, "true"), (False, "false"), (None, ""), (1234567, "1,234,567"), (Decimal("2.5"), "2.5")],
    )
    def test_value_formatting(self, value: object, expected: str) -> None:
        pattern = parse_template("{ $v }")

        result, errors = PatternResolver("en", use_isolating=False).resolve(pattern, {"v": value})  # type: ignore[dict-item]

        assert result == expected
        assert errors == ()

    def test_numbers_follow_locale(self) -> None:
        pattern = parse_template("{ $v }")

        assert PatternResolver("de", use_isolating=False).resolve(pattern, {"v": 1234.5})[0] == "1.234,5"

    def test_nested_placeable(self) -> None:
        pattern = parse_template("{{ $x }}")

        assert PatternResolver("en", use_isolating=False).resolve(pattern, {"x": "y"})[0] == "y"


class TestMissingArguments:
    """Missing arguments render a placeholder and are reported."""

    def test_missing_argument(self) -> None:
        pattern = parse_template("Hello, { $name }!")

        result, errors = PatternResolver("en").resolve(pattern, {})

        assert result == "Hello, {$name}!"
        (error,) = errors
        assert isinstance(error, MissingArgumentError)
        assert error.name == "name"
        assert error.diagnostic is not None
        assert error.diagnostic.code is DiagnosticCode.VARIABLE_NOT_PROVIDED

    def test_missing_selector_uses_default_variant(self) -> None:
        result, errors = PatternResolver("en", use_isolating=False).resolve(ADDONS)

        assert result == "You have {$count} add-ons."
        assert len(errors) == 2
        assert all(isinstance(e, MissingArgumentError) for e in errors)


class TestSelection:
    """Exact match, then plural category, then default."""

    def test_exact_number_match_beats_category(self) -> None:
        pattern = parse_template("{ $n -> [0] none [one] one *[other] many }")
        resolver = PatternResolver("en")

        assert resolver.resolve(pattern, {"n": 0})[0] == "none"
        assert resolver.resolve(pattern, {"n": 1})[0] == "one"
        assert resolver.resolve(pattern, {"n": 7})[0] == "many"

    def test_decimal_equal_to_number_key(self) -> None:
        pattern = parse_template("{ $n -> [1.5] exact *[other] other }")

        assert PatternResolver("en").resolve(pattern, {"n": Decimal("1.50")})[0] == "exact"

    def test_string_selector_matches_identifier_key(self) -> None:
        pattern = parse_template("{ $gender -> [female] her [male] his *[other] their }")
        resolver = PatternResolver("en")

        assert resolver.resolve(pattern, {"gender": "female"})[0] == "her"
        assert resolver.resolve(pattern, {"gender": "unknown"})[0] == "their"

    def test_bool_is_not_a_plural_selector(self) -> None:
        pattern = parse_template("{ $flag -> [one] one [true] yes *[other] no }")

        assert PatternResolver("en").resolve(pattern, {"flag": True})[0] == "yes"

    def test_locale_plural_rules(self) -> None:
        pattern = parse_template(
            "{ $n -> [one] { $n } файл [few] { $n } файла *[many] { $n } файлов }"
        )
        resolver = PatternResolver("ru", use_isolating=False)

        assert resolver.resolve(pattern, {"n": 21})[0] == "21 файл"
        assert resolver.resolve(pattern, {"n": 3})[0] == "3 файла"
        assert resolver.resolve(pattern, {"n": 5})[0] == "5 файлов"

    def test_missing_category_variant_uses_default(self) -> None:
        pattern = parse_template("{ $n -> [few] few *[other] other }")

        assert PatternResolver("en").resolve(pattern, {"n": 3})[0] == "other"

    def test_custom_registry(self) -> None:
        registry = PluralRuleRegistry()
        registry.register("en", lambda n: "other")

        result, _ = PatternResolver("en", plural_rules=registry).resolve(ADDONS, {"count": 1})

        assert strip_isolation_marks(result) == "You have 1 add-ons."

    @given(count=st.integers(min_value=0, max_value=10**9))
    def test_english_count_always_resolves(self, count: int) -> None:
        result, errors = PatternResolver("en", use_isolating=False).resolve(ADDONS, {"count": count})

        assert errors == ()
        if count == 1:
            assert result == "You have 1 add-on."
        else:
            assert result.startswith("You have ")
            assert result.endswith(" add-ons.")


class TestDepthLimit:
    """Resolution depth is bounded."""

    def test_max_depth(self) -> None:
        pattern = parse_template("{{{ $x }}}")

        result, errors = PatternResolver("en", max_depth=1).resolve(pattern, {"x": "y"})

        assert result == "{???}"
        assert any(
            isinstance(e, CatalogError)
            and e.diagnostic is not None
            and e.diagnostic.code is DiagnosticCode.MAX_DEPTH_EXCEEDED
            for e in errors
        )
