"""Tests for bidi isolation marks and locale-aware number formatting."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ftlcatalog.runtime.bidi import (
    ISOLATION_MARKS,
    UNICODE_FSI,
    UNICODE_PDI,
    isolate,
    strip_isolation_marks,
)
from ftlcatalog.runtime.numbers import format_number, get_number_formatter


class TestBidi:
    """FSI/PDI wrapping and stripping."""

    def test_isolate_wraps_text(self) -> None:
        assert isolate("3") == "\u20683\u2069"
        assert isolate("3")[0] == UNICODE_FSI
        assert isolate("3")[-1] == UNICODE_PDI

    def test_strip_removes_every_mark(self) -> None:
        text = "You have \u20683\u2069 add-ons \u2066x\u2067y\u2069."

        assert strip_isolation_marks(text) == "You have 3 add-ons xy."

    @given(text=st.text())
    def test_strip_is_idempotent(self, text: str) -> None:
        once = strip_isolation_marks(text)

        assert strip_isolation_marks(once) == once
        assert not ISOLATION_MARKS & set(once)

    @given(text=st.text())
    def test_strip_undoes_isolate(self, text: str) -> None:
        assert strip_isolation_marks(isolate(text)) == strip_isolation_marks(text)


class TestNumberFormatting:
    """Babel-backed CLDR number conventions."""

    @pytest.mark.parametrize(
        ("locale", "value", "expected"),
        [
            ("en", 1234.5, "1,234.5"),
            ("de", 1234.5, "1.234,5"),
            ("en", 3, "3"),
            ("en", 1000000, "1,000,000"),
            ("en", Decimal("0.125"), "0.125"),
            ("de", Decimal("1234.56"), "1.234,56"),
        ],
    )
    def test_format(self, locale: str, value: int | float | Decimal, expected: str) -> None:
        assert format_number(value, locale) == expected

    def test_formatter_is_cached(self) -> None:
        assert get_number_formatter("en") is get_number_formatter("en")

    def test_unknown_locale_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        get_number_formatter.cache_clear()

        with caplog.at_level(logging.WARNING, logger="ftlcatalog.runtime.numbers"):
            formatter = get_number_formatter("qq")

        assert formatter.is_fallback
        assert formatter.locale == "qq"
        assert formatter.format(1234) == "1,234"
        assert "Unknown locale 'qq'" in caplog.text
