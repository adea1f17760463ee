"""Locale-aware number formatting for substituted arguments.

Thin wrapper over ``babel.numbers.format_decimal``: grouping separators,
decimal marks and digit shapes follow the CLDR conventions of the active
locale ("1,234.5" in en, "1.234,5" in de, "1 234,5" in fr).

Python 3.13+. Depends on Babel.
"""

import functools
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from babel import Locale, numbers as babel_numbers
from babel.core import UnknownLocaleError

from ftlcatalog.constants import DEFAULT_REFERENCE_LOCALE, MAX_LOCALE_CACHE_SIZE
from ftlcatalog.locale_utils import get_babel_locale, normalize_locale

__all__ = ["NumberFormatter", "format_number", "get_number_formatter"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NumberFormatter:
    """Number formatter bound to one locale.

    Attributes:
        locale: Normalized locale code requested by the caller
        babel_locale: CLDR locale actually used
        is_fallback: True when the requested locale is not in CLDR and the
            reference locale's conventions are used instead
    """

    locale: str
    babel_locale: Locale
    is_fallback: bool = False

    def format(self, value: int | float | Decimal) -> str:
        """Format a number with grouping and full fractional precision.

        Raises:
            ValueError: If Babel cannot format the value (NaN patterns,
                invalid Decimal operations)
        """
        try:
            return str(
                babel_numbers.format_decimal(
                    value, locale=self.babel_locale, decimal_quantization=False
                )
            )
        except (InvalidOperation, TypeError) as e:
            msg = f"Number formatting failed for {value!r}: {e}"
            raise ValueError(msg) from e


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_number_formatter(
    locale: str, fallback_locale: str = DEFAULT_REFERENCE_LOCALE
) -> NumberFormatter:
    """Return a cached formatter, falling back to fallback_locale if unknown.

    A fallback locale that is itself unknown to CLDR gives way to
    DEFAULT_REFERENCE_LOCALE.
    """
    normalized = normalize_locale(locale)
    try:
        return NumberFormatter(locale=normalized, babel_locale=get_babel_locale(normalized))
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(
            "Unknown locale %r for number formatting: %s. Falling back to %r",
            normalized[:50],
            e,
            fallback_locale,
        )
        try:
            babel_locale = get_babel_locale(fallback_locale)
        except (UnknownLocaleError, ValueError):
            babel_locale = get_babel_locale(DEFAULT_REFERENCE_LOCALE)
        return NumberFormatter(locale=normalized, babel_locale=babel_locale, is_fallback=True)


def format_number(value: int | float | Decimal, locale: str) -> str:
    """Format a number per locale conventions.

    Examples:
        >>> format_number(1234.5, "en")
        '1,234.5'
        >>> format_number(1234.5, "de")
        '1.234,5'
    """
    return get_number_formatter(locale).format(value)
