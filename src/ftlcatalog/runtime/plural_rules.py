"""CLDR plural rules with a table-driven registry.

Maps a locale code to a pure function ``(number) -> category`` where category
is one of ``zero``, ``one``, ``two``, ``few``, ``many`` or ``other``. Rules
come from an explicit registration table first and from Babel's CLDR data
otherwise, so adding a language never touches call sites.

Lookup order for a locale:
    1. Rule registered for the exact normalized locale ("pt_BR")
    2. Rule registered for the language subtag ("pt")
    3. Babel CLDR rule for the locale
    4. The reference locale's rule (unknown languages)

Python 3.13+. Depends on Babel for CLDR data.

Reference: https://www.unicode.org/cldr/charts/47/supplemental/language_plural_rules.html
"""

import logging
import threading
from collections.abc import Callable, Iterable
from decimal import Decimal

from babel.core import UnknownLocaleError

from ftlcatalog.constants import DEFAULT_REFERENCE_LOCALE
from ftlcatalog.locale_utils import get_babel_locale, language_of, normalize_locale

__all__ = [
    "CLDR_PLURAL_CATEGORIES",
    "PluralRule",
    "PluralRuleRegistry",
    "get_default_registry",
    "plural_categories",
    "select_plural_category",
]

logger = logging.getLogger(__name__)

type PluralRule = Callable[[int | float | Decimal], str]

CLDR_PLURAL_CATEGORIES: frozenset[str] = frozenset(
    {"zero", "one", "two", "few", "many", "other"}
)

# Sample values used to discover the categories of a custom rule.
_SAMPLE_VALUES: tuple[int | Decimal, ...] = (
    *range(0, 201),
    1000,
    1000000,
    Decimal("0.5"),
    Decimal("1.5"),
    Decimal("2.5"),
)


def _one_other(n: int | float | Decimal) -> str:
    """Last-resort rule when even the reference locale is not in CLDR."""
    return "one" if abs(n) == 1 else "other"


class PluralRuleRegistry:
    """Locale -> plural rule table with CLDR fallback.

    Thread-safe: registration and the resolution cache are guarded by a
    lock; rules themselves are pure functions.

    Example:
        >>> registry = PluralRuleRegistry()
        >>> registry.select(1, "en")
        'one'
        >>> registry.select(5, "ru")
        'many'
        >>> registry.register("tlh", lambda n: "other")
        >>> registry.select(1, "tlh")
        'other'
    """

    __slots__ = ("_categories", "_lock", "_reference_locale", "_resolved", "_rules")

    def __init__(self, reference_locale: str = DEFAULT_REFERENCE_LOCALE) -> None:
        self._reference_locale = normalize_locale(reference_locale)
        self._rules: dict[str, tuple[PluralRule, frozenset[str]]] = {}
        self._resolved: dict[str, tuple[PluralRule, frozenset[str]]] = {}
        self._categories: dict[str, frozenset[str]] = {}
        self._lock = threading.Lock()

    @property
    def reference_locale(self) -> str:
        """Locale whose rule serves languages with no rule of their own."""
        return self._reference_locale

    def register(
        self,
        locale: str,
        rule: PluralRule,
        *,
        categories: Iterable[str] | None = None,
    ) -> None:
        """Register a rule for a locale or language code.

        Args:
            locale: Locale ("pt_BR") or language ("pt") the rule applies to
            rule: Pure function mapping a number to a CLDR category
            categories: Categories the rule can return; inferred from a set of
                sample numbers when omitted

        Raises:
            ValueError: If categories name something other than a CLDR
                plural category
        """
        key = normalize_locale(locale)
        if categories is None:
            found = frozenset(rule(value) for value in _SAMPLE_VALUES) | {"other"}
        else:
            found = frozenset(categories) | {"other"}
        unknown = found - CLDR_PLURAL_CATEGORIES
        if unknown:
            msg = f"Plural rule for '{key}' returns non-CLDR categories: {sorted(unknown)}"
            raise ValueError(msg)
        with self._lock:
            self._rules[key] = (rule, found)
            self._resolved.clear()
        logger.info("Registered plural rule for %s (categories: %s)", key, sorted(found))

    def _babel_rule(self, locale: str) -> tuple[PluralRule, frozenset[str]] | None:
        try:
            plural_form = get_babel_locale(locale).plural_form
        except (UnknownLocaleError, ValueError):
            return None
        return plural_form, frozenset(plural_form.tags) | {"other"}

    def _resolve(self, locale: str) -> tuple[PluralRule, frozenset[str]]:
        normalized = normalize_locale(locale)
        cached = self._resolved.get(normalized)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._resolved.get(normalized)
            if cached is not None:
                return cached

            entry = self._rules.get(normalized) or self._rules.get(language_of(normalized))
            if entry is None:
                entry = self._babel_rule(normalized)
            if entry is None:
                logger.warning(
                    "No plural rule for locale %r; using rule of reference locale %r",
                    normalized[:50],
                    self._reference_locale,
                )
                reference = self._rules.get(self._reference_locale)
                entry = (
                    reference
                    or self._babel_rule(self._reference_locale)
                    or (_one_other, frozenset({"one", "other"}))
                )
            self._resolved[normalized] = entry
            return entry

    def get_rule(self, locale: str) -> PluralRule:
        """Return the plural rule function for locale."""
        return self._resolve(locale)[0]

    def select(self, n: int | float | Decimal, locale: str) -> str:
        """Select the CLDR plural category of n in locale.

        Examples:
            >>> PluralRuleRegistry().select(0, "lv")
            'zero'
            >>> PluralRuleRegistry().select(2, "ar")
            'two'
        """
        return self._resolve(locale)[0](n)

    def categories(self, locale: str) -> frozenset[str]:
        """Return every category locale's rule can produce (always has 'other')."""
        return self._resolve(locale)[1]


_default_registry = PluralRuleRegistry()


def get_default_registry() -> PluralRuleRegistry:
    """Return the process-wide registry used by the resolver."""
    return _default_registry


def select_plural_category(n: int | float | Decimal, locale: str) -> str:
    """Select CLDR plural category for a number.

    Args:
        n: Number to categorize
        locale: Locale code (e.g., "lv_LV", "en_US", "ar-SA")

    Returns:
        Plural category: "zero", "one", "two", "few", "many", or "other"

    Examples:
        >>> select_plural_category(1, "en_US")
        'one'
        >>> select_plural_category(5, "ru_RU")
        'many'
        >>> select_plural_category(42, "ja_JP")
        'other'
    """
    return _default_registry.select(n, locale)


def plural_categories(locale: str) -> frozenset[str]:
    """Return the plural categories used by locale.

    Example:
        >>> sorted(plural_categories("en"))
        ['one', 'other']
    """
    return _default_registry.categories(locale)
