"""Runtime resolution: plural rules, number formatting, bidi isolation.

Python 3.13+. Depends on Babel.
"""

from .bidi import UNICODE_FSI, UNICODE_PDI, isolate, strip_isolation_marks
from .numbers import NumberFormatter, format_number, get_number_formatter
from .plural_rules import (
    CLDR_PLURAL_CATEGORIES,
    PluralRule,
    PluralRuleRegistry,
    get_default_registry,
    plural_categories,
    select_plural_category,
)
from .resolver import ArgumentValue, PatternResolver

__all__ = [
    "CLDR_PLURAL_CATEGORIES",
    "UNICODE_FSI",
    "UNICODE_PDI",
    "ArgumentValue",
    "NumberFormatter",
    "PatternResolver",
    "PluralRule",
    "PluralRuleRegistry",
    "format_number",
    "get_default_registry",
    "get_number_formatter",
    "isolate",
    "plural_categories",
    "select_plural_category",
    "strip_isolation_marks",
]
