"""Locale utilities for BCP-47 to POSIX conversion and fallback chains.

Centralizes locale normalization so catalog lookups, plural rules and number
formatting all agree on one canonical spelling of a locale code.

Python 3.13+.
"""

from __future__ import annotations

import functools
import os
from typing import TYPE_CHECKING

from ftlcatalog.constants import DEFAULT_REFERENCE_LOCALE, MAX_LOCALE_CACHE_SIZE

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "build_locale_chain",
    "compose_locale",
    "get_babel_locale",
    "get_system_locale",
    "language_of",
    "normalize_locale",
    "validate_locale_code",
]


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to the POSIX form used internally.

    Language subtags are lowercased and region subtags uppercased so that
    "en-us", "en_US" and "EN-US" share one catalog and one cache entry.

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale("PT-br")
        'pt_BR'
        >>> normalize_locale("sr-Latn-RS")
        'sr_Latn_RS'
    """
    parts = locale_code.replace("-", "_").split("_")
    normalized = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha():
            normalized.append(part.title())  # script subtag
        elif len(part) in (2, 3):
            normalized.append(part.upper())  # region subtag
        else:
            normalized.append(part)
    return "_".join(normalized)


def validate_locale_code(locale_code: str) -> None:
    """Reject empty or malformed locale codes.

    Raises:
        ValueError: If the code is empty or contains characters other than
            ASCII letters, digits, hyphens and underscores.
    """
    if not locale_code:
        msg = "Locale code cannot be empty"
        raise ValueError(msg)
    stripped = locale_code.replace("_", "").replace("-", "")
    if not (stripped.isascii() and stripped.isalnum()):
        msg = f"Invalid locale code format: '{locale_code}'"
        raise ValueError(msg)


def language_of(locale_code: str) -> str:
    """Return the language subtag of a locale code ("pt_BR" -> "pt")."""
    return normalize_locale(locale_code).split("_", 1)[0]


def compose_locale(language: str, region: str | None = None) -> str:
    """Join a language and optional regional variant into one locale code.

    Example:
        >>> compose_locale("pt", "br")
        'pt_BR'
        >>> compose_locale("de")
        'de'
    """
    validate_locale_code(language)
    if region:
        validate_locale_code(region)
        return normalize_locale(f"{language}_{region}")
    return normalize_locale(language)


def build_locale_chain(
    locale_code: str, reference_locale: str = DEFAULT_REFERENCE_LOCALE
) -> tuple[str, ...]:
    """Build the lookup chain for a locale, ending with the reference locale.

    Each subtag is dropped in turn, then the reference locale is appended.
    Duplicates are removed while preserving order.

    Example:
        >>> build_locale_chain("pt-BR", "en")
        ('pt_BR', 'pt', 'en')
        >>> build_locale_chain("en_GB", "en")
        ('en_GB', 'en')
    """
    parts = normalize_locale(locale_code).split("_")
    chain = ["_".join(parts[:i]) for i in range(len(parts), 0, -1)]
    chain.append(normalize_locale(reference_locale))
    return tuple(dict.fromkeys(chain))


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Raises:
        babel.core.UnknownLocaleError: If the locale is not in CLDR
        ValueError: If the locale format is invalid
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(normalize_locale(locale_code))


def get_system_locale(*, raise_on_failure: bool = False) -> str:
    """Detect the process locale from LC_ALL, LC_MESSAGES or LANG.

    The "C" and "POSIX" pseudo-locales are ignored and encoding suffixes
    such as ".UTF-8" are stripped.

    Args:
        raise_on_failure: Raise RuntimeError instead of returning the
            default reference locale when nothing usable is set.

    Returns:
        Normalized locale code.
    """
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var)
        if value and value not in ("C", "POSIX"):
            locale_code = value.split(".")[0].split("@")[0]
            if locale_code and locale_code not in ("C", "POSIX"):
                return normalize_locale(locale_code)

    if raise_on_failure:
        msg = (
            "Could not determine system locale. "
            "Set LC_ALL, LC_MESSAGES, or LANG environment variable."
        )
        raise RuntimeError(msg)

    return DEFAULT_REFERENCE_LOCALE
