"""Shared constants for ftlcatalog.

Centralizes limits and fallback strings used by the syntax, runtime and
catalog layers. Placing them here avoids circular imports.

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Limits
    "MAX_DEPTH",
    "MAX_SOURCE_SIZE",
    "MAX_LOCALE_CACHE_SIZE",
    # Locales
    "DEFAULT_REFERENCE_LOCALE",
    # Fallback strings
    "FALLBACK_INVALID",
    "FALLBACK_MISSING_MESSAGE",
    "FALLBACK_MISSING_VARIABLE",
    # File layout
    "DEFINITION_FILE_SUFFIX",
]

# ============================================================================
# LIMITS
# ============================================================================

# Unified nesting limit for the parser, resolver and serializer.
# Real definition files nest placeables two or three levels at most.
MAX_DEPTH: int = 100

# Maximum definition file size in characters (10 MB).
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# Maximum cached Babel Locale objects.
MAX_LOCALE_CACHE_SIZE: int = 128

# ============================================================================
# LOCALES
# ============================================================================

# Reference language whose catalog is complete and authoritative.
DEFAULT_REFERENCE_LOCALE: str = "en"

# ============================================================================
# FALLBACK STRINGS
# ============================================================================

# Invalid key (empty or non-string).
FALLBACK_INVALID: str = "{???}"

# Format strings - use .format(id=...) / .format(name=...)
FALLBACK_MISSING_MESSAGE: str = "{{{id}}}"  # e.g., {addons-you-have-count}
FALLBACK_MISSING_VARIABLE: str = "{{${name}}}"  # e.g., {$count}

# ============================================================================
# FILE LAYOUT
# ============================================================================

DEFINITION_FILE_SUFFIX: str = ".ftl"
