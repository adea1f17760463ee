"""Localization configuration.

A single frozen dataclass collects every knob of :class:`Localization`, so
the process-wide initialization point takes one typed object instead of a
growing list of keyword arguments.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from ftlcatalog.constants import DEFAULT_REFERENCE_LOCALE, MAX_SOURCE_SIZE
from ftlcatalog.enums import MissingKeyPolicy
from ftlcatalog.locale_utils import normalize_locale, validate_locale_code

__all__ = ["LocalizationConfig"]


@dataclass(frozen=True, slots=True)
class LocalizationConfig:
    """Immutable configuration for Localization.

    Attributes:
        reference_locale: Language whose catalog is complete and loaded
            eagerly; its parse errors are fatal (default: "en").
        use_isolating: Wrap substituted arguments in FSI/PDI (default: True).
            Disable only for output that never reaches bidi-aware display.
        missing_key: What happens when no catalog defines a key
            (default: PLACEHOLDER, which renders ``{key}``).
        strict: Treat junk and unreadable files in non-reference languages
            as fatal instead of falling back to the reference (default: False).
        max_source_size: Maximum definition file size in characters
            (default: 10 MB). 0 disables the limit.

    Example:
        >>> config = LocalizationConfig(reference_locale="en", strict=True)
        >>> config.missing_key
        <MissingKeyPolicy.PLACEHOLDER: 'placeholder'>
    """

    reference_locale: str = DEFAULT_REFERENCE_LOCALE
    use_isolating: bool = True
    missing_key: MissingKeyPolicy = MissingKeyPolicy.PLACEHOLDER
    strict: bool = False
    max_source_size: int = MAX_SOURCE_SIZE

    def __post_init__(self) -> None:
        """Validate and normalize configuration values.

        Raises:
            ValueError: If reference_locale is malformed, missing_key is not
                a known policy, or max_source_size is negative.
        """
        validate_locale_code(self.reference_locale)
        object.__setattr__(self, "reference_locale", normalize_locale(self.reference_locale))
        # Accept plain strings ("raise") from config files
        object.__setattr__(self, "missing_key", MissingKeyPolicy(self.missing_key))
        if self.max_source_size < 0:
            msg = "max_source_size must be non-negative"
            raise ValueError(msg)
