"""Type aliases for the catalog domain.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "LocaleCode",
    "MessageKey",
    "ResourceId",
    "TemplateSource",
]

type MessageKey = str
"""Key of a message (e.g., 'close-button', 'addons-you-have-count')."""

type LocaleCode = str
"""Locale code (e.g., 'en', 'pt_BR', 'sr-Latn-RS')."""

type ResourceId = str
"""Definition file identifier (e.g., 'main.ftl', 'addons.ftl')."""

type TemplateSource = str
"""Raw definition file text."""
