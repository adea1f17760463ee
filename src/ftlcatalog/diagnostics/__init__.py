"""Diagnostic system for catalog errors.

Provides structured error diagnostics with codes, locations and hints.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, SourceLocation
from .errors import (
    CatalogError,
    DuplicateKeyError,
    IdentifierCollisionError,
    MissingArgumentError,
    MissingKeyError,
    TemplateParseError,
    UnknownPluralCategoryError,
)
from .templates import ErrorTemplate

__all__ = [
    "CatalogError",
    "Diagnostic",
    "DiagnosticCode",
    "DuplicateKeyError",
    "ErrorTemplate",
    "IdentifierCollisionError",
    "MissingArgumentError",
    "MissingKeyError",
    "SourceLocation",
    "TemplateParseError",
    "UnknownPluralCategoryError",
]
