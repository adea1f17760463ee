"""ftlcatalog - Message catalog engine for localized applications.

Loads per-language definition files into immutable catalogs, resolves
message templates with plural and number support, falls back to a
reference language for missing keys, and generates stable Python
constants for message keys.

Public API:
    Localization - Language state, catalog loading and lookup with fallback
    LocalizationConfig - Reference locale, isolation and missing-key policy
    PathResourceLoader - Disk loader, one directory per language
    MemoryResourceLoader - In-memory loader
    init_localization / translate / switch_language - Process-wide helpers
    parse_template / serialize_pattern - Template text <-> AST

Exceptions:
    CatalogError - Base exception class
    TemplateParseError - Malformed template or definition file
    DuplicateKeyError - Key defined twice within one language
    MissingKeyError - Key absent everywhere (RAISE policy only)
    MissingArgumentError - Template argument not supplied
    UnknownPluralCategoryError - Variant key the locale never selects
    IdentifierCollisionError - Two keys generate the same constant

Submodules:
    ftlcatalog.syntax - AST, parser and serializer
    ftlcatalog.runtime - Plural rules, number formatting, resolver
    ftlcatalog.catalog - Loaders, catalogs and language state
    ftlcatalog.codegen - Key-constant generation and CLI
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from .catalog import (
    Catalog,
    Localization,
    MemoryResourceLoader,
    PathResourceLoader,
    get_localization,
    init_localization,
    reset_localization,
    switch_language,
    translate,
)
from .config import LocalizationConfig
from .diagnostics import (
    CatalogError,
    DuplicateKeyError,
    IdentifierCollisionError,
    MissingArgumentError,
    MissingKeyError,
    TemplateParseError,
    UnknownPluralCategoryError,
)
from .enums import MissingKeyPolicy
from .runtime import ArgumentValue
from .syntax import parse_template, serialize_pattern

try:
    __version__ = _get_version("ftlcatalog")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "ArgumentValue",
    "Catalog",
    "CatalogError",
    "DuplicateKeyError",
    "IdentifierCollisionError",
    "Localization",
    "LocalizationConfig",
    "MemoryResourceLoader",
    "MissingArgumentError",
    "MissingKeyError",
    "MissingKeyPolicy",
    "PathResourceLoader",
    "TemplateParseError",
    "UnknownPluralCategoryError",
    "__version__",
    "get_localization",
    "init_localization",
    "parse_template",
    "reset_localization",
    "serialize_pattern",
    "switch_language",
    "translate",
]
