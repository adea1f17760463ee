"""Catalog exception hierarchy with structured diagnostics.

All exceptions optionally carry a Diagnostic for rich error information.
Build-time errors (parse, duplicate key, identifier collision) are raised;
runtime errors (missing key, missing argument, unknown plural category) are
normally collected into error tuples and only raised on request.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, SourceLocation

__all__ = [
    "CatalogError",
    "DuplicateKeyError",
    "IdentifierCollisionError",
    "MissingArgumentError",
    "MissingKeyError",
    "TemplateParseError",
    "UnknownPluralCategoryError",
]


class CatalogError(Exception):
    """Base exception for all catalog errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)


class TemplateParseError(CatalogError):
    """Malformed template or definition file.

    Fatal at build time for the reference language: a release with a broken
    reference catalog is a broken artifact.

    Attributes:
        location: Where the parser gave up (None for programmatic input)
        key: Message key being parsed, if known
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        location: SourceLocation | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        if location is None and self.diagnostic is not None:
            location = self.diagnostic.location
        self.location = location
        self.key = key


class DuplicateKeyError(CatalogError):
    """A key is defined more than once within one language.

    Attributes:
        key: The duplicated key
        locale: Locale whose files collide
        first_path: Resource that defined the key first
        second_path: Resource that redefined it
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        key: str,
        locale: str,
        first_path: str | None = None,
        second_path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.locale = locale
        self.first_path = first_path
        self.second_path = second_path


class MissingKeyError(CatalogError):
    """Key absent from the active catalogs and the reference catalog."""

    def __init__(self, message: str | Diagnostic, *, key: str, locale: str) -> None:
        super().__init__(message)
        self.key = key
        self.locale = locale


class MissingArgumentError(CatalogError):
    """Template references an argument the caller did not supply."""

    def __init__(self, message: str | Diagnostic, *, name: str) -> None:
        super().__init__(message)
        self.name = name


class UnknownPluralCategoryError(CatalogError):
    """Variant key names a plural category the locale never produces.

    Recoverable: the select expression still falls back to its default
    variant, so the branch is dead rather than wrong.
    """

    def __init__(
        self, message: str | Diagnostic, *, category: str, locale: str, key: str | None = None
    ) -> None:
        super().__init__(message)
        self.category = category
        self.locale = locale
        self.key = key


class IdentifierCollisionError(CatalogError):
    """Two message keys would generate the same constant name."""

    def __init__(self, message: str | Diagnostic, *, identifier: str, keys: tuple[str, str]) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.keys = keys
