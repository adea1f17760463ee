"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, SourceLocation

__all__ = ["ErrorTemplate"]


class ErrorTemplate:
    """Centralized error message templates.

    All diagnostics are created here so exception constructors never build
    f-strings inline and every message is covered by one test.
    """

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @staticmethod
    def message_not_found(key: str, locale: str) -> Diagnostic:
        """Key missing from every catalog in the lookup chain."""
        return Diagnostic(
            code=DiagnosticCode.MESSAGE_NOT_FOUND,
            message=f"Message '{key}' not found for locale '{locale}' or the reference locale",
            hint="Add the message to the reference language files and regenerate key constants",
            key=key,
            locale=locale,
        )

    @staticmethod
    def invalid_key() -> Diagnostic:
        """Empty or non-string key."""
        return Diagnostic(
            code=DiagnosticCode.INVALID_KEY,
            message="Invalid message key: empty or non-string",
        )

    @staticmethod
    def locale_unavailable(locale: str, reason: str) -> Diagnostic:
        """Per-call locale is malformed or its catalog cannot be read."""
        return Diagnostic(
            code=DiagnosticCode.LOCALE_UNAVAILABLE,
            message=f"Locale '{locale}' is unavailable: {reason}",
            hint="Pass a locale code such as 'de' or 'pt-BR'",
            locale=locale,
        )

    @staticmethod
    def variable_not_provided(name: str) -> Diagnostic:
        """Template references an argument the caller did not pass."""
        return Diagnostic(
            code=DiagnosticCode.VARIABLE_NOT_PROVIDED,
            message=f"Argument '${name}' was not provided",
            hint=f"Pass {name}=... when formatting this message",
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @staticmethod
    def unknown_plural_category(
        category: str, locale: str, key: str | None = None
    ) -> Diagnostic:
        """Variant key names a category this locale never selects."""
        where = f" in message '{key}'" if key else ""
        return Diagnostic(
            code=DiagnosticCode.UNKNOWN_PLURAL_CATEGORY,
            message=f"Plural category '{category}'{where} is never used by locale '{locale}'",
            hint="The variant is unreachable; the default variant is used instead",
            key=key,
            locale=locale,
            severity="warning",
        )

    @staticmethod
    def max_depth_exceeded(max_depth: int) -> Diagnostic:
        """Nested placeables exceed the resolution depth limit."""
        return Diagnostic(
            code=DiagnosticCode.MAX_DEPTH_EXCEEDED,
            message=f"Maximum resolution depth ({max_depth}) exceeded",
        )

    @staticmethod
    def formatting_failed(name: str, locale: str, reason: str) -> Diagnostic:
        """Babel rejected a numeric argument."""
        return Diagnostic(
            code=DiagnosticCode.FORMATTING_FAILED,
            message=f"Could not format argument '${name}' for locale '{locale}': {reason}",
            locale=locale,
        )

    # ------------------------------------------------------------------
    # Syntax
    # ------------------------------------------------------------------

    @staticmethod
    def syntax(
        code: DiagnosticCode, message: str, location: SourceLocation | None
    ) -> Diagnostic:
        """Generic syntax error at a source location."""
        return Diagnostic(code=code, message=message, location=location)

    @staticmethod
    def unexpected_eof(offset: int) -> Diagnostic:
        """Cursor read past the end of input."""
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_EOF,
            message=f"Unexpected EOF at position {offset}",
        )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @staticmethod
    def duplicate_key(
        key: str, locale: str, first_path: str | None, second_path: str | None
    ) -> Diagnostic:
        """Key defined twice within one language."""
        first = first_path or "<string>"
        second = second_path or "<string>"
        return Diagnostic(
            code=DiagnosticCode.DUPLICATE_KEY,
            message=(
                f"Key '{key}' defined twice in locale '{locale}' "
                f"(first in {first}, again in {second})"
            ),
            hint="Remove or rename one of the definitions",
            key=key,
            locale=locale,
        )

    @staticmethod
    def resource_load_failed(locale: str, source_path: str, reason: str) -> Diagnostic:
        """Definition file exists but cannot be read or decoded."""
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_LOAD_FAILED,
            message=f"Failed to load {source_path} for locale '{locale}': {reason}",
            locale=locale,
        )

    @staticmethod
    def identifier_collision(identifier: str, first: str, second: str) -> Diagnostic:
        """Two keys map to one generated constant."""
        return Diagnostic(
            code=DiagnosticCode.IDENTIFIER_COLLISION,
            message=f"Keys '{first}' and '{second}' both generate identifier '{identifier}'",
            hint="Rename one of the keys",
        )
