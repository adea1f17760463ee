"""Diagnostic codes and data structures.

Defines error codes, source locations and structured diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "SourceLocation",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Lookup errors (missing keys and arguments)
        2000-2999: Resolution errors (runtime evaluation)
        3000-3999: Syntax errors (template parser)
        4000-4999: Build errors (catalog loading, code generation)
    """

    # Lookup errors (1000-1999)
    MESSAGE_NOT_FOUND = 1001
    VARIABLE_NOT_PROVIDED = 1002
    INVALID_KEY = 1003
    LOCALE_UNAVAILABLE = 1004

    # Resolution errors (2000-2999)
    UNKNOWN_PLURAL_CATEGORY = 2001
    MAX_DEPTH_EXCEEDED = 2002
    FORMATTING_FAILED = 2003

    # Syntax errors (3000-3999)
    UNEXPECTED_EOF = 3001
    UNTERMINATED_PLACEABLE = 3002
    UNBALANCED_BRACE = 3003
    SELECT_NO_DEFAULT = 3004
    SELECT_MULTIPLE_DEFAULTS = 3005
    SELECT_NO_VARIANTS = 3006
    EXPECTED_TOKEN = 3007
    INVALID_SELECTOR = 3008
    NESTING_DEPTH_EXCEEDED = 3009
    INVALID_ESCAPE = 3010
    PARSE_JUNK = 3011

    # Build errors (4000-4999)
    DUPLICATE_KEY = 4001
    RESOURCE_LOAD_FAILED = 4002
    IDENTIFIER_COLLISION = 4003


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a diagnostic inside a definition file.

    Attributes:
        offset: Character offset (0-indexed)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        path: Human-readable file path, if known
    """

    offset: int
    line: int
    column: int
    path: str | None = None

    def __post_init__(self) -> None:
        """Validate location invariants."""
        if self.offset < 0:
            msg = f"SourceLocation.offset must be >= 0, got {self.offset}"
            raise ValueError(msg)
        if self.line < 1 or self.column < 1:
            msg = f"SourceLocation line/column are 1-indexed, got {self.line}:{self.column}"
            raise ValueError(msg)

    def __str__(self) -> str:
        prefix = f"{self.path}:" if self.path else "line "
        return f"{prefix}{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics: a stable code, a one-line
    message, an optional location and an optional fix-it hint.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        location: Source location (syntax and build errors)
        hint: Suggestion for fixing the error
        key: Message key the diagnostic is about
        locale: Locale the diagnostic is about
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    location: SourceLocation | None = None
    hint: str | None = None
    key: str | None = None
    locale: str | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic like a compiler message.

        Example output:
            error[DUPLICATE_KEY]: Key 'hello' defined twice in locale 'de'
              --> locales/de/main.ftl:4:1
              = help: Remove or rename one of the definitions

        Control characters in the message are escaped so diagnostics built
        from translator-supplied text cannot inject terminal sequences.
        """
        lines = [f"{self.severity}[{self.code.name}]: {_escape(self.message)}"]
        if self.location is not None:
            lines.append(f"  --> {self.location}")
        if self.hint:
            lines.append(f"  = help: {_escape(self.hint)}")
        return "\n".join(lines)


def _escape(text: str) -> str:
    return "".join(
        ch if ch.isprintable() or ch == " " else ch.encode("unicode_escape").decode("ascii")
        for ch in text
    )
