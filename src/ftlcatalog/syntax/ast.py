"""Template AST (Abstract Syntax Tree) node definitions.

Covers the subset of Fluent syntax used by message catalogs: messages with
text, argument placeables and select expressions, plus translator comments
and Junk for unparseable entries. All nodes are frozen so parsed catalogs
can be shared across threads.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from typing import TypeIs

from ftlcatalog.enums import CommentType

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Base types
    "Span",
    "Annotation",
    "Identifier",
    # Resource structure
    "Resource",
    "Message",
    "Comment",
    "Junk",
    # Pattern elements
    "Pattern",
    "TextElement",
    "Placeable",
    # Expressions
    "SelectExpression",
    "Variant",
    "StringLiteral",
    "NumberLiteral",
    "VariableReference",
    # Type aliases
    "Entry",
    "PatternElement",
    "Expression",
    "VariantKey",
]

# ============================================================================
# BASE TYPES
# ============================================================================


@dataclass(frozen=True, slots=True)
class Span:
    """Source position span (character offsets, end exclusive)."""

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate span invariants."""
        if self.start < 0:
            msg = f"Span start must be >= 0, got {self.start}"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"Span end ({self.end}) must be >= start ({self.start})"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Annotation:
    """Parse error annotation attached to Junk.

    Attributes:
        code: DiagnosticCode name (e.g., "SELECT_NO_DEFAULT")
        message: Human-readable error message
        span: Location of the error
    """

    code: str
    message: str
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Identifier:
    """Identifier: [a-zA-Z][a-zA-Z0-9_-]*"""

    name: str

    @staticmethod
    def guard(key: object) -> TypeIs["Identifier"]:
        """Type guard for Identifier (used in variant keys)."""
        return isinstance(key, Identifier)


# ============================================================================
# TOP-LEVEL ENTRIES
# ============================================================================


@dataclass(frozen=True, slots=True)
class Resource:
    """Root AST node: one parsed definition file."""

    entries: tuple["Entry", ...]


@dataclass(frozen=True, slots=True)
class Message:
    """Message definition.

    Examples:
        close-button = Close
        addons-you-have-count = { $count -> [one] One add-on *[other] { $count } add-ons }
    """

    id: Identifier
    value: "Pattern"
    comment: "Comment | None" = None
    span: Span | None = None

    @staticmethod
    def guard(entry: object) -> TypeIs["Message"]:
        """Type guard for Message (used in entry filtering)."""
        return isinstance(entry, Message)


@dataclass(frozen=True, slots=True)
class Comment:
    """Comment (# message, ## group, ### resource)."""

    content: str
    type: CommentType
    span: Span | None = None

    @staticmethod
    def guard(entry: object) -> TypeIs["Comment"]:
        """Type guard for Comment (used in entry filtering)."""
        return isinstance(entry, Comment)


@dataclass(frozen=True, slots=True)
class Junk:
    """Unparseable content kept for error reporting.

    The parser wraps a malformed entry in Junk and keeps going, so one bad
    line does not hide every later definition in the file.
    """

    content: str
    annotations: tuple[Annotation, ...] = ()
    span: Span | None = None

    @staticmethod
    def guard(entry: object) -> TypeIs["Junk"]:
        """Type guard for Junk (used in entry filtering)."""
        return isinstance(entry, Junk)


# ============================================================================
# PATTERNS
# ============================================================================


@dataclass(frozen=True, slots=True)
class Pattern:
    """Template body: literal text and placeables in source order."""

    elements: tuple["PatternElement", ...]


@dataclass(frozen=True, slots=True)
class TextElement:
    """Plain text segment."""

    value: str

    @staticmethod
    def guard(elem: object) -> TypeIs["TextElement"]:
        """Type guard for TextElement."""
        return isinstance(elem, TextElement)


@dataclass(frozen=True, slots=True)
class Placeable:
    """Dynamic content: { expression }"""

    expression: "Expression"

    @staticmethod
    def guard(elem: object) -> TypeIs["Placeable"]:
        """Type guard for Placeable."""
        return isinstance(elem, Placeable)


# ============================================================================
# EXPRESSIONS
# ============================================================================


@dataclass(frozen=True, slots=True)
class SelectExpression:
    """Plural (or exact-value) branching on one argument.

    Example:
        { $count ->
            [one] 1 item
           *[other] { $count } items
        }
    """

    selector: "VariableReference"
    variants: tuple["Variant", ...]

    @property
    def default_variant(self) -> "Variant":
        """The variant marked with ``*``.

        The parser guarantees exactly one; programmatic ASTs without one
        fall back to the last variant.
        """
        for variant in self.variants:
            if variant.default:
                return variant
        return self.variants[-1]

    @staticmethod
    def guard(expr: object) -> TypeIs["SelectExpression"]:
        """Type guard for SelectExpression."""
        return isinstance(expr, SelectExpression)


@dataclass(frozen=True, slots=True)
class Variant:
    """Single branch of a select expression."""

    key: "VariantKey"
    value: Pattern
    default: bool = False


@dataclass(frozen=True, slots=True)
class StringLiteral:
    """String literal: "text"

    Used to write characters that are otherwise syntax, e.g. ``{ "{" }``.
    Supports escape sequences \\", \\\\, \\uXXXX and \\UXXXXXX.
    """

    value: str


@dataclass(frozen=True, slots=True)
class NumberLiteral:
    """Number literal: 42 or 3.14

    The raw field preserves the original source for serialization.
    """

    value: int | float
    raw: str

    @staticmethod
    def guard(key: object) -> TypeIs["NumberLiteral"]:
        """Type guard for NumberLiteral (used in variant keys)."""
        return isinstance(key, NumberLiteral)


@dataclass(frozen=True, slots=True)
class VariableReference:
    """Argument reference: $name"""

    id: Identifier

    @staticmethod
    def guard(expr: object) -> TypeIs["VariableReference"]:
        """Type guard for VariableReference."""
        return isinstance(expr, VariableReference)


# ============================================================================
# TYPE ALIASES
# ============================================================================

type Entry = Message | Comment | Junk
type PatternElement = TextElement | Placeable
type Expression = (
    SelectExpression | VariableReference | StringLiteral | NumberLiteral | Placeable
)
type VariantKey = Identifier | NumberLiteral
