"""Template syntax package.

Provides the parser, AST definitions and serialization for definition files.
Separate from runtime so tooling (validators, code generators, formatters)
can work on catalogs without resolving anything.

Python 3.13+.
"""

from .ast import (
    Annotation,
    Comment,
    Entry,
    Expression,
    Identifier,
    Junk,
    Message,
    NumberLiteral,
    Pattern,
    PatternElement,
    Placeable,
    Resource,
    SelectExpression,
    Span,
    StringLiteral,
    TextElement,
    VariableReference,
    Variant,
    VariantKey,
)
from .cursor import Cursor, ParseResult
from .parser import ParseContext, TemplateParser
from .serializer import (
    SerializationValidationError,
    TemplateSerializer,
    serialize,
    serialize_pattern,
)


def parse(
    source: str, *, source_path: str | None = None, max_source_size: int | None = None
) -> Resource:
    """Parse a definition file into a Resource (never raises on bad entries).

    Example:
        >>> resource = parse("hello = Hello, { $name }!")
        >>> resource.entries[0].id.name
        'hello'
    """
    parser = TemplateParser(max_source_size=max_source_size)
    return parser.parse(source, source_path=source_path)


def parse_template(text: str, *, source_path: str | None = None) -> Pattern:
    """Parse a single template.

    Raises:
        TemplateParseError: If the template is malformed
    """
    return TemplateParser().parse_template(text, source_path=source_path)


__all__ = [
    "Annotation",
    "Comment",
    "Cursor",
    "Entry",
    "Expression",
    "Identifier",
    "Junk",
    "Message",
    "NumberLiteral",
    "ParseContext",
    "ParseResult",
    "Pattern",
    "PatternElement",
    "Placeable",
    "Resource",
    "SelectExpression",
    "SerializationValidationError",
    "Span",
    "StringLiteral",
    "TemplateParser",
    "TemplateSerializer",
    "TextElement",
    "VariableReference",
    "Variant",
    "VariantKey",
    "parse",
    "parse_template",
    "serialize",
    "serialize_pattern",
]
