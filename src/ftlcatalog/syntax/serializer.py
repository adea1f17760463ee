"""Serialize template AST back to definition-file syntax.

Converts AST nodes to source text. Useful for:
- Normalizing translator files
- Code generators and catalog export
- Property-based testing (roundtrip: parse -> serialize -> parse)

Messages whose pattern spans several lines or contains a select expression
are written in block form::

    emails =
        { $count ->
            [one] You have one new email.
           *[other] You have { $count } new emails.
        }

Python 3.13+.
"""

from ftlcatalog.enums import CommentType

from .ast import (
    Comment,
    Entry,
    Expression,
    Identifier,
    Junk,
    Message,
    NumberLiteral,
    Pattern,
    Placeable,
    Resource,
    SelectExpression,
    StringLiteral,
    TextElement,
    VariableReference,
)
from .parser import is_variant_marker

__all__ = [
    "SerializationValidationError",
    "TemplateSerializer",
    "serialize",
    "serialize_pattern",
]

_INDENT = "    "

# Characters the parser treats as syntax at the start of a continuation line.
_LINE_START_SPECIAL = frozenset("[*.")

_COMMENT_PREFIXES = {
    CommentType.COMMENT: "#",
    CommentType.GROUP: "##",
    CommentType.RESOURCE: "###",
}


class SerializationValidationError(ValueError):
    """Raised when an AST cannot be written as valid definition syntax.

    Common causes:
    - SelectExpression without exactly one default variant
    - SelectExpression without variants
    """


def _validate_pattern(pattern: Pattern, context: str) -> None:
    """Check every select expression in pattern has exactly one default."""
    for element in pattern.elements:
        if isinstance(element, Placeable):
            _validate_expression(element.expression, context)


def _validate_expression(expr: Expression, context: str) -> None:
    match expr:
        case SelectExpression():
            default_count = sum(1 for v in expr.variants if v.default)
            if default_count != 1:
                msg = (
                    f"SelectExpression in {context} has {default_count} default variants "
                    "(requires exactly one *[key])"
                )
                raise SerializationValidationError(msg)
            for variant in expr.variants:
                _validate_pattern(variant.value, context)
        case Placeable():
            _validate_expression(expr.expression, context)
        case _:
            pass


def _escape_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return "".join(ch if ch >= " " else f"\\u{ord(ch):04X}" for ch in escaped)


def _literal(ch: str) -> str:
    return f'{{ "{_escape_string(ch)}" }}'


def _has_block_content(pattern: Pattern) -> bool:
    for element in pattern.elements:
        if isinstance(element, TextElement) and "\n" in element.value:
            return True
        if isinstance(element, Placeable) and isinstance(element.expression, SelectExpression):
            return True
    return False


def _strip_line_ends(text: str) -> str:
    return "\n".join(line.rstrip(" ") for line in text.split("\n"))


class TemplateSerializer:
    """Converts AST back to definition-file source.

    Thread-safe: no mutable instance state; all output is local to each call.

    Usage:
        >>> from ftlcatalog.syntax import parse, TemplateSerializer
        >>> resource = parse("hello = Hello, world!")
        >>> TemplateSerializer().serialize(resource)
        'hello = Hello, world!\\n'
    """

    def serialize(self, resource: Resource, *, validate: bool = True) -> str:
        """Serialize Resource to source text.

        Raises:
            SerializationValidationError: If validate=True and a select
                expression does not have exactly one default variant
        """
        output: list[str] = []
        for entry in resource.entries:
            if validate and isinstance(entry, Message):
                _validate_pattern(entry.value, f"message '{entry.id.name}'")
            self._serialize_entry(entry, output)
        return "".join(output)

    def serialize_pattern(self, pattern: Pattern, *, validate: bool = True) -> str:
        """Serialize a standalone template (the text after ``key =``)."""
        if validate:
            _validate_pattern(pattern, "template")
        output: list[str] = []
        block = _has_block_content(pattern)
        if block:
            output.append("\n" + _INDENT)
        self._serialize_pattern(pattern, output, _INDENT, line_start=block, in_variant=False)
        return _strip_line_ends("".join(output))

    def _serialize_entry(self, entry: Entry, output: list[str]) -> None:
        match entry:
            case Message():
                self._serialize_message(entry, output)
            case Comment():
                self._serialize_comment(entry, output)
                output.append("\n")
            case Junk():
                output.append(entry.content)
                if not entry.content.endswith("\n"):
                    output.append("\n")

    def _serialize_message(self, node: Message, output: list[str]) -> None:
        if node.comment is not None:
            self._serialize_comment(node.comment, output)

        value = self.serialize_pattern(node.value, validate=False)
        separator = "" if value.startswith("\n") else " "
        output.append(f"{node.id.name} ={separator}{value}".rstrip(" "))
        output.append("\n")

    def _serialize_comment(self, node: Comment, output: list[str]) -> None:
        prefix = _COMMENT_PREFIXES[node.type]
        for line in node.content.split("\n"):
            output.append(f"{prefix} {line}\n" if line else f"{prefix}\n")

    def _serialize_pattern(
        self,
        pattern: Pattern,
        output: list[str],
        indent: str,
        *,
        line_start: bool,
        in_variant: bool,
    ) -> None:
        """Serialize pattern elements.

        Text is escaped with string-literal placeables wherever the parser
        would read it as syntax: braces anywhere, ``[``, ``*`` and ``.`` at the
        start of a line, and variant markers inside variant text.
        """
        for element in pattern.elements:
            if isinstance(element, TextElement):
                line_start = self._serialize_text(
                    element.value, output, indent, line_start=line_start, in_variant=in_variant
                )
            else:
                self._serialize_placeable(element.expression, output, indent)
                line_start = False

    def _serialize_placeable(self, expr: Expression, output: list[str], indent: str) -> None:
        output.append("{ ")
        self._serialize_expression(expr, output, indent)
        # A select block closes on its own line at the enclosing indent.
        output.append(f"\n{indent}}}" if isinstance(expr, SelectExpression) else " }")

    @staticmethod
    def _serialize_text(
        value: str, output: list[str], indent: str, *, line_start: bool, in_variant: bool
    ) -> bool:
        """Write escaped text; return whether output ends at a line start."""
        for index, ch in enumerate(value):
            if ch == "\n":
                output.append("\n" + indent)
                line_start = True
                continue
            if ch in "{}":
                output.append(_literal(ch))
            elif line_start and ch in _LINE_START_SPECIAL:
                output.append(_literal(ch))
            elif in_variant and ch in "[*" and is_variant_marker(value, index):
                output.append(_literal(ch))
            else:
                output.append(ch)
            line_start = False
        return line_start

    def _serialize_expression(self, expr: Expression, output: list[str], indent: str) -> None:
        match expr:
            case StringLiteral():
                output.append(f'"{_escape_string(expr.value)}"')
            case NumberLiteral():
                output.append(expr.raw)
            case VariableReference():
                output.append(f"${expr.id.name}")
            case Placeable():
                self._serialize_placeable(expr.expression, output, indent)
            case SelectExpression():
                self._serialize_select_expression(expr, output, indent)

    def _serialize_select_expression(
        self, expr: SelectExpression, output: list[str], indent: str
    ) -> None:
        """Serialize the selector and one line per variant."""
        output.append(f"${expr.selector.id.name} ->")
        value_indent = indent + _INDENT + _INDENT
        for variant in expr.variants:
            marker = "   *[" if variant.default else "    ["
            match variant.key:
                case Identifier():
                    key = variant.key.name
                case NumberLiteral():
                    key = variant.key.raw
            output.append(f"\n{indent}{marker}{key}] ")
            self._serialize_pattern(
                variant.value, output, value_indent, line_start=False, in_variant=True
            )


def serialize(resource: Resource, *, validate: bool = True) -> str:
    """Serialize Resource to source text.

    Example:
        >>> from ftlcatalog.syntax import parse, serialize
        >>> serialize(parse("hello = Hello, world!"))
        'hello = Hello, world!\\n'
    """
    return TemplateSerializer().serialize(resource, validate=validate)


def serialize_pattern(pattern: Pattern, *, validate: bool = True) -> str:
    """Serialize a standalone template."""
    return TemplateSerializer().serialize_pattern(pattern, validate=validate)
