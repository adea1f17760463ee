"""Template and definition-file parser.

Recursive-descent parser over the immutable :class:`Cursor`. Grammar rules
return a :class:`ParseResult` and raise :class:`TemplateParseError` with a
source location on malformed input. :class:`TemplateParser` drives the rules
over a whole file and turns failed entries into :class:`Junk`, so one broken
message never hides the rest of the file.

Definition-file format::

    ### File-level comment
    ## Group comment
    # Message comment
    close-button = Close
    addons-you-have-count = { $count -> [one] You have 1 add-on. *[other] You have { $count } add-ons. }
    welcome =
        Welcome back, { $name }!
        You have { $count ->
            [one] one new message
           *[other] { $count } new messages
        }.

Whitespace rules:
    - Continuation lines must be indented by at least one space and must not
      start with ``[``, ``*``, ``.`` or ``}``; they join with ``\\n``.
    - Indentation of continuation lines and trailing spaces at line ends are
      not part of the value; write ``{ " " }`` for significant spaces.

Python 3.13+. Zero external dependencies.
"""

import re
import string
from dataclasses import dataclass
from typing import NoReturn

from ftlcatalog.constants import MAX_DEPTH, MAX_SOURCE_SIZE
from ftlcatalog.diagnostics import (
    DiagnosticCode,
    ErrorTemplate,
    SourceLocation,
    TemplateParseError,
)
from ftlcatalog.enums import CommentType
from ftlcatalog.syntax.ast import (
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
)
from ftlcatalog.syntax.cursor import Cursor, ParseResult

__all__ = [
    "ParseContext",
    "TemplateParser",
    "is_variant_marker",
    "parse_identifier",
    "parse_pattern",
    "parse_placeable",
]

_IDENTIFIER_START = frozenset(string.ascii_letters)
_IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_-")
_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)

# Characters that end a pattern when they start a continuation line.
_LINE_START_SPECIAL = frozenset("[*.}")

_VARIANT_KEY_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?|[a-zA-Z][a-zA-Z0-9_-]*")

_COMMENT_TYPES = {
    1: CommentType.COMMENT,
    2: CommentType.GROUP,
    3: CommentType.RESOURCE,
}


@dataclass(frozen=True, slots=True)
class ParseContext:
    """Explicit parser state passed down the grammar rules.

    Attributes:
        max_nesting_depth: Maximum allowed placeable nesting
        current_depth: Current nesting depth (0 = top level)
        source_path: File path used in error locations
    """

    max_nesting_depth: int = MAX_DEPTH
    current_depth: int = 0
    source_path: str | None = None

    def is_depth_exceeded(self) -> bool:
        """Check if maximum nesting depth has been reached."""
        return self.current_depth >= self.max_nesting_depth

    def enter_placeable(self) -> "ParseContext":
        """Create a context one nesting level deeper."""
        return ParseContext(
            max_nesting_depth=self.max_nesting_depth,
            current_depth=self.current_depth + 1,
            source_path=self.source_path,
        )


def _fail(cursor: Cursor, code: DiagnosticCode, message: str, context: ParseContext) -> NoReturn:
    line, column = cursor.compute_line_col()
    location = SourceLocation(
        offset=cursor.pos, line=line, column=column, path=context.source_path
    )
    raise TemplateParseError(ErrorTemplate.syntax(code, message, location))


# =============================================================================
# Primitives
# =============================================================================


def parse_identifier(cursor: Cursor) -> ParseResult[str] | None:
    """Parse identifier: [a-zA-Z][a-zA-Z0-9_-]*"""
    if cursor.is_eof or cursor.current not in _IDENTIFIER_START:
        return None
    start = cursor.pos
    cursor = cursor.advance()
    while not cursor.is_eof and cursor.current in _IDENTIFIER_CHARS:
        cursor = cursor.advance()
    return ParseResult(cursor.source[start : cursor.pos], cursor)


def _parse_number(cursor: Cursor) -> ParseResult[NumberLiteral] | None:
    """Parse number literal: -?[0-9]+(.[0-9]+)?"""
    start = cursor.pos
    if cursor.peek() == "-":
        cursor = cursor.advance()
    digits_start = cursor.pos
    while not cursor.is_eof and cursor.current in _DIGITS:
        cursor = cursor.advance()
    if cursor.pos == digits_start:
        return None
    following = cursor.peek(1)
    if cursor.peek() == "." and following is not None and following in _DIGITS:
        cursor = cursor.advance()
        while not cursor.is_eof and cursor.current in _DIGITS:
            cursor = cursor.advance()
    raw = cursor.source[start : cursor.pos]
    value: int | float = float(raw) if "." in raw else int(raw)
    return ParseResult(NumberLiteral(value=value, raw=raw), cursor)


def _parse_escape(cursor: Cursor, context: ParseContext) -> tuple[str, Cursor]:
    """Decode one escape sequence; cursor is on the backslash."""
    marker = cursor.peek(1)
    if marker in ('"', "\\"):
        return marker, cursor.advance(2)
    if marker in ("u", "U"):
        length = 4 if marker == "u" else 6
        digits = cursor.source[cursor.pos + 2 : cursor.pos + 2 + length]
        if len(digits) == length and all(ch in _HEX_DIGITS for ch in digits):
            code_point = int(digits, 16)
            if code_point <= 0x10FFFF and not 0xD800 <= code_point <= 0xDFFF:
                return chr(code_point), cursor.advance(2 + length)
    _fail(
        cursor,
        DiagnosticCode.INVALID_ESCAPE,
        "Invalid escape sequence in string literal (use \\\", \\\\, \\uXXXX or \\UXXXXXX)",
        context,
    )


def _parse_string_literal(cursor: Cursor, context: ParseContext) -> ParseResult[StringLiteral]:
    """Parse "text"; cursor is on the opening quote."""
    cursor = cursor.advance()
    chars: list[str] = []
    while True:
        if cursor.is_eof or cursor.current == "\n":
            _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Unterminated string literal", context)
        ch = cursor.current
        if ch == '"':
            return ParseResult(StringLiteral(value="".join(chars)), cursor.advance())
        if ch == "\\":
            decoded, cursor = _parse_escape(cursor, context)
            chars.append(decoded)
            continue
        chars.append(ch)
        cursor = cursor.advance()


def is_variant_marker(source: str, pos: int) -> bool:
    """Check whether ``[key]`` or ``*[`` at pos starts a variant.

    Bounded lookahead: ``[`` counts as a marker only when a well-formed
    variant key and ``]`` follow on the same line, so ordinary brackets in
    variant text stay text.

    A bracketed identifier or number inside variant text is a marker too:
    in ``{ $n -> [one] see [docs] here *[other] x }`` the ``[docs]`` starts a
    third variant. Write ``{ "[" }docs]`` to keep it as text.
    """
    ch = source[pos]
    if ch == "*":
        return source.startswith("[", pos + 1)
    if ch != "[":
        return False
    line_end = source.find("\n", pos)
    close = source.find("]", pos, len(source) if line_end == -1 else line_end)
    if close == -1:
        return False
    key = source[pos + 1 : close].strip(" ")
    return _VARIANT_KEY_RE.fullmatch(key) is not None


def _continuation(cursor: Cursor) -> tuple[Cursor, int] | None:
    """Find the content of the next continuation line.

    The cursor is on a ``\\n``. Blank lines are skipped. Returns the cursor at
    the first content character and the number of line breaks crossed, or
    None when the pattern ends here.
    """
    newlines = 0
    ahead = cursor
    while not ahead.is_eof and ahead.current == "\n":
        ahead = ahead.advance()
        newlines += 1
        line_start = ahead.pos
        ahead = ahead.skip_spaces()
        if ahead.is_eof:
            return None
        if ahead.current == "\n":
            continue
        if ahead.pos == line_start or ahead.current in _LINE_START_SPECIAL:
            return None
        return ahead, newlines
    return None  # pragma: no cover - callers only pass cursors on "\n"


# =============================================================================
# Patterns and expressions
# =============================================================================


def parse_pattern(
    cursor: Cursor, context: ParseContext, *, in_variant: bool = False
) -> ParseResult[Pattern]:
    """Parse a template body.

    Top-level patterns end at a line break that is not followed by a
    continuation line. Variant patterns additionally end at ``}`` and at the
    next variant marker on the same line. An unmatched ``}`` in top-level
    text is a syntax error.
    """
    elements: list[PatternElement] = []
    pending: list[str] = []
    stops = "{}\n[*" if in_variant else "{}\n"

    def flush_text() -> None:
        text = "".join(pending)
        pending.clear()
        if text:
            elements.append(TextElement(value=text))

    def strip_line_end() -> None:
        text = "".join(pending).rstrip(" ")
        pending.clear()
        if text:
            pending.append(text)

    while not cursor.is_eof:
        ch = cursor.current

        if ch == "\n":
            found = _continuation(cursor)
            if found is None:
                break
            strip_line_end()
            cursor, newlines = found
            if elements or pending:
                pending.append("\n" * newlines)
            continue

        if ch == "{":
            flush_text()
            placeable = parse_placeable(cursor.advance(), context)
            elements.append(placeable.value)
            cursor = placeable.cursor
            continue

        if ch == "}":
            if in_variant:
                break
            _fail(
                cursor,
                DiagnosticCode.UNBALANCED_BRACE,
                "Unbalanced '}' in text (write { \"}\" } for a literal brace)",
                context,
            )

        if in_variant and ch in "[*" and is_variant_marker(cursor.source, cursor.pos):
            break

        start = cursor.pos
        cursor = cursor.advance()
        while not cursor.is_eof and cursor.current not in stops:
            cursor = cursor.advance()
        pending.append(cursor.source[start : cursor.pos])

    strip_line_end()
    flush_text()
    return ParseResult(Pattern(elements=tuple(elements)), cursor)


def _parse_variable_reference(
    cursor: Cursor, context: ParseContext
) -> ParseResult[VariableReference]:
    """Parse $name; cursor is on the dollar sign."""
    name = parse_identifier(cursor.advance())
    if name is None:
        _fail(
            cursor.advance(),
            DiagnosticCode.EXPECTED_TOKEN,
            "Expected argument name after '$'",
            context,
        )
    return ParseResult(VariableReference(id=Identifier(name.value)), name.cursor)


def _parse_variant(cursor: Cursor, context: ParseContext) -> ParseResult[Variant]:
    """Parse [key] pattern or *[key] pattern."""
    is_default = cursor.current == "*"
    if is_default:
        cursor = cursor.advance()
    if cursor.is_eof or cursor.current != "[":
        _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Expected '[' after '*'", context)

    cursor = cursor.advance().skip_spaces()
    key: Identifier | NumberLiteral
    number = _parse_number(cursor)
    if number is not None:
        key, cursor = number.value, number.cursor
    else:
        name = parse_identifier(cursor)
        if name is None:
            _fail(
                cursor,
                DiagnosticCode.EXPECTED_TOKEN,
                "Expected variant key (plural category or number)",
                context,
            )
        key, cursor = Identifier(name.value), name.cursor

    cursor = cursor.skip_spaces()
    if cursor.is_eof or cursor.current != "]":
        _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Expected ']' after variant key", context)

    pattern = parse_pattern(cursor.advance().skip_spaces(), context, in_variant=True)
    return ParseResult(Variant(key=key, value=pattern.value, default=is_default), pattern.cursor)


def _parse_select_expression(
    cursor: Cursor, selector: VariableReference, context: ParseContext
) -> ParseResult[SelectExpression]:
    """Parse the variant list after ``->``.

    Returns a cursor positioned on the closing ``}``.
    """
    variants: list[Variant] = []
    while True:
        cursor = cursor.skip_blank()
        if cursor.is_eof:
            _fail(
                cursor,
                DiagnosticCode.UNTERMINATED_PLACEABLE,
                "Unterminated select expression: expected '}'",
                context,
            )
        if cursor.current == "}":
            break
        if cursor.current not in "*[":
            _fail(
                cursor,
                DiagnosticCode.EXPECTED_TOKEN,
                "Expected variant '[key]' or default variant '*[key]'",
                context,
            )
        variant = _parse_variant(cursor, context)
        variants.append(variant.value)
        cursor = variant.cursor

    if not variants:
        _fail(
            cursor,
            DiagnosticCode.SELECT_NO_VARIANTS,
            "Select expression has no variants",
            context,
        )
    default_count = sum(1 for variant in variants if variant.default)
    if default_count == 0:
        _fail(
            cursor,
            DiagnosticCode.SELECT_NO_DEFAULT,
            "Select expression has no default variant (mark one with '*')",
            context,
        )
    if default_count > 1:
        _fail(
            cursor,
            DiagnosticCode.SELECT_MULTIPLE_DEFAULTS,
            f"Select expression has {default_count} default variants (requires exactly one)",
            context,
        )
    return ParseResult(SelectExpression(selector=selector, variants=tuple(variants)), cursor)


def parse_placeable(cursor: Cursor, context: ParseContext) -> ParseResult[Placeable]:
    """Parse a placeable body; cursor is just after the opening ``{``."""
    if context.is_depth_exceeded():
        _fail(
            cursor,
            DiagnosticCode.NESTING_DEPTH_EXCEEDED,
            f"Placeables nested deeper than {context.max_nesting_depth} levels",
            context,
        )
    inner = context.enter_placeable()

    cursor = cursor.skip_blank()
    if cursor.is_eof:
        _fail(
            cursor,
            DiagnosticCode.UNTERMINATED_PLACEABLE,
            "Unterminated placeable: expected '}'",
            context,
        )

    ch = cursor.current
    expression: Expression
    following = cursor.peek(1)
    match ch:
        case "$":
            reference = _parse_variable_reference(cursor, inner)
            cursor = reference.cursor.skip_blank()
            if cursor.startswith("->"):
                select = _parse_select_expression(cursor.advance(2), reference.value, inner)
                expression, cursor = select.value, select.cursor
            else:
                expression = reference.value
        case '"':
            literal = _parse_string_literal(cursor, inner)
            expression, cursor = literal.value, literal.cursor
        case "{":
            nested = parse_placeable(cursor.advance(), inner)
            expression, cursor = nested.value, nested.cursor
        case "}":
            _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Empty placeable", context)
        case _ if ch in _DIGITS or (ch == "-" and following is not None and following in _DIGITS):
            number = _parse_number(cursor)
            if number is None:  # pragma: no cover - guarded by the case condition
                _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Expected number", context)
            expression, cursor = number.value, number.cursor
        case _:
            _fail(
                cursor,
                DiagnosticCode.EXPECTED_TOKEN,
                f"Expected an argument ($name), string literal or number, found {ch!r}",
                context,
            )

    expression_end = cursor
    cursor = cursor.skip_blank()
    if cursor.startswith("->"):
        _fail(
            cursor,
            DiagnosticCode.INVALID_SELECTOR,
            "Only arguments ($name) can be used as selectors",
            context,
        )
    if cursor.is_eof or cursor.current != "}":
        # Report where the expression ended, not the start of some later line
        _fail(
            expression_end,
            DiagnosticCode.UNTERMINATED_PLACEABLE,
            "Unterminated placeable: expected '}'",
            context,
        )
    return ParseResult(Placeable(expression=expression), cursor.advance())


# =============================================================================
# Entries
# =============================================================================


def _parse_message(cursor: Cursor, context: ParseContext) -> ParseResult[Message]:
    """Parse key = pattern; cursor is on the first letter of the key."""
    start = cursor.pos
    name = parse_identifier(cursor)
    if name is None:  # pragma: no cover - caller checks the first character
        _fail(cursor, DiagnosticCode.EXPECTED_TOKEN, "Expected message key", context)

    cursor = name.cursor.skip_spaces()
    if cursor.is_eof or cursor.current != "=":
        _fail(
            cursor,
            DiagnosticCode.EXPECTED_TOKEN,
            f"Expected '=' after message key '{name.value}'",
            context,
        )

    cursor = cursor.advance().skip_spaces()
    pattern = parse_pattern(cursor, context)
    if not pattern.value.elements:
        _fail(
            cursor,
            DiagnosticCode.EXPECTED_TOKEN,
            f"Message '{name.value}' has no value",
            context,
        )
    message = Message(
        id=Identifier(name.value),
        value=pattern.value,
        span=Span(start=start, end=pattern.cursor.pos),
    )
    return ParseResult(message, pattern.cursor)


def _parse_comment(cursor: Cursor) -> ParseResult[Comment] | None:
    """Parse one comment line (# / ## / ###); None if the line is not one."""
    start = cursor.pos
    level = 0
    while level < 3 and cursor.peek() == "#":
        level += 1
        cursor = cursor.advance()

    following = cursor.peek()
    if following == " ":
        content_start = cursor.pos + 1
        cursor = cursor.skip_to_line_end()
        content = cursor.source[content_start : cursor.pos]
    elif following is None or following == "\n":
        content = ""
    else:
        return None

    comment = Comment(content=content, type=_COMMENT_TYPES[level], span=Span(start, cursor.pos))
    return ParseResult(comment, cursor)


def _merge_comments(first: Comment, second: Comment) -> Comment:
    """Join two adjacent comments of the same type."""
    span = None
    if first.span is not None and second.span is not None:
        span = Span(start=first.span.start, end=second.span.end)
    return Comment(content=f"{first.content}\n{second.content}", type=first.type, span=span)


def _normalize_source(source: str) -> str:
    if source.startswith("\ufeff"):
        source = source[1:]
    return source.replace("\r\n", "\n")


class TemplateParser:
    """Definition-file parser using the immutable cursor pattern.

    Security:
        ``max_source_size`` rejects oversized inputs before parsing and
        ``max_nesting_depth`` bounds recursion through nested placeables.

    Example:
        >>> parser = TemplateParser()
        >>> resource = parser.parse("hello = Hello, { $name }!")
        >>> resource.entries[0].id.name
        'hello'
    """

    __slots__ = ("_max_nesting_depth", "_max_source_size")

    def __init__(
        self,
        *,
        max_source_size: int | None = None,
        max_nesting_depth: int | None = None,
    ) -> None:
        """Initialize parser.

        Args:
            max_source_size: Maximum source size in characters (default: 10 MB).
                0 disables the limit.
            max_nesting_depth: Maximum placeable nesting depth (default: 100).
        """
        self._max_source_size = MAX_SOURCE_SIZE if max_source_size is None else max_source_size
        self._max_nesting_depth = MAX_DEPTH if max_nesting_depth is None else max_nesting_depth

    @property
    def max_source_size(self) -> int:
        """Maximum allowed source size in characters."""
        return self._max_source_size

    @property
    def max_nesting_depth(self) -> int:
        """Maximum allowed placeable nesting depth."""
        return self._max_nesting_depth

    def _check_size(self, source: str) -> None:
        if self._max_source_size > 0 and len(source) > self._max_source_size:
            msg = (
                f"Source size ({len(source):,} characters) exceeds maximum "
                f"({self._max_source_size:,}). Raise max_source_size to allow it."
            )
            raise ValueError(msg)

    def parse_template(self, text: str, *, source_path: str | None = None) -> Pattern:
        """Parse one template (the text after ``key =``).

        Raises:
            TemplateParseError: On malformed input
            ValueError: If text exceeds max_source_size
        """
        self._check_size(text)
        text = _normalize_source(text)
        context = ParseContext(max_nesting_depth=self._max_nesting_depth, source_path=source_path)
        result = parse_pattern(Cursor(text, 0).skip_spaces(), context)
        rest = result.cursor.skip_blank()
        if not rest.is_eof:
            _fail(
                rest,
                DiagnosticCode.EXPECTED_TOKEN,
                "Unexpected content after template (continuation lines must be indented)",
                context,
            )
        return result.value

    def parse(self, source: str, *, source_path: str | None = None) -> Resource:
        """Parse a definition file into a Resource.

        Malformed entries become Junk with one Annotation describing the
        failure; parsing resumes at the next line that starts with a letter
        or ``#`` in column 0.

        Raises:
            ValueError: If source exceeds max_source_size
        """
        self._check_size(source)
        source = _normalize_source(source)
        context = ParseContext(max_nesting_depth=self._max_nesting_depth, source_path=source_path)

        cursor = Cursor(source, 0)
        entries: list[Entry] = []
        pending: Comment | None = None
        pending_end = 0

        while True:
            cursor = cursor.skip_blank()
            if cursor.is_eof:
                break
            blank_line_before = pending is not None and source.count("\n", pending_end, cursor.pos) >= 2

            if cursor.current == "#":
                comment_result = _parse_comment(cursor)
                if comment_result is not None:
                    comment = comment_result.value
                    cursor = comment_result.cursor
                    if pending is not None:
                        if pending.type == comment.type and not blank_line_before:
                            pending = _merge_comments(pending, comment)
                            pending_end = cursor.pos
                            continue
                        entries.append(pending)
                    pending = comment
                    pending_end = cursor.pos
                    continue

            starts_message = cursor.current in _IDENTIFIER_START
            attach: Comment | None = None
            if pending is not None:
                if (
                    starts_message
                    and pending.type == CommentType.COMMENT
                    and not blank_line_before
                ):
                    attach = pending
                else:
                    entries.append(pending)
                pending = None

            if starts_message:
                try:
                    message_result = _parse_message(cursor, context)
                except TemplateParseError as error:
                    if attach is not None:
                        entries.append(attach)
                    cursor = self._consume_junk(cursor, error, entries)
                    continue
                message = message_result.value
                if attach is not None:
                    message = Message(
                        id=message.id, value=message.value, comment=attach, span=message.span
                    )
                entries.append(message)
                cursor = message_result.cursor
                continue

            cursor = self._consume_junk(cursor, None, entries)

        if pending is not None:
            entries.append(pending)

        return Resource(entries=tuple(entries))

    @staticmethod
    def _consume_junk(
        cursor: Cursor, error: TemplateParseError | None, entries: list[Entry]
    ) -> Cursor:
        """Wrap the failed entry in Junk and return the cursor after it.

        Junk runs to the end of the current line, then swallows following
        lines until one starts in column 0 with a letter or ``#``.
        """
        start = cursor.pos
        cursor = cursor.skip_to_line_end().skip_line_end()
        while not cursor.is_eof:
            ch = cursor.current
            if ch == "#" or ch in _IDENTIFIER_START:
                break
            cursor = cursor.skip_to_line_end().skip_line_end()

        if error is not None and error.diagnostic is not None:
            offset = error.location.offset if error.location is not None else start
            annotation = Annotation(
                code=error.diagnostic.code.name,
                message=error.diagnostic.message,
                span=Span(start=offset, end=offset),
            )
        else:
            annotation = Annotation(
                code=DiagnosticCode.PARSE_JUNK.name,
                message="Expected a message, comment or blank line",
                span=Span(start=start, end=start),
            )
        entries.append(
            Junk(
                content=cursor.source[start : cursor.pos],
                annotations=(annotation,),
                span=Span(start=start, end=cursor.pos),
            )
        )
        return cursor
