"""Immutable cursor infrastructure for type-safe parsing.

Python 3.13+. Zero external dependencies.

Design:
    - Cursor is a frozen dataclass; every advance() returns a NEW cursor,
      so a loop that forgets to reassign makes no progress and exits
      instead of spinning.
    - EOF is a state (is_eof), not a return value; ``current`` raises.
    - Line:column is computed on demand, only when reporting errors.

Line endings:
    The parser normalizes CRLF to LF before creating a cursor, so ``\\n``
    is the only line delimiter seen here.
"""

from dataclasses import dataclass

from ftlcatalog.diagnostics import ErrorTemplate

__all__ = ["Cursor", "ParseResult"]


@dataclass(frozen=True, slots=True)
class Cursor:
    """Immutable source position tracker.

    Example:
        >>> cursor = Cursor("hello", 0)
        >>> cursor.current
        'h'
        >>> cursor.advance().current
        'e'
        >>> cursor.current  # original unchanged
        'h'
    """

    source: str
    pos: int

    @property
    def is_eof(self) -> bool:
        """True when position is at or past the end of input."""
        return self.pos >= len(self.source)

    @property
    def current(self) -> str:
        """Current character.

        Raises:
            EOFError: If at end of input
        """
        if self.is_eof:
            raise EOFError(ErrorTemplate.unexpected_eof(self.pos).message)
        return self.source[self.pos]

    def peek(self, offset: int = 0) -> str | None:
        """Character at position + offset, or None beyond EOF."""
        target = self.pos + offset
        if target >= len(self.source):
            return None
        return self.source[target]

    def advance(self, count: int = 1) -> "Cursor":
        """Return a new cursor advanced by count positions (clamped to EOF)."""
        return Cursor(self.source, min(self.pos + count, len(self.source)))

    def startswith(self, text: str) -> bool:
        """Check whether the remaining input starts with text."""
        return self.source.startswith(text, self.pos)

    def skip_spaces(self) -> "Cursor":
        """Skip U+0020 spaces on the current line (tabs are content)."""
        pos = self.pos
        source = self.source
        while pos < len(source) and source[pos] == " ":
            pos += 1
        return Cursor(source, pos)

    def skip_blank(self) -> "Cursor":
        """Skip spaces and line breaks."""
        pos = self.pos
        source = self.source
        while pos < len(source) and source[pos] in " \n":
            pos += 1
        return Cursor(source, pos)

    def skip_to_line_end(self) -> "Cursor":
        """Advance to the next ``\\n`` (or EOF) without consuming it."""
        end = self.source.find("\n", self.pos)
        return Cursor(self.source, len(self.source) if end == -1 else end)

    def skip_line_end(self) -> "Cursor":
        """Consume one ``\\n`` if the cursor is on it."""
        if not self.is_eof and self.source[self.pos] == "\n":
            return Cursor(self.source, self.pos + 1)
        return self

    def compute_line_col(self) -> tuple[int, int]:
        """Return the 1-indexed (line, column) of the current position."""
        line = self.source.count("\n", 0, self.pos) + 1
        line_start = self.source.rfind("\n", 0, self.pos) + 1
        return line, self.pos - line_start + 1


@dataclass(frozen=True, slots=True)
class ParseResult[T]:
    """Parsed value plus the cursor positioned after it."""

    value: T
    cursor: Cursor
