"""Unicode bidirectional isolation marks (Unicode TR9).

Substituted values are wrapped in FSI ... PDI so a numeral or a run of
foreign-script text cannot reorder the surrounding sentence in RTL or LTR
display. Logs and plain-text diagnostics want the marks removed.
"""

__all__ = [
    "ISOLATION_MARKS",
    "UNICODE_FSI",
    "UNICODE_LRI",
    "UNICODE_PDI",
    "UNICODE_RLI",
    "isolate",
    "strip_isolation_marks",
]

UNICODE_LRI: str = "\u2066"  # LEFT-TO-RIGHT ISOLATE
UNICODE_RLI: str = "\u2067"  # RIGHT-TO-LEFT ISOLATE
UNICODE_FSI: str = "\u2068"  # FIRST STRONG ISOLATE
UNICODE_PDI: str = "\u2069"  # POP DIRECTIONAL ISOLATE

ISOLATION_MARKS: frozenset[str] = frozenset({UNICODE_LRI, UNICODE_RLI, UNICODE_FSI, UNICODE_PDI})

_STRIP_TABLE = str.maketrans(dict.fromkeys(ISOLATION_MARKS))


def isolate(text: str) -> str:
    """Wrap text in FSI/PDI."""
    return f"{UNICODE_FSI}{text}{UNICODE_PDI}"


def strip_isolation_marks(text: str) -> str:
    """Remove every isolation mark from an already-resolved string.

    Idempotent: stripping twice gives the same result as stripping once.

    Example:
        >>> strip_isolation_marks("You have \\u20683\\u2069 add-ons.")
        'You have 3 add-ons.'
    """
    return text.translate(_STRIP_TABLE)
