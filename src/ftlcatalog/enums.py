"""Enumerations for ftlcatalog type-safe constants.

Uses StrEnum so members compare equal to their string values and log cleanly.

Python 3.13+.
"""

from enum import StrEnum


class CommentType(StrEnum):
    """Kind of translator comment in a definition file."""

    COMMENT = "comment"
    """Message comment: # Shown next to the following message"""

    GROUP = "group"
    """Group comment: ## Applies to entries until the next group comment"""

    RESOURCE = "resource"
    """File-level comment: ### Describes the whole file"""


class LoadStatus(StrEnum):
    """Outcome of loading one definition file."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ERROR = "error"


class MissingKeyPolicy(StrEnum):
    """What runtime lookup does when no catalog defines a key."""

    PLACEHOLDER = "placeholder"
    """Render ``{key}`` and report a MissingKeyError in the error tuple."""

    RAISE = "raise"
    """Raise MissingKeyError to the caller."""


__all__ = [
    "CommentType",
    "LoadStatus",
    "MissingKeyPolicy",
]
