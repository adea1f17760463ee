"""Message key -> Python identifier mapping.

Canonical keys (lowercase kebab-case, e.g. ``addons-you-have-count``) map
to plain UPPER_SNAKE names. Every other key maps to its upper-snake form
plus ``__`` and a SHA-256 prefix of the exact key text. Canonical names
never contain ``__``, so the two families are disjoint, and the digest
keeps hashed names apart from each other.

Names depend only on the key itself: adding or removing other keys never
renames an existing constant.

Python 3.13+. Zero external dependencies.
"""

import hashlib
import re
from collections.abc import Iterable

from ftlcatalog.diagnostics import ErrorTemplate, IdentifierCollisionError

__all__ = ["generate_identifiers", "is_canonical_key", "key_to_identifier"]

_CANONICAL_KEY_RE = re.compile(r"[a-z][a-z0-9]*(?:-[a-z0-9]+)*")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")

# 16 hex digits (64 bits) of SHA-256.
_DIGEST_HEX_DIGITS = 16


def is_canonical_key(key: str) -> bool:
    """True for lowercase kebab-case keys ("close-button", "error-404")."""
    return _CANONICAL_KEY_RE.fullmatch(key) is not None


def key_to_identifier(key: str) -> str:
    """Map a message key to an UPPER_SNAKE constant name.

    Examples:
        >>> key_to_identifier("addons-you-have-count")
        'ADDONS_YOU_HAVE_COUNT'
        >>> key_to_identifier("Close_Button").startswith("CLOSE_BUTTON__")
        True

    Raises:
        ValueError: If key is empty
    """
    if not key:
        msg = "Message key cannot be empty"
        raise ValueError(msg)
    if is_canonical_key(key):
        return key.replace("-", "_").upper()

    base = _NON_ALNUM_RE.sub("_", key).strip("_").upper()
    if not base or not base[0].isalpha():
        base = f"KEY_{base}".rstrip("_")
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:_DIGEST_HEX_DIGITS]
    return f"{base}__{digest.upper()}"


def generate_identifiers(keys: Iterable[str]) -> dict[str, str]:
    """Map every key to its identifier, sorted by key.

    Raises:
        IdentifierCollisionError: If two distinct keys map to one identifier
    """
    mapping: dict[str, str] = {}
    owners: dict[str, str] = {}
    for key in sorted(set(keys)):
        identifier = key_to_identifier(key)
        first = owners.get(identifier)
        if first is not None:
            raise IdentifierCollisionError(
                ErrorTemplate.identifier_collision(identifier, first, key),
                identifier=identifier,
                keys=(first, key),
            )
        owners[identifier] = key
        mapping[key] = identifier
    return mapping
