"""Code generation: stable Python constants for message keys.

Python 3.13+.
"""

from .generator import check_keys_module, render_keys_module, write_keys_module
from .identifiers import generate_identifiers, is_canonical_key, key_to_identifier

__all__ = [
    "check_keys_module",
    "generate_identifiers",
    "is_canonical_key",
    "key_to_identifier",
    "render_keys_module",
    "write_keys_module",
]
