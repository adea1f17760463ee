"""Render and write the generated key-constants module.

The output is deterministic for a given key set (sorted, no timestamps),
so ``check`` can compare it byte for byte against the committed file.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from ftlcatalog.codegen.identifiers import generate_identifiers

__all__ = ["check_keys_module", "render_keys_module", "write_keys_module"]

logger = logging.getLogger(__name__)

_HEADER = '''"""Message key constants for the reference catalog.

Generated by ``ftlcatalog generate``. Do not edit by hand; regenerate after
adding, renaming or removing messages.
"""

from typing import Final
'''


def render_keys_module(keys: Iterable[str]) -> str:
    """Render Python source with one Final constant per key.

    Accepts any iterable of keys, including a Catalog.

    Raises:
        IdentifierCollisionError: If two keys map to one identifier
    """
    mapping = generate_identifiers(keys)
    ordered = sorted(mapping.items(), key=lambda item: item[1])

    lines = [_HEADER, "__all__ = ["]
    lines.extend(f'    "{identifier}",' for _, identifier in ordered)
    lines.append("]")
    lines.append("")
    lines.extend(f"{identifier}: Final = {json.dumps(key)}" for key, identifier in ordered)
    return "\n".join(lines) + "\n"


def write_keys_module(path: Path, content: str) -> bool:
    """Write content to path if it differs; return True when written."""
    if path.is_file() and path.read_text(encoding="utf-8") == content:
        logger.debug("Key module %s is up to date", path)
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote key module %s", path)
    return True


def check_keys_module(path: Path, content: str) -> bool:
    """True if path exists and matches content exactly."""
    return path.is_file() and path.read_text(encoding="utf-8") == content
