"""Process-wide localization.

Applications call :func:`init_localization` once at startup and then use
:func:`translate` anywhere. The module-level reference is replaced only by
``init_localization``; language switches happen inside the Localization.

Example:
    >>> from ftlcatalog import init_localization, switch_language, translate
    >>> l10n = init_localization("locales", language="en")
    >>> switch_language("pt", "BR").chain
    ('pt_BR', 'pt', 'en')
    >>> translate("addons-you-have-count", count=3)
    'Você tem \\u20683\\u2069 complementos.'
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ftlcatalog.catalog.loading import PathResourceLoader
from ftlcatalog.catalog.localization import Localization
from ftlcatalog.locale_utils import get_system_locale

if TYPE_CHECKING:
    from collections.abc import Callable

    from ftlcatalog.catalog.localization import ActiveLanguage, FallbackInfo
    from ftlcatalog.catalog.loading import ResourceLoader
    from ftlcatalog.config import LocalizationConfig
    from ftlcatalog.runtime.resolver import ArgumentValue

__all__ = [
    "get_localization",
    "init_localization",
    "reset_localization",
    "switch_language",
    "translate",
]

logger = logging.getLogger(__name__)

_localization: Localization | None = None
_init_lock = threading.Lock()


def init_localization(
    loader: ResourceLoader | str | Path,
    config: LocalizationConfig | None = None,
    *,
    language: str | None = None,
    on_fallback: Callable[[FallbackInfo], None] | None = None,
) -> Localization:
    """Create the process-wide Localization.

    Args:
        loader: A ResourceLoader, or a directory holding one subdirectory
            per language ("locales" -> "locales/{locale}/*.ftl")
        config: Localization settings
        language: Initial language (default: detected from LC_ALL,
            LC_MESSAGES or LANG)
        on_fallback: Called whenever a key resolves from a fallback catalog

    Raises:
        TemplateParseError: If the reference catalog has syntax errors
        DuplicateKeyError: If the reference catalog defines a key twice
    """
    global _localization  # noqa: PLW0603 - process-wide state is the point of this module

    if isinstance(loader, (str, Path)):
        loader = PathResourceLoader(f"{Path(loader).as_posix()}/{{locale}}")
    localization = Localization(
        loader,
        config,
        language=language or get_system_locale(),
        on_fallback=on_fallback,
    )
    with _init_lock:
        _localization = localization
    return localization


def get_localization() -> Localization:
    """Return the process-wide Localization.

    Raises:
        RuntimeError: If init_localization() has not been called
    """
    localization = _localization
    if localization is None:
        msg = "Localization is not initialized; call init_localization() at startup"
        raise RuntimeError(msg)
    return localization


def reset_localization() -> None:
    """Drop the process-wide Localization (tests and reloads)."""
    global _localization  # noqa: PLW0603
    with _init_lock:
        _localization = None
    logger.debug("Process-wide localization reset")


def switch_language(language: str, region: str | None = None) -> ActiveLanguage:
    """Switch the process-wide active language."""
    return get_localization().switch_language(language, region)


def translate(key: str, /, **args: ArgumentValue) -> str:
    """Resolve key in the active language with keyword arguments.

    Example:
        >>> translate("addons-you-have-count", count=1)
        'You have 1 add-on.'
    """
    return get_localization().format_value(key, args)
