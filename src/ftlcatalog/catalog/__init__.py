"""Catalogs: loading definition files, language state and lookup.

Python 3.13+. Depends on Babel (via runtime).
"""

from .active import (
    get_localization,
    init_localization,
    reset_localization,
    switch_language,
    translate,
)
from .definitions import Catalog, MessageComments, MessageDefinition
from .loading import (
    CatalogLoader,
    LoadSummary,
    MemoryResourceLoader,
    PathResourceLoader,
    ResourceLoader,
    ResourceLoadResult,
)
from .localization import ActiveLanguage, FallbackInfo, Localization
from .types import LocaleCode, MessageKey, ResourceId, TemplateSource

__all__ = [
    "ActiveLanguage",
    "Catalog",
    "CatalogLoader",
    "FallbackInfo",
    "LoadSummary",
    "LocaleCode",
    "Localization",
    "MemoryResourceLoader",
    "MessageComments",
    "MessageDefinition",
    "MessageKey",
    "PathResourceLoader",
    "ResourceId",
    "ResourceLoadResult",
    "ResourceLoader",
    "TemplateSource",
    "get_localization",
    "init_localization",
    "reset_localization",
    "switch_language",
    "translate",
]
