"""Localization state: catalogs, active language and lookup with fallback.

Lookup order for a key:
    1. Catalogs of the active language chain ("pt_BR" -> "pt")
    2. The reference catalog
    3. MissingKeyError: rendered as ``{key}`` or raised, per config

Thread Safety:
    Catalogs are immutable and shared freely. Catalogs and language views
    load lazily under a lock with double-checked access, so concurrent first
    callers trigger exactly one load. switch_language() publishes a new
    immutable ActiveLanguage with a single reference assignment; readers
    see either the old or the new language, never a mix.

Python 3.13+.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ftlcatalog.catalog.loading import CatalogLoader, LoadSummary
from ftlcatalog.config import LocalizationConfig
from ftlcatalog.constants import FALLBACK_INVALID, FALLBACK_MISSING_MESSAGE
from ftlcatalog.diagnostics import CatalogError, ErrorTemplate, MissingKeyError
from ftlcatalog.enums import MissingKeyPolicy
from ftlcatalog.locale_utils import (
    build_locale_chain,
    compose_locale,
    normalize_locale,
    validate_locale_code,
)
from ftlcatalog.runtime.plural_rules import PluralRuleRegistry, get_default_registry
from ftlcatalog.runtime.resolver import PatternResolver

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ftlcatalog.catalog.definitions import Catalog, MessageDefinition
    from ftlcatalog.catalog.loading import ResourceLoader, ResourceLoadResult
    from ftlcatalog.catalog.types import LocaleCode, MessageKey
    from ftlcatalog.runtime.resolver import ArgumentValue

__all__ = ["ActiveLanguage", "FallbackInfo", "Localization"]

logger = logging.getLogger(__name__)

# Maximum characters of a caller-supplied key echoed into log lines.
_LOG_KEY_TRUNCATE = 100


@dataclass(frozen=True, slots=True)
class FallbackInfo:
    """A key resolved from a catalog other than the requested language's own.

    Attributes:
        requested_locale: The active (requested) locale
        resolved_locale: The locale whose catalog defined the key
        message_id: The key that was resolved
    """

    requested_locale: LocaleCode
    resolved_locale: LocaleCode
    message_id: MessageKey


@dataclass(frozen=True, slots=True)
class ActiveLanguage:
    """Immutable snapshot of one language and its lookup chain.

    Attributes:
        locale: Requested locale (normalized)
        chain: Locales of the catalogs consulted, most specific first;
            always ends with the reference locale
        catalogs: Catalogs parallel to chain
        resolvers: Resolvers parallel to chain; each formats with the
            plural rules and number conventions of its catalog's locale
    """

    locale: LocaleCode
    chain: tuple[LocaleCode, ...]
    catalogs: tuple[Catalog, ...]
    resolvers: tuple[PatternResolver, ...]

    @property
    def reference_only(self) -> bool:
        """True when no catalog of the requested language exists."""
        return len(self.chain) == 1 and self.chain[0] != self.locale

    def lookup(self, key: MessageKey) -> tuple[MessageDefinition, int] | None:
        """Find key along the chain; return (definition, chain index)."""
        for index, catalog in enumerate(self.catalogs):
            definition = catalog.get(key)
            if definition is not None:
                return definition, index
        return None


class Localization:
    """Catalog set with an active language and reference fallback.

    The reference catalog loads at construction, so a broken reference file
    fails the build instead of the first request. Other languages load on
    first use.

    Example:
        >>> from ftlcatalog.catalog.loading import MemoryResourceLoader
        >>> loader = MemoryResourceLoader({
        ...     "en": {"main.ftl": "hello = Hello, { $name }!"},
        ...     "de": {"main.ftl": "hello = Hallo, { $name }!"},
        ... })
        >>> l10n = Localization(loader, LocalizationConfig(use_isolating=False))
        >>> l10n.switch_language("de").locale
        'de'
        >>> l10n.format_value("hello", {"name": "Anna"})
        'Hallo, Anna!'
    """

    __slots__ = (
        "_active",
        "_catalog_loader",
        "_catalogs",
        "_config",
        "_languages",
        "_load_lock",
        "_load_results",
        "_on_fallback",
        "_plural_rules",
        "_switch_lock",
    )

    def __init__(
        self,
        loader: ResourceLoader,
        config: LocalizationConfig | None = None,
        *,
        language: LocaleCode | None = None,
        on_fallback: Callable[[FallbackInfo], None] | None = None,
        plural_rules: PluralRuleRegistry | None = None,
    ) -> None:
        """Load the reference catalog and activate the initial language.

        Args:
            loader: Source of definition files
            config: Localization settings (default: LocalizationConfig())
            language: Initial language (default: the reference locale)
            on_fallback: Called with FallbackInfo whenever a key resolves
                from a catalog other than the active language's first one
            plural_rules: Plural rule registry (default: the process-wide
                registry, or a fresh one whose unknown-language fallback is
                the configured reference locale)

        Raises:
            TemplateParseError: If the reference catalog has syntax errors
            DuplicateKeyError: If the reference catalog defines a key twice
        """
        self._config = config if config is not None else LocalizationConfig()
        if plural_rules is None:
            default = get_default_registry()
            plural_rules = (
                default
                if default.reference_locale == self._config.reference_locale
                else PluralRuleRegistry(self._config.reference_locale)
            )
        self._plural_rules = plural_rules
        self._catalog_loader = CatalogLoader(
            loader,
            strict=self._config.strict,
            max_source_size=self._config.max_source_size,
            plural_rules=plural_rules,
        )
        self._on_fallback = on_fallback
        self._catalogs: dict[LocaleCode, Catalog] = {}
        self._languages: dict[LocaleCode, ActiveLanguage] = {}
        self._load_results: list[ResourceLoadResult] = []
        self._load_lock = threading.Lock()
        self._switch_lock = threading.Lock()

        reference = self._config.reference_locale
        catalog, results = self._catalog_loader.load(reference, reference=True)
        if not len(catalog):
            logger.warning("Reference catalog %s has no messages", reference)
        self._catalogs[reference] = catalog
        self._load_results.extend(results)

        self._active: ActiveLanguage = self._get_language(
            normalize_locale(language) if language else reference
        )
        logger.info(
            "Localization initialized: reference=%s, active=%s", reference, self._active.locale
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> LocalizationConfig:
        """Configuration in effect."""
        return self._config

    @property
    def active(self) -> ActiveLanguage:
        """Current language snapshot."""
        return self._active

    @property
    def language(self) -> LocaleCode:
        """Current (requested) locale code."""
        return self._active.locale

    @property
    def reference_locale(self) -> LocaleCode:
        """Locale of the complete, authoritative catalog."""
        return self._config.reference_locale

    @property
    def reference_catalog(self) -> Catalog:
        """The reference catalog."""
        return self._catalogs[self._config.reference_locale]

    def __repr__(self) -> str:
        return (
            f"Localization(reference={self.reference_locale!r}, "
            f"language={self.language!r}, loaded={sorted(self._catalogs)})"
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def get_catalog(self, locale: LocaleCode) -> Catalog:
        """Return the catalog of one locale, loading it on first use.

        Thread-safe via double-checked locking: the already-loaded case takes
        no lock; a miss loads under the lock after re-checking, so concurrent
        first callers share one load.
        """
        normalized = normalize_locale(locale)
        catalog = self._catalogs.get(normalized)
        if catalog is not None:
            return catalog

        with self._load_lock:
            catalog = self._catalogs.get(normalized)
            if catalog is not None:
                return catalog
            catalog, results = self._catalog_loader.load(normalized)
            self._load_results.extend(results)
            self._catalogs[normalized] = catalog
            return catalog

    def _get_language(self, locale: LocaleCode) -> ActiveLanguage:
        language = self._languages.get(locale)
        if language is not None:
            return language

        # Catalog loads take the load lock themselves
        reference = self._config.reference_locale
        chain: list[LocaleCode] = []
        catalogs: list[Catalog] = []
        for candidate in build_locale_chain(locale, reference):
            catalog = self.get_catalog(candidate)
            if len(catalog) or candidate == reference:
                chain.append(candidate)
                catalogs.append(catalog)

        if chain == [reference] and locale != reference:
            logger.warning(
                "No catalogs for language %s; using reference language %s", locale, reference
            )

        resolvers = tuple(
            PatternResolver(
                candidate,
                use_isolating=self._config.use_isolating,
                plural_rules=self._plural_rules,
                fallback_locale=reference,
            )
            for candidate in chain
        )
        language = ActiveLanguage(
            locale=locale, chain=tuple(chain), catalogs=tuple(catalogs), resolvers=resolvers
        )

        with self._load_lock:
            return self._languages.setdefault(locale, language)

    def get_load_summary(self) -> LoadSummary:
        """Aggregate results of every resource loaded so far."""
        with self._load_lock:
            return LoadSummary(results=tuple(self._load_results))

    def available_locales(self) -> tuple[LocaleCode, ...]:
        """Locales the loader has definition files for."""
        return self._catalog_loader.loader.available_locales()

    # ------------------------------------------------------------------
    # Language switching
    # ------------------------------------------------------------------

    def switch_language(self, language: str, region: str | None = None) -> ActiveLanguage:
        """Make a language (and optional regional variant) active.

        Catalogs load before the switch is published, so no reader ever sees
        a half-loaded language. An unknown language activates the reference
        catalog alone.

        Args:
            language: Language code ("pt") or full locale ("pt-BR")
            region: Optional regional variant ("BR")

        Returns:
            The newly active language

        Raises:
            ValueError: If the code is malformed
            TemplateParseError: In strict mode, if the language has junk
        """
        locale = compose_locale(language, region)
        new_active = self._get_language(locale)
        with self._switch_lock:
            previous = self._active
            self._active = new_active
        logger.info(
            "Switched language %s -> %s (chain: %s)",
            previous.locale,
            new_active.locale,
            " -> ".join(new_active.chain),
        )
        return new_active

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def _language_for(self, locale: str) -> tuple[ActiveLanguage, CatalogError | None]:
        """Language view for a per-call locale, or the active one if it cannot load."""
        try:
            validate_locale_code(locale)
            return self._get_language(normalize_locale(locale)), None
        except CatalogError as e:
            error = e
        except (OSError, ValueError) as e:
            error = CatalogError(ErrorTemplate.locale_unavailable(locale, str(e)))
        detail = error.diagnostic.message if error.diagnostic is not None else str(error)
        logger.warning(
            "Locale %r unavailable, using active language %s: %s",
            locale[:_LOG_KEY_TRUNCATE],
            self._active.locale,
            detail,
        )
        return self._active, error

    def has_message(self, key: MessageKey, *, locale: LocaleCode | None = None) -> bool:
        """Check whether key resolves in the active (or given) language.

        An unusable locale (malformed code, broken catalog) has no messages.
        """
        if locale is None:
            return self._active.lookup(key) is not None
        active, error = self._language_for(locale)
        return error is None and active.lookup(key) is not None

    def format_pattern(
        self,
        key: MessageKey,
        args: Mapping[str, ArgumentValue] | None = None,
        *,
        locale: LocaleCode | None = None,
    ) -> tuple[str, tuple[CatalogError, ...]]:
        """Resolve key with fallback and collect errors.

        A locale override that cannot be loaded (malformed code, broken
        catalog) falls back to the active language and its error is reported
        first in the error tuple.

        Args:
            key: Message key
            args: Argument values for substitution and plural selection
            locale: Resolve in this locale instead of the active language

        Returns:
            Tuple of (formatted_value, errors)

        Raises:
            MissingKeyError: If no catalog defines key and the missing-key
                policy is RAISE
        """
        if not isinstance(key, str) or not key:
            logger.warning("Invalid message key: empty or non-string")
            return FALLBACK_INVALID, (CatalogError(ErrorTemplate.invalid_key()),)

        active, locale_error = (self._active, None) if locale is None else self._language_for(locale)
        prefix: tuple[CatalogError, ...] = (locale_error,) if locale_error is not None else ()
        found = active.lookup(key)
        if found is None:
            value, errors = self._handle_missing_key(key, active.locale)
            return value, prefix + errors

        definition, index = found
        if index > 0:
            resolved_locale = active.chain[index]
            logger.debug("Message %s resolved from fallback locale %s", key, resolved_locale)
            if self._on_fallback is not None:
                self._on_fallback(
                    FallbackInfo(
                        requested_locale=active.locale,
                        resolved_locale=resolved_locale,
                        message_id=key,
                    )
                )
        value, errors = active.resolvers[index].resolve(definition.pattern, args)
        return value, prefix + errors

    def _handle_missing_key(
        self, key: MessageKey, locale: LocaleCode
    ) -> tuple[str, tuple[CatalogError, ...]]:
        diagnostic = ErrorTemplate.message_not_found(key, locale)
        logger.warning(
            "Message %r not found for locale %s", key[:_LOG_KEY_TRUNCATE], locale
        )
        error = MissingKeyError(diagnostic, key=key, locale=locale)
        if self._config.missing_key is MissingKeyPolicy.RAISE:
            raise error
        return FALLBACK_MISSING_MESSAGE.format(id=key), (error,)

    def format_value(
        self,
        key: MessageKey,
        args: Mapping[str, ArgumentValue] | None = None,
        *,
        locale: LocaleCode | None = None,
    ) -> str:
        """Resolve key to a display string; errors are logged, not returned.

        Raises:
            MissingKeyError: Only under the RAISE missing-key policy
        """
        value, errors = self.format_pattern(key, args, locale=locale)
        for error in errors:
            if isinstance(error, MissingKeyError):
                continue  # already logged
            detail = error.diagnostic.message if error.diagnostic is not None else str(error)
            logger.warning("Formatting %r: %s", str(key)[:_LOG_KEY_TRUNCATE], detail)
        return value
