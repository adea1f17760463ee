"""Catalog loading: resource loaders, catalog building and load results.

Components:
    ResourceLoader - Protocol for listing and reading definition files
    PathResourceLoader - Disk-based loader with path-traversal prevention
    MemoryResourceLoader - In-memory loader for embedding and tests
    CatalogLoader - Parses every resource of a language into one Catalog
    ResourceLoadResult - Immutable result of a single resource load attempt
    LoadSummary - Immutable aggregate of load results

Build-time policy:
    - A key defined twice in one language raises DuplicateKeyError.
    - Junk in the reference language raises TemplateParseError.
    - Junk in any other language is logged and skipped, so the key falls
      back to the reference catalog; ``strict=True`` makes it fatal.

Python 3.13+. Depends on Babel (via plural_rules).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ftlcatalog.catalog.definitions import Catalog, MessageComments, MessageDefinition
from ftlcatalog.constants import DEFINITION_FILE_SUFFIX
from ftlcatalog.diagnostics import (
    CatalogError,
    DiagnosticCode,
    DuplicateKeyError,
    ErrorTemplate,
    SourceLocation,
    TemplateParseError,
    UnknownPluralCategoryError,
)
from ftlcatalog.enums import CommentType, LoadStatus
from ftlcatalog.locale_utils import normalize_locale
from ftlcatalog.runtime.plural_rules import (
    CLDR_PLURAL_CATEGORIES,
    PluralRuleRegistry,
    get_default_registry,
)
from ftlcatalog.syntax import (
    Comment,
    Identifier,
    Junk,
    Message,
    Pattern,
    Placeable,
    SelectExpression,
    TemplateParser,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from ftlcatalog.catalog.types import LocaleCode, ResourceId, TemplateSource

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "ResourceLoader",
    # Concrete loaders
    "PathResourceLoader",
    "MemoryResourceLoader",
    # Catalog building
    "CatalogLoader",
    # Load result types
    "ResourceLoadResult",
    "LoadSummary",
]

logger = logging.getLogger(__name__)

_JUNK_KEY_RE = re.compile(r"([a-zA-Z][a-zA-Z0-9_-]*) *=")

# Maximum characters of translator content echoed into log lines.
_LOG_TRUNCATE = 80


class ResourceLoader(Protocol):
    """Protocol for finding and reading definition files per locale.

    This is a Protocol (structural typing) rather than ABC so custom
    loaders (package data, databases, HTTP) need no base class.
    """

    def available_locales(self) -> tuple[LocaleCode, ...]:
        """Return every locale this loader has files for (normalized, sorted)."""
        ...

    def list_resources(self, locale: LocaleCode) -> tuple[ResourceId, ...]:
        """Return resource ids for locale in load order (empty if none)."""
        ...

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> TemplateSource:
        """Return the source text of one resource.

        Raises:
            FileNotFoundError: If the resource doesn't exist for this locale
            OSError: If the resource cannot be read
        """
        ...

    def describe_path(self, locale: LocaleCode, resource_id: ResourceId) -> str:
        """Return a human-readable path for diagnostics."""
        ...


@dataclass(frozen=True, slots=True)
class PathResourceLoader:
    """File system loader: one directory per language, one file per module.

    Directories may be named with either separator ("pt_BR" or "pt-BR").

    Security:
        Locale codes containing path separators or ".." are rejected.
        Resource IDs containing ".." or absolute paths are rejected.
        All resolved paths are validated against a fixed root directory.

    Example:
        >>> loader = PathResourceLoader("locales/{locale}")
        >>> loader.list_resources("en")
        ('addons.ftl', 'main.ftl')

    Attributes:
        base_path: Path template with {locale} placeholder
        root_dir: Fixed root directory for path traversal validation.
                  Defaults to the static prefix of base_path.
    """

    base_path: str
    root_dir: str | None = None
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate template and cache resolved root directory.

        Raises:
            ValueError: If base_path does not contain {locale} placeholder
        """
        if "{locale}" not in self.base_path:
            msg = (
                f"base_path must contain '{{locale}}' placeholder for locale substitution, "
                f"got: '{self.base_path}'"
            )
            raise ValueError(msg)

        if self.root_dir is not None:
            resolved = Path(self.root_dir).resolve()
        else:
            static_prefix = self.base_path.split("{locale}")[0].rstrip("/\\")
            resolved = Path(static_prefix).resolve() if static_prefix else Path.cwd().resolve()
        object.__setattr__(self, "_resolved_root", resolved)

    @staticmethod
    def _validate_locale(locale: LocaleCode) -> None:
        if not locale:
            msg = "Locale code cannot be empty"
            raise ValueError(msg)
        if ".." in locale:
            msg = f"Path traversal sequences not allowed in locale: '{locale}'"
            raise ValueError(msg)
        if "/" in locale or "\\" in locale:
            msg = f"Path separators not allowed in locale: '{locale}'"
            raise ValueError(msg)

    @staticmethod
    def _validate_resource_id(resource_id: ResourceId) -> None:
        if resource_id.strip() != resource_id:
            msg = f"Resource ID contains leading/trailing whitespace: {resource_id!r}"
            raise ValueError(msg)
        if Path(resource_id).is_absolute() or resource_id.startswith(("/", "\\")):
            msg = f"Absolute paths not allowed in resource_id: '{resource_id}'"
            raise ValueError(msg)
        if ".." in resource_id:
            msg = f"Path traversal sequences not allowed in resource_id: '{resource_id}'"
            raise ValueError(msg)

    def _is_safe_path(self, full_path: Path) -> bool:
        try:
            full_path.resolve().relative_to(self._resolved_root)
        except ValueError:
            return False
        return True

    def _candidate_dirs(self, locale: LocaleCode) -> tuple[Path, ...]:
        normalized = normalize_locale(locale)
        names = dict.fromkeys((normalized, normalized.replace("_", "-"), locale))
        return tuple(Path(self.base_path.replace("{locale}", name)) for name in names)

    def _locale_dir(self, locale: LocaleCode) -> Path | None:
        self._validate_locale(locale)
        for candidate in self._candidate_dirs(locale):
            if candidate.is_dir():
                return candidate
        return None

    def available_locales(self) -> tuple[LocaleCode, ...]:
        """Discover locales from directory names matching the template.

        Only templates whose {locale} placeholder is the last path segment
        can be enumerated; others return an empty tuple.
        """
        prefix, _, suffix = self.base_path.partition("{locale}")
        if suffix.strip("/\\"):
            return ()
        parent = Path(prefix) if prefix else Path()
        if not parent.is_dir():
            return ()
        found = {
            normalize_locale(child.name)
            for child in parent.iterdir()
            if child.is_dir() and not child.name.startswith((".", "_"))
        }
        return tuple(sorted(found))

    def list_resources(self, locale: LocaleCode) -> tuple[ResourceId, ...]:
        """Return definition files of locale sorted by name."""
        directory = self._locale_dir(locale)
        if directory is None:
            return ()
        return tuple(
            sorted(
                entry.name
                for entry in directory.iterdir()
                if entry.is_file() and entry.suffix == DEFINITION_FILE_SUFFIX
            )
        )

    def describe_path(self, locale: LocaleCode, resource_id: ResourceId) -> str:
        """Return the locale-substituted file path."""
        directory = self._locale_dir(locale) or self._candidate_dirs(locale)[0]
        return f"{directory.as_posix()}/{resource_id}"

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> TemplateSource:
        """Read a definition file from disk.

        Raises:
            ValueError: If locale or resource_id contains path traversal sequences
            FileNotFoundError: If file doesn't exist
            OSError: If file cannot be read
        """
        self._validate_resource_id(resource_id)
        directory = self._locale_dir(locale) or self._candidate_dirs(locale)[0]
        full_path = (directory / resource_id).resolve()

        if not self._is_safe_path(full_path):
            msg = (
                f"Path traversal detected: resolved path escapes root directory. "
                f"locale='{locale}', resource_id='{resource_id}'"
            )
            raise ValueError(msg)

        return full_path.read_text(encoding="utf-8")


class MemoryResourceLoader:
    """In-memory loader: locale -> resource id -> source text.

    Example:
        >>> loader = MemoryResourceLoader({"en": {"main.ftl": "hello = Hello"}})
        >>> loader.load("en", "main.ftl")
        'hello = Hello'
    """

    __slots__ = ("_resources",)

    def __init__(self, resources: Mapping[LocaleCode, Mapping[ResourceId, TemplateSource]]) -> None:
        self._resources = {
            normalize_locale(locale): dict(files) for locale, files in resources.items()
        }

    def available_locales(self) -> tuple[LocaleCode, ...]:
        return tuple(sorted(self._resources))

    def list_resources(self, locale: LocaleCode) -> tuple[ResourceId, ...]:
        return tuple(sorted(self._resources.get(normalize_locale(locale), {})))

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> TemplateSource:
        try:
            return self._resources[normalize_locale(locale)][resource_id]
        except KeyError:
            msg = f"No resource {resource_id!r} for locale {locale!r}"
            raise FileNotFoundError(msg) from None

    def describe_path(self, locale: LocaleCode, resource_id: ResourceId) -> str:
        return f"<memory>/{normalize_locale(locale)}/{resource_id}"


@dataclass(frozen=True, slots=True)
class ResourceLoadResult:
    """Result of loading a single definition file.

    Attributes:
        locale: Locale code for this resource
        resource_id: Resource identifier (e.g., 'main.ftl')
        status: Load status (success, not_found, error)
        error: Exception if status is ERROR, None otherwise
        source_path: Human-readable path to resource (if available)
        junk_entries: Junk entries from parsing (unparseable content)
        warnings: Non-fatal diagnostics (unknown plural categories)
        message_count: Messages contributed to the catalog
    """

    locale: LocaleCode
    resource_id: ResourceId
    status: LoadStatus
    error: Exception | None = None
    source_path: str | None = None
    junk_entries: tuple[Junk, ...] = ()
    warnings: tuple[CatalogError, ...] = ()
    message_count: int = 0

    @property
    def is_success(self) -> bool:
        """Check if resource loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if resource was not found."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_error(self) -> bool:
        """Check if resource load failed with an error."""
        return self.status == LoadStatus.ERROR

    @property
    def has_junk(self) -> bool:
        """Check if resource had unparseable content."""
        return len(self.junk_entries) > 0


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of resource load results.

    Example:
        >>> summary = l10n.get_load_summary()
        >>> if summary.has_junk:
        ...     for result in summary.get_with_junk():
        ...         print(f"Junk in {result.source_path}: {len(result.junk_entries)} entries")
    """

    results: tuple[ResourceLoadResult, ...]

    def __repr__(self) -> str:
        return (
            f"LoadSummary(total={self.total_attempted}, "
            f"ok={self.successful}, "
            f"not_found={self.not_found}, "
            f"errors={self.errors}, "
            f"junk={self.junk_count}, "
            f"warnings={self.warning_count})"
        )

    @property
    def total_attempted(self) -> int:
        """Total number of load attempts."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful loads."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def not_found(self) -> int:
        """Number of resources not found."""
        return sum(1 for r in self.results if r.is_not_found)

    @property
    def errors(self) -> int:
        """Number of load errors."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def junk_count(self) -> int:
        """Total number of Junk entries across all resources."""
        return sum(len(r.junk_entries) for r in self.results)

    @property
    def warning_count(self) -> int:
        """Total number of non-fatal diagnostics."""
        return sum(len(r.warnings) for r in self.results)

    def get_errors(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results with errors."""
        return tuple(r for r in self.results if r.is_error)

    def get_by_locale(self, locale: LocaleCode) -> tuple[ResourceLoadResult, ...]:
        """Get all results for a specific locale."""
        normalized = normalize_locale(locale)
        return tuple(r for r in self.results if r.locale == normalized)

    def get_with_junk(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results with Junk entries."""
        return tuple(r for r in self.results if r.has_junk)

    def get_warnings(self) -> tuple[CatalogError, ...]:
        """Flatten warnings of all results."""
        return tuple(w for r in self.results for w in r.warnings)

    @property
    def all_clean(self) -> bool:
        """True if no errors, no junk and no warnings were recorded."""
        return self.errors == 0 and self.junk_count == 0 and self.warning_count == 0


def _location(source: str, offset: int, path: str | None) -> SourceLocation:
    # Offsets refer to the parser's normalized text
    source = source.removeprefix("\ufeff").replace("\r\n", "\n")
    offset = min(offset, len(source))
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return SourceLocation(offset=offset, line=line, column=column, path=path)


def _junk_key(junk: Junk) -> str | None:
    """Best-effort key of the message a Junk entry was meant to define."""
    match = _JUNK_KEY_RE.match(junk.content)
    return match.group(1) if match else None


def _iter_selects(pattern: Pattern) -> Iterator[SelectExpression]:
    for element in pattern.elements:
        if not isinstance(element, Placeable):
            continue
        expression = element.expression
        while isinstance(expression, Placeable):
            expression = expression.expression
        if isinstance(expression, SelectExpression):
            yield expression
            for variant in expression.variants:
                yield from _iter_selects(variant.value)


class CatalogLoader:
    """Builds one Catalog per language from a ResourceLoader.

    Parses every resource of the language, merges definitions, attaches
    translator comments and validates plural variant keys against the
    language's CLDR categories.

    Example:
        >>> loader = MemoryResourceLoader({"en": {"main.ftl": "hello = Hello"}})
        >>> catalog, results = CatalogLoader(loader).load("en", reference=True)
        >>> len(catalog)
        1
    """

    __slots__ = ("_loader", "_parser", "_plural_rules", "_strict")

    def __init__(
        self,
        loader: ResourceLoader,
        *,
        strict: bool = False,
        max_source_size: int | None = None,
        plural_rules: PluralRuleRegistry | None = None,
    ) -> None:
        self._loader = loader
        self._strict = strict
        self._parser = TemplateParser(max_source_size=max_source_size)
        self._plural_rules = plural_rules if plural_rules is not None else get_default_registry()

    @property
    def loader(self) -> ResourceLoader:
        """Underlying resource loader."""
        return self._loader

    def load(
        self, locale: LocaleCode, *, reference: bool = False
    ) -> tuple[Catalog, tuple[ResourceLoadResult, ...]]:
        """Load and merge every resource of locale.

        Args:
            locale: Locale to load
            reference: True for the reference language (parse errors fatal)

        Returns:
            Tuple of (catalog, per-resource load results)

        Raises:
            DuplicateKeyError: If a key is defined twice within the language
            TemplateParseError: On junk in the reference language (or any
                language in strict mode)
            CatalogError: If a resource cannot be read and the failure is fatal
        """
        normalized = normalize_locale(locale)
        fatal = reference or self._strict
        definitions: dict[str, MessageDefinition] = {}
        results: list[ResourceLoadResult] = []
        loaded: list[ResourceId] = []

        for resource_id in self._loader.list_resources(normalized):
            source_path = self._loader.describe_path(normalized, resource_id)
            try:
                source = self._loader.load(normalized, resource_id)
            except FileNotFoundError:
                logger.warning("Resource not found: %s", source_path)
                results.append(
                    ResourceLoadResult(
                        locale=normalized,
                        resource_id=resource_id,
                        status=LoadStatus.NOT_FOUND,
                        source_path=source_path,
                    )
                )
                continue
            except (OSError, UnicodeDecodeError, ValueError) as e:
                error = CatalogError(
                    ErrorTemplate.resource_load_failed(normalized, source_path, str(e))
                )
                if fatal:
                    raise error from e
                logger.warning("Failed to load %s: %s", source_path, e)
                results.append(
                    ResourceLoadResult(
                        locale=normalized,
                        resource_id=resource_id,
                        status=LoadStatus.ERROR,
                        error=error,
                        source_path=source_path,
                    )
                )
                continue

            results.append(
                self._load_resource(
                    normalized, resource_id, source, source_path, definitions, fatal=fatal
                )
            )
            loaded.append(resource_id)

        catalog = Catalog(normalized, definitions, tuple(loaded))
        logger.info(
            "Loaded catalog %s: %d messages from %d resources",
            normalized,
            len(catalog),
            len(loaded),
        )
        return catalog, tuple(results)

    def _load_resource(
        self,
        locale: LocaleCode,
        resource_id: ResourceId,
        source: TemplateSource,
        source_path: str,
        definitions: dict[str, MessageDefinition],
        *,
        fatal: bool,
    ) -> ResourceLoadResult:
        try:
            resource = self._parser.parse(source, source_path=source_path)
        except ValueError as e:
            # Oversized source
            error = CatalogError(ErrorTemplate.resource_load_failed(locale, source_path, str(e)))
            if fatal:
                raise error from e
            logger.warning("Failed to load %s: %s", source_path, e)
            return ResourceLoadResult(
                locale=locale,
                resource_id=resource_id,
                status=LoadStatus.ERROR,
                error=error,
                source_path=source_path,
            )

        module = resource_id.removesuffix(DEFINITION_FILE_SUFFIX)
        resource_comment: str | None = None
        group_comment: str | None = None
        junk_entries: list[Junk] = []
        warnings: list[CatalogError] = []
        message_count = 0

        for entry in resource.entries:
            match entry:
                case Comment(type=CommentType.RESOURCE):
                    resource_comment = (
                        entry.content
                        if resource_comment is None
                        else f"{resource_comment}\n{entry.content}"
                    )
                case Comment(type=CommentType.GROUP):
                    # An empty group comment closes the current group
                    group_comment = entry.content or None
                case Comment():
                    pass
                case Junk():
                    self._handle_junk(entry, locale, source, source_path, fatal=fatal)
                    junk_entries.append(entry)
                case Message():
                    key = entry.id.name
                    existing = definitions.get(key)
                    if existing is not None:
                        raise DuplicateKeyError(
                            ErrorTemplate.duplicate_key(
                                key, locale, existing.source_path, source_path
                            ),
                            key=key,
                            locale=locale,
                            first_path=existing.source_path,
                            second_path=source_path,
                        )
                    comments = MessageComments(
                        resource=resource_comment,
                        group=group_comment,
                        message=entry.comment.content if entry.comment is not None else None,
                    )
                    definitions[key] = MessageDefinition(
                        key=key,
                        pattern=entry.value,
                        module=module,
                        comments=comments,
                        source_path=source_path,
                    )
                    warnings.extend(self._check_plural_keys(key, entry.value, locale))
                    message_count += 1
                    logger.debug("Registered message: %s", key)

        return ResourceLoadResult(
            locale=locale,
            resource_id=resource_id,
            status=LoadStatus.SUCCESS,
            source_path=source_path,
            junk_entries=tuple(junk_entries),
            warnings=tuple(warnings),
            message_count=message_count,
        )

    @staticmethod
    def _handle_junk(
        junk: Junk, locale: LocaleCode, source: str, source_path: str, *, fatal: bool
    ) -> None:
        key = _junk_key(junk)
        annotation = junk.annotations[0] if junk.annotations else None
        message = annotation.message if annotation else "Unparseable content"
        if fatal:
            code = DiagnosticCode[annotation.code] if annotation else DiagnosticCode.PARSE_JUNK
            offset = annotation.span.start if annotation and annotation.span else 0
            location = _location(source, offset, source_path)
            raise TemplateParseError(
                ErrorTemplate.syntax(code, message, location), location=location, key=key
            )
        logger.warning(
            "Junk in %s (locale %s, key %s): %s; content: %r",
            source_path,
            locale,
            key or "?",
            message,
            junk.content[:_LOG_TRUNCATE],
        )

    def _check_plural_keys(
        self, key: str, pattern: Pattern, locale: LocaleCode
    ) -> list[CatalogError]:
        """Report variant keys naming CLDR categories locale never produces."""
        used = self._plural_rules.categories(locale)
        warnings: list[CatalogError] = []
        for select in _iter_selects(pattern):
            for variant in select.variants:
                if not isinstance(variant.key, Identifier):
                    continue
                category = variant.key.name
                if category in CLDR_PLURAL_CATEGORIES and category not in used:
                    warning = UnknownPluralCategoryError(
                        ErrorTemplate.unknown_plural_category(category, locale, key),
                        category=category,
                        locale=locale,
                        key=key,
                    )
                    logger.warning(
                        "Message %s uses plural category %r never selected in locale %s",
                        key,
                        category,
                        locale,
                    )
                    warnings.append(warning)
        return warnings
