"""Message definitions and immutable per-language catalogs.

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ftlcatalog.catalog.types import LocaleCode, MessageKey, ResourceId
from ftlcatalog.locale_utils import normalize_locale
from ftlcatalog.syntax import Pattern

__all__ = ["Catalog", "MessageComments", "MessageDefinition"]


@dataclass(frozen=True, slots=True)
class MessageComments:
    """Translator comments that apply to one message.

    Runtime resolution never reads these; they exist for translators and
    for export to translation tooling.

    Attributes:
        resource: File-level comment (###) of the defining file
        group: Group comment (##) in effect where the message is defined
        message: Comment (#) attached directly to the message
    """

    resource: str | None = None
    group: str | None = None
    message: str | None = None

    def __bool__(self) -> bool:
        return bool(self.resource or self.group or self.message)


@dataclass(frozen=True, slots=True)
class MessageDefinition:
    """One key and its parsed template.

    Attributes:
        key: Message key
        pattern: Parsed template
        module: Resource the key came from (file name without suffix)
        comments: Translator comments
        source_path: Human-readable path of the defining file
    """

    key: MessageKey
    pattern: Pattern
    module: str
    comments: MessageComments = field(default_factory=MessageComments)
    source_path: str | None = None


class Catalog:
    """Read-only mapping of key -> MessageDefinition for one language.

    Immutable after construction, so catalogs are shared between threads
    without locking.

    Example:
        >>> from ftlcatalog.syntax import parse_template
        >>> definition = MessageDefinition("hello", parse_template("Hello"), "main")
        >>> catalog = Catalog("en", {"hello": definition})
        >>> "hello" in catalog
        True
    """

    __slots__ = ("_locale", "_messages", "_resources")

    def __init__(
        self,
        locale: LocaleCode,
        messages: Mapping[MessageKey, MessageDefinition],
        resources: tuple[ResourceId, ...] = (),
    ) -> None:
        self._locale = normalize_locale(locale)
        self._messages: Mapping[MessageKey, MessageDefinition] = MappingProxyType(dict(messages))
        self._resources = resources

    @property
    def locale(self) -> LocaleCode:
        """Normalized locale code of this catalog."""
        return self._locale

    @property
    def messages(self) -> Mapping[MessageKey, MessageDefinition]:
        """Read-only view of all definitions."""
        return self._messages

    @property
    def resources(self) -> tuple[ResourceId, ...]:
        """Resources that contributed definitions, in load order."""
        return self._resources

    def get(self, key: MessageKey) -> MessageDefinition | None:
        """Return the definition for key, or None."""
        return self._messages.get(key)

    def keys(self) -> frozenset[MessageKey]:
        """Return the set of defined keys."""
        return frozenset(self._messages)

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    def __iter__(self) -> Iterator[MessageKey]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return f"Catalog(locale={self._locale!r}, messages={len(self._messages)})"

    def export_comments(self) -> list[dict[str, str | None]]:
        """Export translator comments as JSON-ready dicts, sorted by key.

        Only messages with at least one comment are included.
        """
        return [
            {
                "key": key,
                "module": definition.module,
                "resource_comment": definition.comments.resource,
                "group_comment": definition.comments.group,
                "comment": definition.comments.message,
            }
            for key, definition in sorted(self._messages.items())
            if definition.comments
        ]
