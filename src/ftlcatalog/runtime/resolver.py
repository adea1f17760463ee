"""Template resolver - converts parsed templates to display strings.

Resolves patterns by walking the AST, selecting plural branches and
substituting arguments formatted per the locale's number conventions.
Python 3.13+. Indirect dependency: Babel (via plural_rules and numbers).

Thread Safety:
    The resolver holds no per-call state; each resolve() call collects its
    own errors, so one instance can serve many threads at once.
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation

from ftlcatalog.constants import FALLBACK_INVALID, FALLBACK_MISSING_VARIABLE, MAX_DEPTH
from ftlcatalog.diagnostics import CatalogError, ErrorTemplate, MissingArgumentError
from ftlcatalog.locale_utils import normalize_locale
from ftlcatalog.runtime.bidi import isolate
from ftlcatalog.runtime.numbers import NumberFormatter, get_number_formatter
from ftlcatalog.runtime.plural_rules import PluralRuleRegistry, get_default_registry
from ftlcatalog.syntax import (
    Expression,
    Identifier,
    NumberLiteral,
    Pattern,
    Placeable,
    SelectExpression,
    StringLiteral,
    TextElement,
    VariableReference,
    Variant,
)

__all__ = ["ArgumentValue", "PatternResolver"]

type ArgumentValue = str | int | float | Decimal | bool | None


def _is_number(value: object) -> bool:
    # bool is an int subclass but never a plural selector
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class PatternResolver:
    """Resolves templates to strings for one locale.

    Error handling follows the collect-don't-raise model:
    - resolve() returns (result, errors)
    - a missing argument renders as ``{$name}`` and is reported
    - a failed number format renders ``str(value)`` and is reported

    Example:
        >>> from ftlcatalog.syntax import parse_template
        >>> pattern = parse_template("{ $count -> [one] One add-on. *[other] { $count } add-ons. }")
        >>> PatternResolver("en").resolve(pattern, {"count": 3})
        ('\\u20683\\u2069 add-ons.', ())
    """

    __slots__ = ("_numbers", "locale", "max_depth", "plural_rules", "use_isolating")

    def __init__(
        self,
        locale: str,
        *,
        use_isolating: bool = True,
        plural_rules: PluralRuleRegistry | None = None,
        max_depth: int = MAX_DEPTH,
        fallback_locale: str | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            locale: Locale code for plural selection and number formatting
            use_isolating: Wrap substituted values in FSI/PDI (keyword-only)
            plural_rules: Registry to select plural categories from
                (default: the process-wide registry)
            max_depth: Maximum nesting of placeables and select branches
            fallback_locale: Number conventions used when locale is not in
                CLDR (default: the registry's reference locale)
        """
        self.locale = normalize_locale(locale)
        self.use_isolating = use_isolating
        self.plural_rules = plural_rules if plural_rules is not None else get_default_registry()
        self.max_depth = max_depth
        self._numbers: NumberFormatter = get_number_formatter(
            self.locale,
            fallback_locale if fallback_locale is not None else self.plural_rules.reference_locale,
        )

    def resolve(
        self, pattern: Pattern, args: Mapping[str, ArgumentValue] | None = None
    ) -> tuple[str, tuple[CatalogError, ...]]:
        """Resolve pattern to its final string.

        Never raises: the result is best-effort output and errors holds every
        problem encountered on the way.
        """
        errors: list[CatalogError] = []
        result = self._resolve_pattern(pattern, args or {}, errors, 0)
        return result, tuple(errors)

    def _resolve_pattern(
        self,
        pattern: Pattern,
        args: Mapping[str, ArgumentValue],
        errors: list[CatalogError],
        depth: int,
    ) -> str:
        if depth > self.max_depth:
            errors.append(CatalogError(ErrorTemplate.max_depth_exceeded(self.max_depth)))
            return FALLBACK_INVALID

        parts: list[str] = []
        for element in pattern.elements:
            match element:
                case TextElement():
                    parts.append(element.value)
                case Placeable():
                    parts.append(self._resolve_expression(element.expression, args, errors, depth))
        return "".join(parts)

    def _resolve_expression(
        self,
        expr: Expression,
        args: Mapping[str, ArgumentValue],
        errors: list[CatalogError],
        depth: int,
    ) -> str:
        """Resolve one placeable expression.

        Only argument substitutions are isolated: literals and the text of
        a selected branch belong to the translation itself.
        """
        match expr:
            case VariableReference():
                name = expr.id.name
                if name not in args:
                    errors.append(
                        MissingArgumentError(ErrorTemplate.variable_not_provided(name), name=name)
                    )
                    return FALLBACK_MISSING_VARIABLE.format(name=name)
                formatted = self._format_value(name, args[name], errors)
                return isolate(formatted) if self.use_isolating else formatted
            case StringLiteral():
                return expr.value
            case NumberLiteral():
                return expr.raw
            case SelectExpression():
                variant = self._select_variant(expr, args, errors)
                return self._resolve_pattern(variant.value, args, errors, depth + 1)
            case Placeable():
                if depth + 1 > self.max_depth:
                    errors.append(CatalogError(ErrorTemplate.max_depth_exceeded(self.max_depth)))
                    return FALLBACK_INVALID
                return self._resolve_expression(expr.expression, args, errors, depth + 1)

    def _select_variant(
        self,
        expr: SelectExpression,
        args: Mapping[str, ArgumentValue],
        errors: list[CatalogError],
    ) -> Variant:
        """Pick a branch.

        Matching priority:
            1. Exact match (identifier == str(value), number literal == value)
            2. Plural category of a numeric selector
            3. Default variant
        """
        name = expr.selector.id.name
        if name not in args:
            errors.append(MissingArgumentError(ErrorTemplate.variable_not_provided(name), name=name))
            return expr.default_variant
        value = args[name]

        exact = self._find_exact_variant(expr.variants, value)
        if exact is not None:
            return exact

        if _is_number(value):
            try:
                category = self.plural_rules.select(value, self.locale)  # type: ignore[arg-type]
            except (ArithmeticError, TypeError, ValueError) as e:
                errors.append(
                    CatalogError(ErrorTemplate.formatting_failed(name, self.locale, str(e)))
                )
                return expr.default_variant
            for variant in expr.variants:
                if isinstance(variant.key, Identifier) and variant.key.name == category:
                    return variant

        return expr.default_variant

    @staticmethod
    def _find_exact_variant(variants: Sequence[Variant], value: ArgumentValue) -> Variant | None:
        if value is None:
            selector_str = ""
        elif isinstance(value, bool):
            selector_str = "true" if value else "false"
        else:
            selector_str = str(value)

        for variant in variants:
            match variant.key:
                case Identifier(name=key_name):
                    if key_name == selector_str:
                        return variant
                case NumberLiteral(raw=raw):
                    if _is_number(value) and _numbers_equal(raw, value):  # type: ignore[arg-type]
                        return variant
        return None

    def _format_value(self, name: str, value: ArgumentValue, errors: list[CatalogError]) -> str:
        """Format an argument for output.

        - str: as-is
        - bool: "true"/"false"
        - int/float/Decimal: locale number conventions (Babel)
        - None: empty string
        """
        if isinstance(value, str):
            return value
        # Check bool BEFORE int (bool is subclass of int in Python)
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return ""
        if isinstance(value, (int, float, Decimal)):
            try:
                return self._numbers.format(value)
            except ValueError as e:
                errors.append(
                    CatalogError(ErrorTemplate.formatting_failed(name, self.locale, str(e)))
                )
                return str(value)
        return str(value)


def _numbers_equal(raw: str, value: int | float | Decimal) -> bool:
    try:
        return Decimal(raw) == Decimal(str(value))
    except InvalidOperation:
        return False
