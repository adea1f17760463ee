"""Parser Example - Templates as Data.

Parses template strings and definition files into AST nodes, inspects
them, and serializes them back to canonical text. Useful for linters,
translation-memory tooling and automated rewrites.

Python 3.13+.
"""

from __future__ import annotations

from ftlcatalog import TemplateParseError, parse_template, serialize_pattern
from ftlcatalog.syntax import (
    Junk,
    Message,
    Pattern,
    Placeable,
    SelectExpression,
    TemplateParser,
    VariableReference,
)

SOURCE = """\
## Inbox

# Shown above the message list
unread = { $count ->
    [0] No unread messages
    [one] One unread message
   *[other] { $count } unread messages
}
broken = { $count
signature = Sent from { $device }
"""


def example_1_template() -> None:
    """Example 1: Parse and serialize one template."""
    print("=" * 60)
    print("Example 1: Single Template")
    print("=" * 60)

    pattern = parse_template("You have { $count -> [one] one file *[other] { $count } files }.")
    for element in pattern.elements:
        print(f"  {type(element).__name__}: {element!r}"[:100])

    print("\nCanonical form:")
    print(serialize_pattern(pattern))


def example_2_resource() -> None:
    """Example 2: Parse a definition file with junk recovery."""
    print("\n" + "=" * 60)
    print("Example 2: Definition File")
    print("=" * 60)

    resource = TemplateParser().parse(SOURCE, source_path="inbox.ftl")
    for entry in resource.entries:
        match entry:
            case Message(id=identifier, comment=comment):
                note = f"  # {comment.content}" if comment else ""
                print(f"  message {identifier.name}{note}")
            case Junk(annotations=annotations):
                print(f"  junk: {annotations[0].message}")
            case _:
                print(f"  {type(entry).__name__}")


def example_3_variables() -> None:
    """Example 3: Collect variable names used by a template."""
    print("\n" + "=" * 60)
    print("Example 3: Variable Inventory")
    print("=" * 60)

    def variables(pattern: Pattern) -> set[str]:
        found: set[str] = set()
        for element in pattern.elements:
            if not isinstance(element, Placeable):
                continue
            expression = element.expression
            if isinstance(expression, VariableReference):
                found.add(expression.id.name)
            elif isinstance(expression, SelectExpression):
                if isinstance(expression.selector, VariableReference):
                    found.add(expression.selector.id.name)
                for variant in expression.variants:
                    found |= variables(variant.value)
        return found

    pattern = parse_template("{ $user } shared { $count -> [one] a photo *[other] { $n } photos }")
    print(f"  {sorted(variables(pattern))}")


def example_4_errors() -> None:
    """Example 4: Syntax errors carry a location."""
    print("\n" + "=" * 60)
    print("Example 4: Syntax Errors")
    print("=" * 60)

    try:
        parse_template("Hello { $name")
    except TemplateParseError as e:
        print(f"  {e.diagnostic.format_error() if e.diagnostic else e}")


if __name__ == "__main__":
    example_1_template()
    example_2_resource()
    example_3_variables()
    example_4_errors()
