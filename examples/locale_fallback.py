"""Localization Example - Regional Variants and Reference Fallback.

Demonstrates how a partially translated regional variant falls back to its
base language and then to the complete reference language.

Scenarios covered:
1. Regional chain pt_BR -> pt -> en
2. Observing fallbacks with a callback
3. Missing keys under the placeholder and raise policies
4. Catalogs on disk and the process-wide translate() helper

WARNING: Examples 1-3 disable bidi isolation for readable terminal output.
Keep use_isolating=True (the default) in applications: substituted values
are wrapped in FSI (U+2068) / PDI (U+2069) so RTL text renders correctly.

Python 3.13+.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from ftlcatalog import (
    Localization,
    LocalizationConfig,
    MemoryResourceLoader,
    MissingKeyError,
    MissingKeyPolicy,
    init_localization,
    switch_language,
    translate,
)
from ftlcatalog.catalog import FallbackInfo

RESOURCES = {
    "en": {
        "main.ftl": """\
### Shop front

welcome = Welcome, { $name }!
cart-items = { $count ->
    [one] { $count } item in your cart
   *[other] { $count } items in your cart
}
checkout = Checkout
""",
    },
    "pt": {
        "main.ftl": """\
welcome = Bem-vindo, { $name }!
cart-items = { $count ->
    [one] { $count } item no seu carrinho
   *[other] { $count } itens no seu carrinho
}
""",
    },
    "pt_BR": {
        "main.ftl": """\
welcome = Boas-vindas, { $name }!
""",
    },
}

PLAIN = LocalizationConfig(use_isolating=False)


def example_1_regional_chain() -> None:
    """Example 1: pt_BR -> pt -> en."""
    print("=" * 60)
    print("Example 1: Regional Chain (pt_BR -> pt -> en)")
    print("=" * 60)

    l10n = Localization(MemoryResourceLoader(RESOURCES), PLAIN)
    language = l10n.switch_language("pt", "BR")
    print(f"\nActive chain: {' -> '.join(language.chain)}")

    print(f"  welcome:    {l10n.format_value('welcome', {'name': 'Ana'})}")
    print(f"  cart-items: {l10n.format_value('cart-items', {'count': 3})}")
    print(f"  checkout:   {l10n.format_value('checkout')}")


def example_2_fallback_callback() -> None:
    """Example 2: Report keys that were not translated."""
    print("\n" + "=" * 60)
    print("Example 2: Fallback Callback")
    print("=" * 60)

    untranslated: list[FallbackInfo] = []
    l10n = Localization(
        MemoryResourceLoader(RESOURCES),
        PLAIN,
        language="pt-BR",
        on_fallback=untranslated.append,
    )

    for key in ("welcome", "cart-items", "checkout"):
        l10n.format_value(key, {"name": "Ana", "count": 1})

    for info in untranslated:
        print(f"  {info.message_id}: requested {info.requested_locale}, used {info.resolved_locale}")


def example_3_missing_keys() -> None:
    """Example 3: Keys no catalog defines."""
    print("\n" + "=" * 60)
    print("Example 3: Missing Keys")
    print("=" * 60)

    l10n = Localization(MemoryResourceLoader(RESOURCES), PLAIN)
    value, errors = l10n.format_pattern("gift-wrap")
    print(f"\nPlaceholder policy: {value!r} ({len(errors)} error)")

    strict = Localization(
        MemoryResourceLoader(RESOURCES),
        LocalizationConfig(use_isolating=False, missing_key=MissingKeyPolicy.RAISE),
    )
    try:
        strict.format_value("gift-wrap")
    except MissingKeyError as e:
        print(f"Raise policy: {type(e).__name__} for key {e.key!r}")


def example_4_process_wide() -> None:
    """Example 4: Catalogs on disk and translate()."""
    print("\n" + "=" * 60)
    print("Example 4: Process-Wide Localization")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        for locale, files in RESOURCES.items():
            directory = root / locale.replace("_", "-")
            directory.mkdir()
            for name, content in files.items():
                (directory / name).write_text(content, encoding="utf-8")

        init_localization(root, language="en")
        print(f"\n  en:    {translate('cart-items', count=2)!r}")
        switch_language("pt", "BR")
        print(f"  pt_BR: {translate('cart-items', count=2)!r}")


if __name__ == "__main__":
    example_1_regional_chain()
    example_2_fallback_callback()
    example_3_missing_keys()
    example_4_process_wide()
