"""Command-line interface: ``ftlcatalog``.

Subcommands:
    generate  Write the key-constants module for the reference catalog
    check     Exit 1 when the committed key-constants module is stale
    validate  Load every language and report junk, warnings and coverage
    comments  Export translator comments as JSON

Usage:
    ftlcatalog --locales locales generate --output app/message_keys.py
    ftlcatalog --locales locales check --output app/message_keys.py
    ftlcatalog --locales locales validate --strict
    ftlcatalog --locales locales comments --locale de > comments.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from ftlcatalog.catalog.definitions import Catalog
from ftlcatalog.catalog.loading import CatalogLoader, PathResourceLoader
from ftlcatalog.codegen.generator import (
    check_keys_module,
    render_keys_module,
    write_keys_module,
)
from ftlcatalog.constants import DEFAULT_REFERENCE_LOCALE
from ftlcatalog.diagnostics import CatalogError
from ftlcatalog.locale_utils import normalize_locale

__all__ = ["main"]

logger = logging.getLogger(__name__)

_DEFAULT_OUTPUT = "message_keys.py"


def _loader(args: argparse.Namespace) -> PathResourceLoader:
    return PathResourceLoader(f"{Path(args.locales).as_posix()}/{{locale}}")


def _load_reference(args: argparse.Namespace) -> Catalog:
    catalog, _ = CatalogLoader(_loader(args)).load(args.reference, reference=True)
    return catalog


def _cmd_generate(args: argparse.Namespace) -> int:
    catalog = _load_reference(args)
    output = Path(args.output)
    changed = write_keys_module(output, render_keys_module(catalog))
    state = "Wrote" if changed else "Unchanged"
    print(f"[OK] {state} {output} ({len(catalog)} keys)")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    catalog = _load_reference(args)
    output = Path(args.output)
    if not check_keys_module(output, render_keys_module(catalog)):
        print(f"[FAIL] {output} is stale; run 'ftlcatalog generate --output {output}'")
        return 1
    print(f"[OK] {output} is up to date ({len(catalog)} keys)")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    loader = _loader(args)
    reference_locale = normalize_locale(args.reference)
    catalog_loader = CatalogLoader(loader, strict=args.strict)
    reference, reference_results = catalog_loader.load(reference_locale, reference=True)

    failures = 0
    print(f"Reference {reference_locale}: {len(reference)} messages")
    for result in reference_results:
        for warning in result.warnings:
            print(f"  [WARN] {warning.diagnostic.message if warning.diagnostic else warning}")

    for locale in loader.available_locales():
        if locale == reference_locale:
            continue
        try:
            catalog, results = catalog_loader.load(locale)
        except CatalogError as e:
            failures += 1
            print(f"[FAIL] {locale}:")
            print(e.diagnostic.format_error() if e.diagnostic else str(e))
            continue

        junk = sum(len(r.junk_entries) for r in results)
        warnings = [w for r in results for w in r.warnings]
        errors = [r for r in results if r.is_error]
        missing = reference.keys() - catalog.keys()
        extra = catalog.keys() - reference.keys()
        print(
            f"{locale}: {len(catalog)} messages, {len(missing)} untranslated, "
            f"{junk} junk, {len(warnings)} warnings"
        )
        for key in sorted(extra):
            print(f"  [WARN] {key}: not in reference catalog")
        for warning in warnings:
            print(f"  [WARN] {warning.diagnostic.message if warning.diagnostic else warning}")
        for result in errors:
            print(f"  [ERROR] {result.source_path}: {result.error}")
        if junk or errors or (args.strict and (warnings or extra)):
            failures += 1

    if failures:
        print(f"[FAIL] {failures} language(s) with problems.")
        return 1
    print("[PASS] All languages loaded.")
    return 0


def _cmd_comments(args: argparse.Namespace) -> int:
    locale = args.locale or args.reference
    is_reference = normalize_locale(locale) == normalize_locale(args.reference)
    catalog, _ = CatalogLoader(_loader(args)).load(locale, reference=is_reference)
    payload = json.dumps(catalog.export_comments(), indent=2, ensure_ascii=False)
    if args.output in (None, "-"):
        sys.stdout.write(payload + "\n")
    else:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"[OK] Wrote {args.output}")
    return 0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="ftlcatalog",
        description="Message catalog tooling: key constants, validation, comment export.",
    )
    parser.add_argument(
        "--locales",
        default="locales",
        help="Directory with one subdirectory per language (default: locales).",
    )
    parser.add_argument(
        "--reference",
        default=DEFAULT_REFERENCE_LOCALE,
        help=f"Reference language (default: {DEFAULT_REFERENCE_LOCALE}).",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Write the key-constants module.")
    generate.add_argument("--output", "-o", default=_DEFAULT_OUTPUT)
    generate.set_defaults(handler=_cmd_generate)

    check = subparsers.add_parser("check", help="Fail if the key-constants module is stale.")
    check.add_argument("--output", "-o", default=_DEFAULT_OUTPUT)
    check.set_defaults(handler=_cmd_check)

    validate = subparsers.add_parser("validate", help="Load and report every language.")
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Treat junk, warnings and keys missing from the reference as failures.",
    )
    validate.set_defaults(handler=_cmd_validate)

    comments = subparsers.add_parser("comments", help="Export translator comments as JSON.")
    comments.add_argument("--locale", help="Language to export (default: reference).")
    comments.add_argument("--output", "-o", help="Output file (default: stdout).")
    comments.set_defaults(handler=_cmd_comments)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the ftlcatalog command line."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.handler(args))
    except CatalogError as e:
        print(e.diagnostic.format_error() if e.diagnostic else str(e), file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
