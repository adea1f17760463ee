"""Tests for the ftlcatalog command line and key-module generation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ftlcatalog.codegen import check_keys_module, render_keys_module, write_keys_module
from ftlcatalog.codegen.cli import main


def _run(locales_dir: Path, *argv: str) -> int:
    return main(["--locales", str(locales_dir), *argv])


class TestRenderKeysModule:
    """Generated module content."""

    def test_content(self) -> None:
        content = render_keys_module(["close-button", "addons-title"])

        assert content.startswith('"""Message key constants')
        assert "from typing import Final" in content
        assert 'ADDONS_TITLE: Final = "addons-title"' in content
        assert 'CLOSE_BUTTON: Final = "close-button"' in content
        assert content.index("ADDONS_TITLE: Final") < content.index("CLOSE_BUTTON: Final")
        assert content.endswith("\n")

    def test_deterministic_regardless_of_order(self) -> None:
        assert render_keys_module(["b", "a", "c"]) == render_keys_module(["c", "b", "a"])

    def test_generated_module_executes(self) -> None:
        namespace: dict[str, object] = {}

        exec(render_keys_module(["close-button", "Weird Key"]), namespace)  # noqa: S102

        assert namespace["CLOSE_BUTTON"] == "close-button"
        assert "Weird Key" in namespace.values()

    def test_write_and_check(self, tmp_path: Path) -> None:
        path = tmp_path / "pkg" / "keys.py"
        content = render_keys_module(["a"])

        assert not check_keys_module(path, content)
        assert write_keys_module(path, content)
        assert check_keys_module(path, content)
        assert not write_keys_module(path, content)


class TestGenerateCommand:
    """ftlcatalog generate / check."""

    def test_generate_writes_module(
        self, locales_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "message_keys.py"

        assert _run(locales_dir, "generate", "--output", str(output)) == 0

        content = output.read_text(encoding="utf-8")
        for line in (
            'ADDONS_TITLE: Final = "addons-title"',
            'ADDONS_UPDATED: Final = "addons-updated"',
            'ADDONS_YOU_HAVE_COUNT: Final = "addons-you-have-count"',
            'CLOSE_BUTTON: Final = "close-button"',
            'GREETING: Final = "greeting"',
        ):
            assert line in content
        assert "Wrote" in capsys.readouterr().out

    def test_generate_twice_is_unchanged(
        self, locales_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "message_keys.py"
        _run(locales_dir, "generate", "-o", str(output))
        capsys.readouterr()

        assert _run(locales_dir, "generate", "-o", str(output)) == 0
        assert "Unchanged" in capsys.readouterr().out

    def test_check_up_to_date(self, locales_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "message_keys.py"
        _run(locales_dir, "generate", "-o", str(output))

        assert _run(locales_dir, "check", "-o", str(output)) == 0

    def test_check_stale_after_new_message(
        self, locales_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "message_keys.py"
        _run(locales_dir, "generate", "-o", str(output))
        (locales_dir / "en" / "extra.ftl").write_text("new-message = New\n", encoding="utf-8")
        capsys.readouterr()

        assert _run(locales_dir, "check", "-o", str(output)) == 1
        assert "[FAIL]" in capsys.readouterr().out

    def test_check_missing_module(self, locales_dir: Path, tmp_path: Path) -> None:
        assert _run(locales_dir, "check", "-o", str(tmp_path / "absent.py")) == 1

    def test_broken_reference_fails(
        self, locales_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (locales_dir / "en" / "broken.ftl").write_text("oops = { $x\n", encoding="utf-8")

        assert _run(locales_dir, "generate", "-o", str(tmp_path / "keys.py")) == 1
        assert "error[" in capsys.readouterr().err
        assert not (tmp_path / "keys.py").exists()


class TestValidateCommand:
    """ftlcatalog validate."""

    def test_clean_tree_passes(
        self, locales_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(locales_dir, "validate") == 0

        out = capsys.readouterr().out
        assert "Reference en: 5 messages" in out
        assert "de: 3 messages, 2 untranslated, 0 junk, 0 warnings" in out
        assert "pt_BR: 1 messages, 4 untranslated" in out
        assert "[PASS]" in out

    def test_clean_tree_passes_strict(self, locales_dir: Path) -> None:
        assert _run(locales_dir, "validate", "--strict") == 0

    def test_junk_fails(self, locales_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (locales_dir / "de" / "broken.ftl").write_text("kaputt = { $x\n", encoding="utf-8")

        assert _run(locales_dir, "validate") == 1
        out = capsys.readouterr().out
        assert "de: 3 messages, 2 untranslated, 1 junk" in out
        assert "[FAIL] 1 language(s) with problems." in out

    def test_junk_fails_strict_with_diagnostic(
        self, locales_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (locales_dir / "de" / "broken.ftl").write_text("kaputt = { $x\n", encoding="utf-8")

        assert _run(locales_dir, "validate", "--strict") == 1
        out = capsys.readouterr().out
        assert "[FAIL] de:" in out
        assert "broken.ftl:1:" in out

    def test_extra_key_warns(self, locales_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (locales_dir / "de" / "extra.ftl").write_text("nur-deutsch = Nur\n", encoding="utf-8")

        assert _run(locales_dir, "validate") == 0
        assert "nur-deutsch: not in reference catalog" in capsys.readouterr().out
        assert _run(locales_dir, "validate", "--strict") == 1

    def test_unused_plural_category_warns(
        self, locales_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (locales_dir / "de" / "extra.ftl").write_text(
            "greeting-count = { $n ->\n    [few] ein paar\n   *[other] viele\n}\n",
            encoding="utf-8",
        )

        assert _run(locales_dir, "validate") == 0
        assert "1 warnings" in capsys.readouterr().out
        assert _run(locales_dir, "validate", "--strict") == 1


class TestCommentsCommand:
    """ftlcatalog comments."""

    def test_export_to_stdout(self, locales_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(locales_dir, "comments") == 0

        exported = json.loads(capsys.readouterr().out)
        assert [entry["key"] for entry in exported] == [
            "addons-you-have-count",
            "close-button",
            "greeting",
        ]
        close = exported[1]
        assert close == {
            "key": "close-button",
            "module": "main",
            "resource_comment": "Main window strings",
            "group_comment": "Buttons",
            "comment": "Label of the button that closes the dialog",
        }
        assert exported[0]["comment"] is None

    def test_export_to_file(self, locales_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "comments.json"

        assert _run(locales_dir, "comments", "--locale", "de", "--output", str(output)) == 0

        assert json.loads(output.read_text(encoding="utf-8")) == []
