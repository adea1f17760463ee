"""Pytest configuration for the ftlcatalog test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 500 examples (thorough property testing)
- ci: GitHub Actions with 50 examples (fast CI feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- CI=true environment variable -> "ci" profile (GitHub Actions sets this)
- HYPOTHESIS_PROFILE env var -> explicit override
- Otherwise -> "dev" profile (local development)

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from ftlcatalog.catalog import MemoryResourceLoader, reset_localization

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

settings.register_profile(
    "dev",
    max_examples=500,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
)


def _detect_profile() -> str:
    """Detect appropriate Hypothesis profile based on execution context.

    Priority:
    1. HYPOTHESIS_PROFILE env var (explicit override)
    2. CI=true env var (GitHub Actions auto-detection)
    3. Default to "dev" (local development)
    """
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# SAMPLE CATALOGS
# =============================================================================

EN_MAIN = """\
### Main window strings

## Buttons

# Label of the button that closes the dialog
close-button = Close
addons-you-have-count = { $count ->
    [one] You have 1 add-on.
   *[other] You have { $count } add-ons.
}
greeting = Hello, { $name }!
"""

EN_ADDONS = """\
addons-title = Add-ons
addons-updated = Last updated { $date }
"""

PT_MAIN = """\
close-button = Fechar
addons-you-have-count = { $count ->
    [one] Você tem 1 complemento.
   *[other] Você tem { $count } complementos.
}
"""

PT_BR_MAIN = """\
close-button = Fechar janela
"""

DE_MAIN = """\
close-button = Schließen
addons-you-have-count = { $count ->
    [one] Sie haben 1 Add-on.
   *[other] Sie haben { $count } Add-ons.
}
greeting = Hallo, { $name }!
"""


@pytest.fixture
def sample_resources() -> dict[str, dict[str, str]]:
    """Reference (en) plus de, pt and pt_BR catalogs."""
    return {
        "en": {"main.ftl": EN_MAIN, "addons.ftl": EN_ADDONS},
        "de": {"main.ftl": DE_MAIN},
        "pt": {"main.ftl": PT_MAIN},
        "pt_BR": {"main.ftl": PT_BR_MAIN},
    }


@pytest.fixture
def memory_loader(sample_resources: dict[str, dict[str, str]]) -> MemoryResourceLoader:
    """In-memory loader over the sample catalogs."""
    return MemoryResourceLoader(sample_resources)


@pytest.fixture
def locales_dir(tmp_path: Path, sample_resources: dict[str, dict[str, str]]) -> Path:
    """Sample catalogs on disk; pt_BR lives in a hyphenated "pt-BR" directory."""
    root = tmp_path / "locales"
    for locale, files in sample_resources.items():
        directory = root / locale.replace("_", "-")
        directory.mkdir(parents=True)
        for name, content in files.items():
            (directory / name).write_text(content, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _reset_process_localization() -> Iterator[None]:
    """Every test starts and ends without a process-wide Localization."""
    reset_localization()
    yield
    reset_localization()
