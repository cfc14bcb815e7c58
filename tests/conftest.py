"""Shared pytest fixtures for the IaC Module Advisor test suite.

Provides reusable fixtures for:
- Project facts builders
- Rendered scaffolds for both profiles
- On-disk module directories
- Environment isolation for configuration tests
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from iac_advisor.facts.models import ProjectFacts
from iac_advisor.scaffolder.generator import GenerationOptions, ScaffoldGenerator
from iac_advisor.scaffolder.tree import FileTreeDescription, RenderedArtifact


# ---------------------------------------------------------------------------
# Facts
# ---------------------------------------------------------------------------

@pytest.fixture
def make_facts() -> Callable[..., ProjectFacts]:
    """Factory for ProjectFacts with sensible required fields.

    Usage:
        def test_x(make_facts):
            facts = make_facts(tool_version="1.5.7", cost_sensitivity="high")
    """

    def _make(**overrides: Any) -> ProjectFacts:
        data: dict[str, Any] = {"tool_version": "1.8.0", "engine": "terraform"}
        data.update(overrides)
        return ProjectFacts.model_validate(data)

    return _make


@pytest.fixture
def complete_facts_data() -> dict[str, Any]:
    """Facts with every outcome-relevant field supplied."""
    return {
        "tool_version": "1.8.2",
        "engine": "opentofu",
        "logic_complexity": "moderate",
        "team_skillset": ["has-native-test-experience"],
        "cost_sensitivity": "low",
        "visibility": "private",
    }


# ---------------------------------------------------------------------------
# Scaffolds
# ---------------------------------------------------------------------------

@pytest.fixture
def generator() -> ScaffoldGenerator:
    return ScaffoldGenerator()


@pytest.fixture
def public_options() -> GenerationOptions:
    return GenerationOptions(
        engine="terraform",
        visibility="public",
        license_kind="mit",
        module_name="Network VPC",
        copyright_holder="Example Corp",
        copyright_year=2026,
    )


@pytest.fixture
def private_options() -> GenerationOptions:
    return GenerationOptions(engine="opentofu", module_name="internal-queue")


@pytest.fixture
def rendered_public(
    generator: ScaffoldGenerator, public_options: GenerationOptions
) -> list[RenderedArtifact]:
    """Artifacts rendered for an empty public module."""
    return generator.generate(public_options)


@pytest.fixture
def public_tree(rendered_public: list[RenderedArtifact]) -> FileTreeDescription:
    """Tree description of a freshly scaffolded public module."""
    return FileTreeDescription().apply(rendered_public)


# ---------------------------------------------------------------------------
# Module directories
# ---------------------------------------------------------------------------

MAIN_TF_WITH_NAMING_ISSUES = textwrap.dedent("""\
    resource "aws_vpc" "main" {
      cidr_block = var.cidr
    }

    resource "aws_subnet" "this" {
      vpc_id = aws_vpc.main.id
    }

    resource "aws_subnet" "private" {
      vpc_id = aws_vpc.main.id
    }
""")

VARIABLES_TF_WITH_GENERIC_NAMES = textwrap.dedent("""\
    variable "cidr" {
      description = "VPC CIDR block."
      type        = string
    }

    variable "name" {
      type = string
    }
""")


@pytest.fixture
def tmp_module_dir(tmp_path: Path) -> Path:
    """Empty module directory (auto-cleanup)."""
    module_dir = tmp_path / "terraform-aws-vpc"
    module_dir.mkdir()
    yield module_dir


@pytest.fixture
def legacy_module_dir(tmp_module_dir: Path) -> Path:
    """Module directory with a partial scaffold and naming problems."""
    (tmp_module_dir / "main.tf").write_text(MAIN_TF_WITH_NAMING_ISSUES, encoding="utf-8")
    (tmp_module_dir / "variables.tf").write_text(
        VARIABLES_TF_WITH_GENERIC_NAMES, encoding="utf-8"
    )
    (tmp_module_dir / "README.md").write_text(
        "# terraform-aws-vpc\n\n## Usage\n\nSee examples.\n", encoding="utf-8"
    )
    return tmp_module_dir


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every IAC_ADVISOR_* variable from the environment."""
    import os

    for key in list(os.environ):
        if key.startswith("IAC_ADVISOR_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
