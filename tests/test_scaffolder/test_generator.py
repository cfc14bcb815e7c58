"""Tests for the scaffold generator (iac_advisor.scaffolder.generator).

Covers:
- Full generation for public and private modules
- Idempotency over the tree with generated artifacts applied
- Appending missing README sections to an existing README
- Never overwriting existing files
- Engine-specific command and hook configuration
- LICENSE rendering
- Contradictory options (InvalidConfiguration)
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import yaml

from iac_advisor.errors import InvalidConfiguration
from iac_advisor.scaffolder.generator import (
    PRE_COMMIT_HOOKS,
    GenerationOptions,
    LicenseKind,
    ScaffoldGenerator,
    generate,
)
from iac_advisor.scaffolder.profiles import Profile
from iac_advisor.scaffolder.tree import FileTreeDescription
from iac_advisor.scaffolder.validator import EntryStatus, validate


pytestmark = pytest.mark.unit


def _by_path(artifacts) -> dict[str, str]:
    return {a.path: a.content for a in artifacts if a.mode == "create"}


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestGenerationOptions:
    def test_defaults(self):
        options = GenerationOptions(engine="terraform")
        assert options.license_kind == LicenseKind.NONE
        assert options.include_pre_commit is True
        assert options.profile == Profile.PRIVATE_MODULE
        assert options.copyright_year == datetime.now(timezone.utc).year

    def test_public_profile(self, public_options):
        assert public_options.profile == Profile.PUBLIC_MODULE

    def test_public_without_license_rejected(self, generator):
        options = GenerationOptions(engine="terraform", visibility="public")
        with pytest.raises(InvalidConfiguration, match="LICENSE") as exc_info:
            generator.generate(options)
        assert exc_info.value.code == "invalid-configuration"
        assert exc_info.value.detail["license_kind"] == "none"

    def test_public_without_pre_commit_rejected(self, generator):
        options = GenerationOptions(
            engine="terraform", visibility="public", license_kind="mit", include_pre_commit=False
        )
        with pytest.raises(InvalidConfiguration, match="pre-commit"):
            generator.generate(options)

    def test_broken_override_template_rejected(self, tmp_path, private_options):
        (tmp_path / "main.tf.j2").write_text("{{ undefined_setting }}\n", encoding="utf-8")
        generator = ScaffoldGenerator(template_dir=tmp_path)
        with pytest.raises(InvalidConfiguration, match="main.tf.j2") as exc_info:
            generator.generate(private_options)
        assert exc_info.value.detail == {"template": "main.tf.j2", "artifact": "main.tf"}


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_public_paths_in_profile_order(self, rendered_public):
        assert [a.key for a in rendered_public] == [
            "main.tf",
            "variables.tf",
            "outputs.tf",
            "versions.tf",
            "README.md",
            "examples/complete/main.tf",
            "tests/defaults.tftest.hcl",
            ".gitignore",
            "LICENSE",
            ".pre-commit-config.yaml",
        ]
        assert all(a.mode == "create" for a in rendered_public)

    def test_private_without_license(self, generator, private_options):
        paths = [a.path for a in generator.generate(private_options)]
        assert "LICENSE" not in paths
        assert ".pre-commit-config.yaml" in paths

    def test_private_without_pre_commit(self, generator):
        options = GenerationOptions(engine="terraform", include_pre_commit=False)
        paths = [a.path for a in generator.generate(options)]
        assert ".pre-commit-config.yaml" not in paths

    @pytest.mark.parametrize("engine", ["terraform", "opentofu"])
    @pytest.mark.parametrize("visibility,license_kind", [
        ("public", "mit"),
        ("public", "apache2"),
        ("private", "none"),
    ])
    def test_generated_tree_validates(self, generator, engine, visibility, license_kind):
        options = GenerationOptions(
            engine=engine, visibility=visibility, license_kind=license_kind
        )
        tree = FileTreeDescription().apply(generator.generate(options))
        report = validate(tree, options.profile)
        assert report.with_status(EntryStatus.MISSING) == []
        assert report.with_status(EntryStatus.MALFORMED) == []
        assert report.findings == ()

    def test_idempotent(self, generator, public_options, public_tree):
        assert generator.generate(public_options, existing=public_tree) == []

    def test_existing_files_not_regenerated(self, generator, private_options):
        existing = FileTreeDescription.from_contents({
            "main.tf": 'resource "aws_sqs_queue" "this" {\n}\n',
            ".gitignore": "*.tfstate\n",
        })
        paths = [a.path for a in generator.generate(private_options, existing=existing)]
        assert "main.tf" not in paths
        assert ".gitignore" not in paths
        assert "variables.tf" in paths

    def test_missing_readme_sections_appended(self, generator, private_options):
        existing = FileTreeDescription.from_contents({
            "README.md": "# internal-queue\n\n## Usage\n\nSee below.\n",
        })
        artifacts = generator.generate(private_options, existing=existing)
        appended = [a for a in artifacts if a.mode == "append"]
        assert [a.key for a in appended] == [
            "README.md#Requirements",
            "README.md#Inputs",
            "README.md#Outputs",
        ]
        assert appended[0].content.startswith("\n## Requirements")

        completed = existing.apply(artifacts)
        report = validate(completed, Profile.PRIVATE_MODULE)
        assert report.with_status(EntryStatus.MISSING) == []
        assert generator.generate(private_options, existing=completed) == []

    def test_public_readme_gets_attribution(self, generator, public_options):
        existing = FileTreeDescription.from_contents({
            "README.md": "# m\n\n## Usage\n\n## Requirements\n\n## Inputs\n\n## Outputs\n",
        })
        artifacts = generator.generate(public_options, existing=existing)
        [attribution] = [a for a in artifacts if a.mode == "append"]
        assert attribution.section == "Attribution"
        assert "Example Corp" in attribution.content

    def test_module_function_uses_default_templates(self, private_options):
        assert [a.path for a in generate(private_options)] == [
            a.path for a in ScaffoldGenerator().generate(private_options)
        ]


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class TestContent:
    def test_versions_pins_native_test_minimum(self, rendered_public):
        assert 'required_version = ">= 1.6.0"' in _by_path(rendered_public)["versions.tf"]

    def test_readme_usage_block(self, rendered_public):
        readme = _by_path(rendered_public)["README.md"]
        assert 'module "network_vpc"' in readme
        assert 'source = "./modules/network-vpc"' in readme
        assert "terraform test" in readme

    def test_tofu_commands(self, generator, private_options):
        files = _by_path(generator.generate(private_options))
        assert "tofu test" in files["README.md"]
        assert "terraform test" not in files["README.md"]
        assert "# Run with: tofu test" in files["tests/defaults.tftest.hcl"]

    def test_mit_license(self, rendered_public):
        license_text = _by_path(rendered_public)["LICENSE"]
        assert license_text.startswith("MIT License")
        assert "Copyright (c) 2026 Example Corp" in license_text

    def test_apache_license(self, generator):
        options = GenerationOptions(
            engine="terraform",
            visibility="public",
            license_kind="apache2",
            copyright_holder="Example Corp",
            copyright_year=2025,
        )
        license_text = _by_path(generator.generate(options))["LICENSE"]
        assert "Apache License" in license_text
        assert "Copyright 2025 Example Corp" in license_text

    def test_pre_commit_is_valid_yaml(self, rendered_public):
        config = yaml.safe_load(_by_path(rendered_public)[".pre-commit-config.yaml"])
        hooks = config["repos"][0]["hooks"]
        assert [h["id"] for h in hooks] == list(PRE_COMMIT_HOOKS)
        assert all("args" not in h for h in hooks)

    def test_pre_commit_tofu_hooks(self, generator, private_options):
        config = yaml.safe_load(
            _by_path(generator.generate(private_options))[".pre-commit-config.yaml"]
        )
        for hook in config["repos"][0]["hooks"]:
            assert hook["args"] == ["--hook-config=--tf-path=tofu"]

    def test_gitignore_covers_state(self, rendered_public):
        assert "*.tfstate" in _by_path(rendered_public)[".gitignore"]
