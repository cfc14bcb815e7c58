"""Tests for the Jinja2 template renderer (iac_advisor.scaffolder.templates)."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import UndefinedError

from iac_advisor.scaffolder.profiles import build_profiles
from iac_advisor.scaffolder.templates import (
    TemplateRenderer,
    hcl_label,
    hcl_string,
    slugify,
)


pytestmark = pytest.mark.unit


class TestFilters:
    @pytest.mark.parametrize("value,expected", [
        ("Network VPC", "network-vpc"),
        ("  terraform_aws--EKS ", "terraform-aws-eks"),
        ("!!!", ""),
    ])
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("network-vpc", "network_vpc"),
        ("My Module", "my_module"),
        ("3tier-app", "m_3tier_app"),
        ("---", "module"),
    ])
    def test_hcl_label(self, value, expected):
        assert hcl_label(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("./modules/vpc", '"./modules/vpc"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("${var.x}", '"$${var.x}"'),
    ])
    def test_hcl_string(self, value, expected):
        assert hcl_string(value) == expected

    def test_filters_registered(self):
        renderer = TemplateRenderer()
        assert renderer.render_string("{{ 'A B' | slugify }}", {}) == "a-b"
        assert renderer.render_string("{{ 'a-b' | hcl_label }}", {}) == "a_b"
        assert renderer.render_string("{{ 'x' | hcl_string }}", {}) == '"x"'


class TestTemplateRenderer:
    def test_every_profile_template_exists(self):
        renderer = TemplateRenderer()
        for artifacts in build_profiles().values():
            for artifact in artifacts:
                assert renderer.has_template(artifact.template), artifact.template

    def test_list_templates_prefix(self):
        assert TemplateRenderer().list_templates("licenses") == [
            "licenses/apache2.j2",
            "licenses/mit.j2",
        ]

    def test_list_templates_unknown_prefix(self):
        assert TemplateRenderer().list_templates("nope") == []

    def test_undefined_variable_raises(self):
        with pytest.raises(UndefinedError):
            TemplateRenderer().render_string("{{ missing }}", {})

    def test_trailing_newline_kept(self):
        out = TemplateRenderer().render("versions.tf.j2", {"required_version": "1.6.0"})
        assert out.endswith("}\n")

    def test_override_dir_shadows_packaged_template(self, tmp_path: Path):
        (tmp_path / "gitignore.j2").write_text("# {{ engine }} only\n", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render("gitignore.j2", {"engine": "tofu"}) == "# tofu only\n"

    def test_override_dir_falls_back_to_packaged(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        out = renderer.render("versions.tf.j2", {"required_version": "1.6.0"})
        assert 'required_version = ">= 1.6.0"' in out
