"""Unit tests for AdvisorConfig and related Pydantic models (iac_advisor.config).

Tests cover:
- NamingConfig and RuleConfig defaults
- AdvisorConfig save/load round trip
- AdvisorConfig.from_env for booleans, lists and the template directory
- Invalid boolean environment values
"""

from __future__ import annotations

from pathlib import Path

import pytest

from iac_advisor.config import (
    DEFAULT_GENERIC_IDENTIFIERS,
    AdvisorConfig,
    NamingConfig,
    RuleConfig,
)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    @pytest.mark.unit
    def test_naming_checks_enabled_by_default(self):
        naming = NamingConfig()
        assert naming.check_singleton_names is True
        assert naming.check_plural_names is True
        assert naming.check_identifier_names is True

    @pytest.mark.unit
    def test_generic_identifiers_default(self):
        naming = NamingConfig()
        assert naming.generic_identifiers == DEFAULT_GENERIC_IDENTIFIERS
        assert "name" in naming.generic_identifiers

    @pytest.mark.unit
    def test_default_lists_are_independent(self):
        a = NamingConfig()
        b = NamingConfig()
        a.generic_identifiers.append("foo")
        assert "foo" not in b.generic_identifiers

    @pytest.mark.unit
    def test_rule_config_defaults(self):
        rules = RuleConfig()
        assert rules.security_scanners == ["trivy", "checkov"]
        assert rules.integration_branches == ["main"]
        assert rules.go_skill_tag == "has-go-experience"

    @pytest.mark.unit
    def test_advisor_config_defaults(self):
        config = AdvisorConfig()
        assert config.template_dir is None
        assert isinstance(config.naming, NamingConfig)
        assert isinstance(config.rules, RuleConfig)


# ---------------------------------------------------------------------------
# Save / load
# ---------------------------------------------------------------------------


class TestSaveLoad:
    @pytest.mark.unit
    def test_save_creates_parent_dirs(self, tmp_path: Path):
        target = tmp_path / "nested" / "config.json"
        written = AdvisorConfig().save(target)
        assert written == target
        assert target.exists()

    @pytest.mark.unit
    def test_load_restores_custom_values(self, tmp_path: Path):
        config = AdvisorConfig(
            naming=NamingConfig(check_plural_names=False),
            rules=RuleConfig(integration_branches=["main", "release"]),
        )
        path = config.save(tmp_path / "config.json")

        loaded = AdvisorConfig.load(path)
        assert loaded.naming.check_plural_names is False
        assert loaded.rules.integration_branches == ["main", "release"]


# ---------------------------------------------------------------------------
# from_env
# ---------------------------------------------------------------------------


class TestFromEnv:
    @pytest.mark.unit
    def test_no_env_gives_defaults(self, clean_env):
        config = AdvisorConfig.from_env()
        assert config == AdvisorConfig()

    @pytest.mark.unit
    @pytest.mark.parametrize("raw,expected", [
        ("0", False),
        ("false", False),
        ("No", False),
        ("1", True),
        ("TRUE", True),
        ("yes", True),
    ])
    def test_boolean_flags(self, clean_env, raw, expected):
        clean_env.setenv("IAC_ADVISOR_CHECK_SINGLETON_NAMES", raw)
        config = AdvisorConfig.from_env()
        assert config.naming.check_singleton_names is expected

    @pytest.mark.unit
    def test_invalid_boolean_raises(self, clean_env):
        clean_env.setenv("IAC_ADVISOR_CHECK_PLURAL_NAMES", "maybe")
        with pytest.raises(ValueError, match="Invalid boolean"):
            AdvisorConfig.from_env()

    @pytest.mark.unit
    def test_list_variables(self, clean_env):
        clean_env.setenv("IAC_ADVISOR_GENERIC_IDENTIFIERS", "name, id ,,")
        clean_env.setenv("IAC_ADVISOR_SECURITY_SCANNERS", "tfsec")
        clean_env.setenv("IAC_ADVISOR_INTEGRATION_BRANCHES", "main,release")
        config = AdvisorConfig.from_env()
        assert config.naming.generic_identifiers == ["name", "id"]
        assert config.rules.security_scanners == ["tfsec"]
        assert config.rules.integration_branches == ["main", "release"]

    @pytest.mark.unit
    def test_template_dir(self, clean_env, tmp_path: Path):
        clean_env.setenv("IAC_ADVISOR_TEMPLATE_DIR", str(tmp_path))
        config = AdvisorConfig.from_env()
        assert config.template_dir == tmp_path
