"""IaC Module Advisor configuration.

Centralised, typed configuration for the rule engine, the scaffold validator
and the generator.  All settings use Pydantic v2 models so they can be
validated at construction time and serialised to/from JSON or environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


DEFAULT_GENERIC_IDENTIFIERS: list[str] = [
    "name",
    "type",
    "value",
    "cidr",
    "instance_class",
    "port",
]

DEFAULT_GENERIC_RESOURCE_NAMES: list[str] = [
    "main",
    "default",
    "example",
    "resource",
    "instance",
    "item",
    "object",
    "test",
]


class NamingConfig(BaseModel):
    """Naming-convention checks run by the scaffold validator.

    Each check can be switched off on its own.
    """

    check_singleton_names: bool = Field(
        default=True, description="Flag single-instance resources not named 'this'"
    )
    check_plural_names: bool = Field(
        default=True, description="Flag 'this' on resource types with several instances"
    )
    check_identifier_names: bool = Field(
        default=True, description="Flag variables/outputs with non-descriptive names"
    )
    generic_identifiers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERIC_IDENTIFIERS),
        description="Variable/output names considered non-descriptive",
    )
    generic_resource_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERIC_RESOURCE_NAMES),
        description="Resource names considered generic for a singleton",
    )


class RuleConfig(BaseModel):
    """Tuning knobs for the orthogonal rule augmentations."""

    security_scanners: list[str] = Field(
        default_factory=lambda: ["trivy", "checkov"],
        description="Static scanners appended when security/compliance is required",
    )
    integration_branches: list[str] = Field(
        default_factory=lambda: ["main"],
        description="CI branches on which integration suites run",
    )
    go_skill_tag: str = Field(default="has-go-experience")
    native_test_skill_tag: str = Field(default="has-native-test-experience")


class AdvisorConfig(BaseModel):
    """Global advisor configuration.

    Instances are typically created once by ``Advisor`` or by the CLI entry
    point and then passed through the rest of the system.
    """

    naming: NamingConfig = Field(default_factory=NamingConfig)
    rules: RuleConfig = Field(default_factory=RuleConfig)
    template_dir: Optional[Path] = Field(
        default=None, description="Override directory for scaffold templates"
    )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "AdvisorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "AdvisorConfig":
        """Build an ``AdvisorConfig`` from environment variables.

        Recognised variables (all optional):
            IAC_ADVISOR_CHECK_SINGLETON_NAMES, IAC_ADVISOR_CHECK_PLURAL_NAMES,
            IAC_ADVISOR_CHECK_IDENTIFIER_NAMES, IAC_ADVISOR_GENERIC_IDENTIFIERS,
            IAC_ADVISOR_SECURITY_SCANNERS, IAC_ADVISOR_INTEGRATION_BRANCHES,
            IAC_ADVISOR_TEMPLATE_DIR.

        Boolean variables accept ``1/0``, ``true/false``, ``yes/no``; list
        variables are comma-separated.
        """
        naming_kwargs: dict[str, Any] = {}
        for flag in ("check_singleton_names", "check_plural_names", "check_identifier_names"):
            env_name = f"IAC_ADVISOR_{flag.upper()}"
            if os.environ.get(env_name):
                naming_kwargs[flag] = _parse_bool(os.environ[env_name])
        if os.environ.get("IAC_ADVISOR_GENERIC_IDENTIFIERS"):
            naming_kwargs["generic_identifiers"] = _parse_list(
                os.environ["IAC_ADVISOR_GENERIC_IDENTIFIERS"]
            )

        rule_kwargs: dict[str, Any] = {}
        if os.environ.get("IAC_ADVISOR_SECURITY_SCANNERS"):
            rule_kwargs["security_scanners"] = _parse_list(
                os.environ["IAC_ADVISOR_SECURITY_SCANNERS"]
            )
        if os.environ.get("IAC_ADVISOR_INTEGRATION_BRANCHES"):
            rule_kwargs["integration_branches"] = _parse_list(
                os.environ["IAC_ADVISOR_INTEGRATION_BRANCHES"]
            )

        template_dir = os.environ.get("IAC_ADVISOR_TEMPLATE_DIR")

        return cls(
            naming=NamingConfig(**naming_kwargs),
            rules=RuleConfig(**rule_kwargs),
            template_dir=Path(template_dir) if template_dir else None,
        )


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")


def _parse_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]
