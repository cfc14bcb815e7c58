"""Pydantic v2 models describing a project at advisory time.

``ProjectFacts`` is the single input of the rule engine.  It is frozen: the
orchestrator builds one per invocation from caller-supplied data and nothing
downstream may change it.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Engine(str, Enum):
    """Infrastructure-as-code tool the module targets."""
    TERRAFORM = "terraform"
    OPENTOFU = "opentofu"

    @property
    def cli(self) -> str:
        """Executable name used in command examples."""
        return "tofu" if self is Engine.OPENTOFU else "terraform"

    @property
    def display_name(self) -> str:
        return "OpenTofu" if self is Engine.OPENTOFU else "Terraform"


class Complexity(str, Enum):
    """How much logic the module carries (conditionals, loops, dynamic blocks)."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class CostSensitivity(str, Enum):
    """How expensive it is acceptable for the test suite to be."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class Visibility(str, Enum):
    """Whether the module is published or kept internal."""
    PUBLIC = "public"
    PRIVATE = "private"


class BlockShape(str, Enum):
    """Collection type of a nested block or attribute in the provider schema."""
    SET = "set"
    LIST = "list"
    SCALAR = "scalar"


class Feature(str, Enum):
    """Version-gated testing features."""
    NATIVE_TESTS = "native-tests"
    MOCK_PROVIDERS = "mock-providers"


# Minimum tool version for each gated feature.  Both engines share the same
# numbering for these features (OpenTofu forked at 1.6).
FEATURE_MINIMUMS: dict[Feature, tuple[int, int, int]] = {
    Feature.NATIVE_TESTS: (1, 6, 0),
    Feature.MOCK_PROVIDERS: (1, 7, 0),
}


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+].*)?$")


class ToolVersion(BaseModel):
    """A ``major.minor.patch`` version; pre-release suffixes are ignored."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(..., ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)

    @classmethod
    def parse(cls, value: str) -> "ToolVersion":
        """Parse ``"1.6"``, ``"v1.8.2"`` or ``"1.7.0-beta1"``.

        Raises:
            ValueError: If *value* does not look like a version.
        """
        match = _VERSION_RE.match(str(value).strip())
        if not match:
            raise ValueError(f"Not a semantic version: {value!r}")
        major, minor, patch = match.groups()
        return cls(major=int(major), minor=int(minor or 0), patch=int(patch or 0))

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def at_least(self, major: int, minor: int = 0, patch: int = 0) -> bool:
        return self.as_tuple() >= (major, minor, patch)

    def supports(self, feature: Feature) -> bool:
        """Return ``True`` if this version ships *feature*."""
        return self.at_least(*FEATURE_MINIMUMS[feature])

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def minimum_version(feature: Feature) -> str:
    """Human-readable minimum version for *feature*, e.g. ``"1.7.0"``."""
    return ".".join(str(part) for part in FEATURE_MINIMUMS[feature])


# ---------------------------------------------------------------------------
# CI context
# ---------------------------------------------------------------------------

class CIContext(BaseModel):
    """Trigger context of the CI run the advice is computed for."""

    model_config = ConfigDict(frozen=True)

    branch: str = Field(..., description="Branch the pipeline runs on, e.g. 'main'")
    event: str = Field(default="push", description="Trigger event, e.g. 'push' or 'pull_request'")


# ---------------------------------------------------------------------------
# Project facts
# ---------------------------------------------------------------------------

class ProjectFacts(BaseModel):
    """Immutable snapshot describing one project at advisory time."""

    model_config = ConfigDict(frozen=True)

    tool_version: ToolVersion = Field(..., description="Declared tool version")
    engine: Engine = Field(..., description="terraform or opentofu")
    logic_complexity: Complexity = Field(default=Complexity.SIMPLE)
    team_skillset: frozenset[str] = Field(
        default_factory=frozenset,
        description="Capability tags such as 'has-go-experience'",
    )
    cost_sensitivity: CostSensitivity = Field(default=CostSensitivity.UNKNOWN)
    block_shapes: dict[str, BlockShape] = Field(
        default_factory=dict,
        description="Logical attribute name -> collection shape",
    )
    visibility: Visibility = Field(default=Visibility.PRIVATE)
    security_compliance: bool = Field(
        default=False, description="Whether security/compliance scanning is required"
    )
    ci: Optional[CIContext] = Field(default=None, description="CI trigger context, if any")

    # Optional fields that silently change the outcome when defaulted.
    REPORTED_DEFAULTS: ClassVar[tuple[str, ...]] = (
        "logic_complexity",
        "cost_sensitivity",
        "team_skillset",
        "visibility",
    )

    @field_validator("tool_version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        if isinstance(value, float):
            # 1.10 and 1.1 are the same float; the minor version is lost.
            raise ValueError(f"tool_version must be a string such as \"1.10\", got {value!r}")
        if isinstance(value, (str, int)):
            return ToolVersion.parse(str(value))
        return value

    @field_validator("team_skillset", mode="before")
    @classmethod
    def _coerce_skillset(cls, value: Any) -> Any:
        if isinstance(value, str):
            return frozenset({value})
        return value

    def has_skill(self, tag: str) -> bool:
        return tag in self.team_skillset

    def supports(self, feature: Feature) -> bool:
        return self.tool_version.supports(feature)

    def defaulted_fields(self) -> list[tuple[str, Any]]:
        """Return ``(field, default)`` for outcome-relevant fields the caller omitted."""
        defaulted: list[tuple[str, Any]] = []
        for name in self.REPORTED_DEFAULTS:
            if name not in self.model_fields_set:
                value = getattr(self, name)
                if isinstance(value, frozenset):
                    value = sorted(value)
                elif isinstance(value, Enum):
                    value = value.value
                defaulted.append((name, value))
        return defaulted
