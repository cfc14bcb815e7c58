"""Rule and recommendation models for the testing-strategy rule engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from iac_advisor.facts.models import BlockShape, Feature, ProjectFacts


# ---------------------------------------------------------------------------
# Tool names
# ---------------------------------------------------------------------------

TERRATEST = "Terratest"
NATIVE_TESTS = "native-tests"
MOCK_PROVIDERS = "mock-providers"

# Tools that only exist from a given tool version onward.
TOOL_FEATURES: dict[str, Feature] = {
    NATIVE_TESTS: Feature.NATIVE_TESTS,
    MOCK_PROVIDERS: Feature.MOCK_PROVIDERS,
}


class TestingApproach(str, Enum):
    """Overall testing approach a recommendation stands for."""
    TERRATEST_ONLY = "terratest-only"
    NATIVE_WITH_MOCKS = "native-with-mocks"
    NATIVE_MINIMAL_RESOURCES = "native-minimal-resources"
    NATIVE_PLUS_TERRATEST = "native-plus-terratest"
    NATIVE = "native"
    STATIC_ANALYSIS_ONLY = "static-analysis-only"


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------

class AssertionHint(BaseModel):
    """How to assert on one attribute in a native test ``run`` block."""

    model_config = ConfigDict(frozen=True)

    attribute: str = Field(..., description="Logical attribute name")
    shape: BlockShape = Field(..., description="Collection shape of the attribute")
    command: str = Field(..., description="'plan' or 'apply'")
    strategy: str = Field(..., description="Indexing strategy for assertions")
    example: str = Field(default="", description="Assertion condition snippet")


class Recommendation(BaseModel):
    """Ranked testing recommendation produced by the rule engine."""

    model_config = ConfigDict(frozen=True)

    approach: TestingApproach = Field(..., description="Overall approach")
    tools: tuple[str, ...] = Field(default=(), description="Ordered, de-duplicated tool list")
    rationale: str = Field(..., description="Why this approach was chosen")
    notes: tuple[str, ...] = Field(default=(), description="Notes added by augmentations")
    assertion_hints: tuple[AssertionHint, ...] = Field(default=())
    run_integration_tests: bool = Field(
        default=True, description="False when the CI context defers integration suites"
    )
    rule: str = Field(default="", description="Name of the rule that fired")

    def uses(self, tool: str) -> bool:
        return tool in self.tools

    def required_features(self) -> set[Feature]:
        """Version-gated features this recommendation depends on."""
        return {TOOL_FEATURES[tool] for tool in self.tools if tool in TOOL_FEATURES}

    def with_tools(self, *tools: str) -> "Recommendation":
        """Return a copy with *tools* appended, skipping ones already present."""
        merged = list(self.tools)
        for tool in tools:
            if tool not in merged:
                merged.append(tool)
        return self.model_copy(update={"tools": tuple(merged)})

    def with_note(self, note: str) -> "Recommendation":
        return self.model_copy(update={"notes": self.notes + (note,)})


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """Ordered decision unit.

    Rules are evaluated in ascending ``priority``; the first one whose
    ``condition`` holds wins.  Conditions sharing a priority must be mutually
    exclusive.
    """

    name: str
    priority: int
    condition: Callable[[ProjectFacts], bool]
    recommendation: Recommendation
    description: str = ""

    def matches(self, facts: ProjectFacts) -> bool:
        return bool(self.condition(facts))
