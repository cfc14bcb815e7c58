"""Fact model consumed by the rule engine, validator and generator.

Usage::

    from iac_advisor.facts import ProjectFacts

    facts = ProjectFacts(tool_version="1.8", engine="terraform", cost_sensitivity="high")
    facts.supports(Feature.MOCK_PROVIDERS)  # True
"""

from iac_advisor.facts.models import (
    BlockShape,
    CIContext,
    Complexity,
    CostSensitivity,
    Engine,
    Feature,
    ProjectFacts,
    ToolVersion,
    Visibility,
)

__all__ = [
    "BlockShape",
    "CIContext",
    "Complexity",
    "CostSensitivity",
    "Engine",
    "Feature",
    "ProjectFacts",
    "ToolVersion",
    "Visibility",
]
