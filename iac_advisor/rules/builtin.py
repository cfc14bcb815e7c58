"""Built-in testing-strategy decision table.

Order matters and is encoded in ``priority``:

10  pre-1.6 versions get Terratest only (no native framework yet)
20  high cost sensitivity: mocks from 1.7, minimal real resources on 1.6.x
30  complex logic: native unit tests plus Terratest integration tests
40  everything else on 1.6+: native tests
"""

from __future__ import annotations

from iac_advisor.facts.models import Complexity, CostSensitivity, Feature, ProjectFacts

from .models import (
    MOCK_PROVIDERS,
    NATIVE_TESTS,
    TERRATEST,
    Recommendation,
    Rule,
    TestingApproach,
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _lacks_native_tests(facts: ProjectFacts) -> bool:
    return not facts.supports(Feature.NATIVE_TESTS)


def _high_cost_with_mocks(facts: ProjectFacts) -> bool:
    return (
        facts.supports(Feature.MOCK_PROVIDERS)
        and facts.cost_sensitivity == CostSensitivity.HIGH
    )


def _high_cost_without_mocks(facts: ProjectFacts) -> bool:
    return (
        facts.supports(Feature.NATIVE_TESTS)
        and not facts.supports(Feature.MOCK_PROVIDERS)
        and facts.cost_sensitivity == CostSensitivity.HIGH
    )


def _complex_logic(facts: ProjectFacts) -> bool:
    return (
        facts.supports(Feature.NATIVE_TESTS)
        and facts.logic_complexity == Complexity.COMPLEX
    )


def _native_available(facts: ProjectFacts) -> bool:
    return facts.supports(Feature.NATIVE_TESTS)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

BUILTIN_RULES: tuple[Rule, ...] = (
    Rule(
        name="pre-native-framework",
        priority=10,
        condition=_lacks_native_tests,
        recommendation=Recommendation(
            approach=TestingApproach.TERRATEST_ONLY,
            tools=(TERRATEST,),
            rationale=(
                "No native test framework before version 1.6: write module tests "
                "with Terratest, or upgrade to 1.6+ to use native tests."
            ),
        ),
        description="version < 1.6",
    ),
    Rule(
        name="cost-sensitive-mocked",
        priority=20,
        condition=_high_cost_with_mocks,
        recommendation=Recommendation(
            approach=TestingApproach.NATIVE_WITH_MOCKS,
            tools=(NATIVE_TESTS, MOCK_PROVIDERS),
            rationale=(
                "Cost sensitivity is high and mock providers are available (1.7+): "
                "run native tests against mocked providers so no billable "
                "resources are created."
            ),
        ),
        description="version >= 1.7 and cost sensitivity high",
    ),
    Rule(
        name="cost-sensitive-minimal",
        priority=20,
        condition=_high_cost_without_mocks,
        recommendation=Recommendation(
            approach=TestingApproach.NATIVE_MINIMAL_RESOURCES,
            tools=(NATIVE_TESTS,),
            rationale=(
                "Cost sensitivity is high but mock providers need 1.7+: run native "
                "tests with plan-only runs where possible and real-but-minimal "
                "resources elsewhere."
            ),
        ),
        description="1.6 <= version < 1.7 and cost sensitivity high",
    ),
    Rule(
        name="complex-logic",
        priority=30,
        condition=_complex_logic,
        recommendation=Recommendation(
            approach=TestingApproach.NATIVE_PLUS_TERRATEST,
            tools=(NATIVE_TESTS, TERRATEST),
            rationale=(
                "Complex module logic: cover units with native tests and exercise "
                "end-to-end behaviour with Terratest integration tests."
            ),
        ),
        description="version >= 1.6 and complexity complex",
    ),
    Rule(
        name="native-default",
        priority=40,
        condition=_native_available,
        recommendation=Recommendation(
            approach=TestingApproach.NATIVE,
            tools=(NATIVE_TESTS,),
            rationale=(
                "The native test framework covers this module; no extra language "
                "toolchain is needed."
            ),
        ),
        description="version >= 1.6",
    ),
)


DEFAULT_RECOMMENDATION = Recommendation(
    approach=TestingApproach.STATIC_ANALYSIS_ONLY,
    tools=("fmt", "validate", "tflint"),
    rationale="Insufficient information to choose a test framework; run static analysis only.",
    rule="default",
)
