"""Testing-strategy rule engine.

Usage::

    from iac_advisor.rules import RuleEngine

    engine = RuleEngine()
    recommendation = engine.evaluate(facts)
    print(recommendation.tools, recommendation.rationale)
"""

from iac_advisor.rules.builtin import BUILTIN_RULES, DEFAULT_RECOMMENDATION
from iac_advisor.rules.engine import RuleBook, RuleEngine
from iac_advisor.rules.models import (
    MOCK_PROVIDERS,
    NATIVE_TESTS,
    TERRATEST,
    AssertionHint,
    Recommendation,
    Rule,
    TestingApproach,
)

__all__ = [
    "BUILTIN_RULES",
    "DEFAULT_RECOMMENDATION",
    "MOCK_PROVIDERS",
    "NATIVE_TESTS",
    "TERRATEST",
    "AssertionHint",
    "Recommendation",
    "Rule",
    "RuleBook",
    "RuleEngine",
    "TestingApproach",
]
