"""Testing-strategy rule engine.

Evaluates an ordered rule table over :class:`ProjectFacts` and returns the
recommendation of the first matching rule, then applies the orthogonal
augmentations (security scanning, CI gating, team-skill notes, assertion
hints for block shapes).
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from typing import Iterable, Optional

from iac_advisor.config import RuleConfig
from iac_advisor.errors import RuleConflict, UnsupportedFeatureForVersion
from iac_advisor.facts.models import (
    BlockShape,
    CIContext,
    Complexity,
    CostSensitivity,
    Engine,
    ProjectFacts,
    ToolVersion,
    Visibility,
    minimum_version,
)
from iac_advisor.registry import TableRegistry

from .builtin import BUILTIN_RULES, DEFAULT_RECOMMENDATION
from .models import NATIVE_TESTS, TERRATEST, AssertionHint, Recommendation, Rule


# ---------------------------------------------------------------------------
# Probe grid used for load-time validation
# ---------------------------------------------------------------------------

# One version on each side of every feature gate.
PROBE_VERSIONS: tuple[str, ...] = ("1.5.7", "1.6.0", "1.7.0", "1.8.5")


def probe_facts() -> Iterable[ProjectFacts]:
    """Yield representative facts covering every discriminating dimension."""
    skillsets = (frozenset(), frozenset({"has-go-experience", "has-native-test-experience"}))
    ci_contexts = (None, CIContext(branch="main"), CIContext(branch="feature/probe"))
    for version, engine, complexity, cost, security, visibility, ci, skills in itertools.product(
        PROBE_VERSIONS,
        Engine,
        Complexity,
        CostSensitivity,
        (False, True),
        Visibility,
        ci_contexts,
        skillsets,
    ):
        yield ProjectFacts(
            tool_version=ToolVersion.parse(version),
            engine=engine,
            logic_complexity=complexity,
            cost_sensitivity=cost,
            security_compliance=security,
            visibility=visibility,
            ci=ci,
            team_skillset=skills,
        )


# ---------------------------------------------------------------------------
# Assertion hints per block shape
# ---------------------------------------------------------------------------

def _assertion_hint(attribute: str, shape: BlockShape) -> AssertionHint:
    if shape == BlockShape.SET:
        return AssertionHint(
            attribute=attribute,
            shape=shape,
            command="apply",
            strategy="for-expression",
            example=f"anytrue([for item in {attribute} : item.enabled])",
        )
    if shape == BlockShape.LIST:
        return AssertionHint(
            attribute=attribute,
            shape=shape,
            command="plan",
            strategy="index",
            example=f"{attribute}[0] != null",
        )
    return AssertionHint(
        attribute=attribute,
        shape=shape,
        command="plan",
        strategy="direct",
        example=f"{attribute} != null",
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class RuleEngine:
    """Evaluates an immutable, validated rule table.

    The table is sorted by priority once at construction.  Construction
    fails with :class:`RuleConflict` if rule names repeat, if two rules at the
    same priority can both match, or if any rule would recommend a feature
    unavailable at a version for which it matches.
    """

    def __init__(
        self,
        rules: Iterable[Rule] = BUILTIN_RULES,
        config: Optional[RuleConfig] = None,
    ) -> None:
        self.config = config or RuleConfig()
        self.rules: tuple[Rule, ...] = tuple(sorted(rules, key=lambda r: r.priority))
        self._validate()

    # -- Load-time validation ----------------------------------------------

    def _validate(self) -> None:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.name in seen:
                raise RuleConflict(f"Duplicate rule name '{rule.name}'", rule=rule.name)
            seen.add(rule.name)

        by_priority: dict[int, list[Rule]] = defaultdict(list)
        for rule in self.rules:
            by_priority[rule.priority].append(rule)
        shared = [group for group in by_priority.values() if len(group) > 1]

        for facts in probe_facts():
            for group in shared:
                matching = [rule.name for rule in group if self._safe_match(rule, facts)]
                if len(matching) > 1:
                    raise RuleConflict(
                        f"Rules {', '.join(matching)} share priority "
                        f"{group[0].priority} and both match "
                        f"{facts.engine.value} {facts.tool_version}",
                        rules=matching,
                        priority=group[0].priority,
                    )
            winner = self._first_match(facts)
            if winner is not None:
                try:
                    _check_supported(winner.recommendation, facts)
                except UnsupportedFeatureForVersion as exc:
                    raise RuleConflict(
                        f"Rule '{winner.name}' can fire where it is unsupported: {exc}",
                        rule=winner.name,
                    ) from exc

    @staticmethod
    def _safe_match(rule: Rule, facts: ProjectFacts) -> bool:
        try:
            return rule.matches(facts)
        except Exception as exc:
            raise RuleConflict(
                f"Condition of rule '{rule.name}' raised {type(exc).__name__}: {exc}",
                rule=rule.name,
            ) from exc

    # -- Evaluation --------------------------------------------------------

    def _first_match(self, facts: ProjectFacts) -> Optional[Rule]:
        for rule in self.rules:
            if self._safe_match(rule, facts):
                return rule
        return None

    def evaluate(self, facts: ProjectFacts) -> Recommendation:
        """Return the recommendation for *facts*.

        Never fails for lack of a matching rule: the default
        static-analysis-only recommendation is returned instead.

        Raises:
            UnsupportedFeatureForVersion: If the chosen recommendation needs
                a feature the declared version does not have.
        """
        rule = self._first_match(facts)
        if rule is None:
            recommendation = DEFAULT_RECOMMENDATION
        else:
            recommendation = rule.recommendation.model_copy(update={"rule": rule.name})
        _check_supported(recommendation, facts)
        return self._augment(recommendation, facts)

    # -- Augmentations -----------------------------------------------------

    def _augment(self, recommendation: Recommendation, facts: ProjectFacts) -> Recommendation:
        cfg = self.config

        if facts.security_compliance and cfg.security_scanners:
            recommendation = recommendation.with_tools(*cfg.security_scanners).with_note(
                "Security/compliance required: run "
                + ", ".join(cfg.security_scanners)
                + " on every change."
            )

        if recommendation.uses(TERRATEST):
            if facts.ci is not None and facts.ci.branch not in cfg.integration_branches:
                recommendation = recommendation.model_copy(
                    update={"run_integration_tests": False}
                ).with_note(
                    f"Terratest integration tests run only on "
                    f"{', '.join(cfg.integration_branches)}; skipped on branch "
                    f"'{facts.ci.branch}'."
                )
            if not facts.has_skill(cfg.go_skill_tag):
                recommendation = recommendation.with_note(
                    "Team lists no Go experience; Terratest suites need Go tooling "
                    "and reviewers."
                )

        if recommendation.uses(NATIVE_TESTS):
            if not facts.has_skill(cfg.native_test_skill_tag):
                recommendation = recommendation.with_note(
                    f"Team lists no native test experience; start from the scaffolded "
                    f"tests/defaults.tftest.hcl and run '{facts.engine.cli} test'."
                )
            if facts.block_shapes:
                hints = tuple(
                    _assertion_hint(attribute, facts.block_shapes[attribute])
                    for attribute in sorted(facts.block_shapes)
                )
                recommendation = recommendation.model_copy(update={"assertion_hints": hints})

        return recommendation


def _check_supported(recommendation: Recommendation, facts: ProjectFacts) -> None:
    for feature in sorted(recommendation.required_features(), key=lambda f: f.value):
        if not facts.supports(feature):
            raise UnsupportedFeatureForVersion(
                feature=feature.value,
                version=str(facts.tool_version),
                minimum=minimum_version(feature),
            )


# ---------------------------------------------------------------------------
# Hot-reloadable holder
# ---------------------------------------------------------------------------

class RuleBook:
    """Process-wide holder of the active :class:`RuleEngine`.

    ``reload`` validates the new table before swapping it in; a rejected
    table leaves the previous engine active.
    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        config: Optional[RuleConfig] = None,
    ) -> None:
        self.config = config or RuleConfig()
        table = tuple(rules) if rules is not None else BUILTIN_RULES
        self._registry: TableRegistry[RuleEngine] = TableRegistry(
            lambda: RuleEngine(table, self.config)
        )

    @property
    def engine(self) -> RuleEngine:
        return self._registry.current

    @property
    def generation(self) -> int:
        return self._registry.generation

    def evaluate(self, facts: ProjectFacts) -> Recommendation:
        return self._registry.current.evaluate(facts)

    def reload(self, rules: Iterable[Rule]) -> RuleEngine:
        table = tuple(rules)
        return self._registry.reload(lambda: RuleEngine(table, self.config))
