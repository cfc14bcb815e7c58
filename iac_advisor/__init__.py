"""IaC Module Advisor.

Recommends a testing strategy for Terraform/OpenTofu modules from declared
project facts, validates a module tree against a canonical scaffold profile
and renders the artifacts the tree is missing.

Quick usage::

    from iac_advisor import advise

    report = advise({"tool_version": "1.8.0", "engine": "opentofu", "cost_sensitivity": "high"})
    print(report.recommendation.approach)  # native-with-mocks
"""

from iac_advisor.advisor import Advisor, AdvisoryReport, StaticAnalysisResult, advise
from iac_advisor.config import AdvisorConfig
from iac_advisor.errors import (
    AdvisorError,
    AdvisoryIssue,
    IncompleteFacts,
    InvalidConfiguration,
    RuleConflict,
    UnsupportedFeatureForVersion,
)
from iac_advisor.facts import ProjectFacts

__version__ = "0.1.0"

__all__ = [
    "Advisor",
    "AdvisorConfig",
    "AdvisorError",
    "AdvisoryIssue",
    "AdvisoryReport",
    "IncompleteFacts",
    "InvalidConfiguration",
    "ProjectFacts",
    "RuleConflict",
    "StaticAnalysisResult",
    "UnsupportedFeatureForVersion",
    "advise",
]
