"""Advisory orchestrator.

Composes the rule engine, the scaffold validator and the scaffold generator
into a single ``advise`` call and a command-line entry point:

1. Collect warnings for facts the caller left out.
2. Evaluate the testing-strategy rules.
3. Validate the module tree, when one is supplied.
4. Render missing scaffold artifacts, when generation options are supplied.

The first failing step aborts the call.  Its error is returned on the report
rather than raised, so callers only ever see load-time errors
(``RuleConflict``) as exceptions.

Usage::

    python -m iac_advisor.advisor facts.json
    python -m iac_advisor.advisor facts.json --module ./modules/vpc --generate --license mit --write
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field
from rich.markup import escape

from iac_advisor.config import AdvisorConfig
from iac_advisor.errors import AdvisorError, AdvisoryIssue, IncompleteFacts, InvalidConfiguration
from iac_advisor.facts.models import ProjectFacts
from iac_advisor.rules.engine import RuleBook
from iac_advisor.rules.models import Recommendation
from iac_advisor.scaffolder.generator import GenerationOptions, LicenseKind, ScaffoldGenerator
from iac_advisor.scaffolder.profiles import Profile
from iac_advisor.scaffolder.tree import FileTreeDescription, RenderedArtifact, describe_directory
from iac_advisor.scaffolder.validator import ComplianceReport, ScaffoldValidator
from iac_advisor.utils import (
    console,
    load_json,
    print_error,
    print_rows,
    print_section_header,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
    write_artifacts,
)


# ---------------------------------------------------------------------------
# External static-analysis result
# ---------------------------------------------------------------------------

class CheckResult(BaseModel):
    """Outcome of one external static-analysis check (fmt, validate, tflint, ...)."""

    name: str
    passed: bool
    output: str = Field(default="")


class StaticAnalysisResult(BaseModel):
    """Pass/fail result of an external static-analysis run."""

    checks: list[CheckResult] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

class AdvisoryReport(BaseModel):
    """Single structured result of an ``advise`` call."""

    model_config = ConfigDict(frozen=True)

    ok: bool = Field(..., description="False when a sub-call failed; see ``error``")
    recommendation: Optional[Recommendation] = None
    compliance: Optional[ComplianceReport] = None
    artifacts: tuple[RenderedArtifact, ...] = Field(default=())
    static_analysis: Optional[StaticAnalysisResult] = None
    warnings: tuple[AdvisoryIssue, ...] = Field(default=())
    error: Optional[AdvisoryIssue] = None

    @computed_field  # type: ignore[misc]
    @property
    def passed(self) -> bool:
        """True when the call succeeded and every attached check passed."""
        if not self.ok:
            return False
        if self.compliance is not None and not self.compliance.passed:
            return False
        if self.static_analysis is not None and not self.static_analysis.passed:
            return False
        return True


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class Advisor:
    """Advisory orchestrator.

    Constructing an ``Advisor`` loads and validates the rule table; a
    malformed table raises :class:`RuleConflict` here and nowhere else.

    Attributes:
        config: Global advisor configuration.
        rule_book: Holder of the active rule engine.
        validator: Scaffold validator configured with ``config.naming``.
        generator: Scaffold generator using ``config.template_dir``.
    """

    def __init__(
        self,
        config: Optional[AdvisorConfig] = None,
        rule_book: Optional[RuleBook] = None,
    ) -> None:
        self.config = config or AdvisorConfig()
        self.rule_book = rule_book or RuleBook(config=self.config.rules)
        self.validator = ScaffoldValidator(self.config.naming)
        self.generator = ScaffoldGenerator(template_dir=self.config.template_dir)

    def advise(
        self,
        facts: ProjectFacts | dict[str, Any],
        tree: Optional[FileTreeDescription] = None,
        generation: Optional[GenerationOptions] = None,
        static_analysis: Optional[StaticAnalysisResult] = None,
    ) -> AdvisoryReport:
        """Run the advisory sequence for one project.

        Args:
            facts: Project facts, or a mapping validated into them.
            tree: Snapshot of the module tree.  Validated against the profile
                implied by ``facts.visibility`` and used as the existing tree
                for generation.
            generation: Options for rendering missing scaffold artifacts.
            static_analysis: Result of an external static-analysis run to
                merge into the report.

        Returns:
            An :class:`AdvisoryReport`.  On failure ``ok`` is ``False`` and
            ``error`` holds the structured error of the first failing step.
        """
        try:
            if not isinstance(facts, ProjectFacts):
                facts = ProjectFacts.model_validate(facts)
        except ValidationError as exc:
            error = InvalidConfiguration(
                f"Invalid project facts: {exc.error_count()} validation error(s)",
                errors=[f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()],
            )
            return AdvisoryReport(ok=False, error=error.as_issue(), static_analysis=static_analysis)

        warnings = tuple(
            IncompleteFacts(name, default).as_issue() for name, default in facts.defaulted_fields()
        )

        try:
            recommendation = self.rule_book.evaluate(facts)
            compliance = None
            if tree is not None:
                compliance = self.validator.validate(tree, Profile.for_visibility(facts.visibility))
            artifacts: list[RenderedArtifact] = []
            if generation is not None:
                artifacts = self.generator.generate(generation, existing=tree)
        except AdvisorError as exc:
            return AdvisoryReport(
                ok=False,
                error=exc.as_issue(),
                warnings=warnings,
                static_analysis=static_analysis,
            )

        return AdvisoryReport(
            ok=True,
            recommendation=recommendation,
            compliance=compliance,
            artifacts=tuple(artifacts),
            static_analysis=static_analysis,
            warnings=warnings,
        )


@lru_cache(maxsize=1)
def default_advisor() -> Advisor:
    """Process-wide advisor with the default configuration."""
    return Advisor()


def advise(
    facts: ProjectFacts | dict[str, Any],
    tree: Optional[FileTreeDescription] = None,
    generation: Optional[GenerationOptions] = None,
    static_analysis: Optional[StaticAnalysisResult] = None,
) -> AdvisoryReport:
    """Run :meth:`Advisor.advise` on the default advisor."""
    return default_advisor().advise(facts, tree, generation, static_analysis)


# ---------------------------------------------------------------------------
# Report rendering
# ---------------------------------------------------------------------------

def print_report(report: AdvisoryReport) -> None:
    """Render *report* to the console with Rich tables."""
    for warning in report.warnings:
        print_warning(f"warning: {warning.message}")

    if report.error is not None:
        print_error(f"{report.error.code}: {report.error.message}")
        return

    rec = report.recommendation
    if rec is not None:
        print_section_header("Testing strategy")
        print_summary_table(
            {
                "Approach": rec.approach.value,
                "Tools": ", ".join(rec.tools),
                "Rule": rec.rule,
                "Integration tests": "run" if rec.run_integration_tests else "deferred",
                "Rationale": rec.rationale,
            },
            title="Recommendation",
        )
        for note in rec.notes:
            console.print(f"  - {escape(note)}")
        if rec.assertion_hints:
            print_rows(
                "Assertion hints",
                ["Attribute", "Shape", "Command", "Strategy", "Example"],
                (
                    [h.attribute, h.shape.value, h.command, h.strategy, h.example]
                    for h in rec.assertion_hints
                ),
            )

    if report.compliance is not None:
        print_section_header(f"Scaffold compliance ({report.compliance.profile.value})", "bright_green")
        print_rows(
            "Artifacts",
            ["Artifact", "Kind", "Status", "Detail"],
            (
                [e.artifact, e.kind.value, e.status.value, e.detail]
                for e in report.compliance.entries
            ),
        )
        if report.compliance.findings:
            print_rows(
                "Naming findings",
                ["Code", "Subject", "Message"],
                ([f.code.value, f.subject, f.message] for f in report.compliance.findings),
            )

    if report.artifacts:
        print_section_header("Generated artifacts", "bright_yellow")
        for artifact in report.artifacts:
            console.print(f"  {artifact.mode:<6} {artifact.key}")

    if report.static_analysis is not None:
        print_rows(
            "Static analysis",
            ["Check", "Result"],
            (
                [c.name, "passed" if c.passed else "failed"]
                for c in report.static_analysis.checks
            ),
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def _load_inputs(args: Any) -> tuple[
    AdvisorConfig,
    dict[str, Any],
    Optional[FileTreeDescription],
    Optional[GenerationOptions],
    Optional[StaticAnalysisResult],
]:
    """Read every file named on the command line into typed inputs."""
    config = AdvisorConfig.load(Path(args.config)) if args.config else AdvisorConfig.from_env()
    raw_facts = load_json(args.facts)

    tree = None
    if args.tree:
        tree = FileTreeDescription.model_validate(load_json(args.tree))
    elif args.module:
        tree = describe_directory(args.module)

    generation = None
    if args.generate:
        default_name = Path(args.module).name if args.module else "terraform-module"
        generation = GenerationOptions(
            engine=raw_facts.get("engine", "terraform"),
            visibility=raw_facts.get("visibility", "private"),
            license_kind=args.license,
            include_pre_commit=not args.no_pre_commit,
            module_name=args.module_name or default_name,
        )

    static_analysis = None
    if args.static_analysis:
        static_analysis = StaticAnalysisResult.model_validate(load_json(args.static_analysis))

    return config, raw_facts, tree, generation, static_analysis


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``python -m iac_advisor.advisor``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="IaC Module Advisor -- testing strategy and module scaffold checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m iac_advisor.advisor facts.json\n"
            "  python -m iac_advisor.advisor facts.json --module ./modules/vpc\n"
            "  python -m iac_advisor.advisor facts.json --module ./mod --generate --license mit --write\n"
        ),
    )
    parser.add_argument("facts", help="Path to a JSON file with the project facts")
    parser.add_argument("--module", "-m", default=None, help="Module directory to validate")
    parser.add_argument(
        "--tree", default=None, help="JSON file with a pre-computed file tree description"
    )
    parser.add_argument("--generate", action="store_true", help="Render missing scaffold artifacts")
    parser.add_argument(
        "--license",
        choices=[kind.value for kind in LicenseKind],
        default=LicenseKind.NONE.value,
        help="License for generated LICENSE file (default: none)",
    )
    parser.add_argument(
        "--no-pre-commit", action="store_true", help="Do not generate .pre-commit-config.yaml"
    )
    parser.add_argument("--module-name", default=None, help="Module name used in templates")
    parser.add_argument(
        "--write", action="store_true", help="Write generated artifacts into --module"
    )
    parser.add_argument(
        "--static-analysis", default=None, help="JSON file with an external static-analysis result"
    )
    parser.add_argument("--config", default=None, help="JSON advisor configuration file")
    parser.add_argument("--json", dest="json_out", default=None, help="Also write the report as JSON")

    args = parser.parse_args(argv)

    facts_path = Path(args.facts)
    if not facts_path.exists():
        console.print(f"[bold red]Error:[/bold red] Facts file not found: {escape(str(facts_path))}")
        return 1
    if args.write and not args.module:
        console.print("[bold red]Error:[/bold red] --write requires --module")
        return 1

    if args.module and not args.tree and not Path(args.module).is_dir():
        console.print(f"[bold red]Error:[/bold red] Module directory not found: {escape(args.module)}")
        return 1

    try:
        config, raw_facts, tree, generation, static_analysis = _load_inputs(args)
    except (OSError, ValueError) as exc:
        # pydantic.ValidationError and json.JSONDecodeError are ValueErrors.
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        return 1

    report = Advisor(config).advise(raw_facts, tree, generation, static_analysis)
    print_report(report)

    if args.json_out:
        save_json(report.model_dump(mode="json"), args.json_out)

    if args.write and report.ok and report.artifacts:
        written = write_artifacts(args.module, report.artifacts)
        print_success(f"Wrote {len(written)} artifact(s) to {args.module}")

    if report.passed:
        print_success("Advice completed.")
        return 0
    print_error("Advice completed with problems.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
