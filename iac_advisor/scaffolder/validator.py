"""Scaffold compliance validation.

Checks a :class:`FileTreeDescription` against a scaffold profile and against
the resource/identifier naming conventions, and returns an immutable
:class:`ComplianceReport`.  Entries follow profile order; naming findings
come after, grouped by code, so reports diff cleanly between runs.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from iac_advisor.config import NamingConfig

from .profiles import ArtifactKind, Profile, ScaffoldArtifact, get_profile
from .tree import FileDescriptor, FileTreeDescription, ResourceDescriptor


SINGLETON_NAME = "this"


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------

class EntryStatus(str, Enum):
    PRESENT = "present"
    MISSING = "missing"
    MALFORMED = "malformed"


class FindingCode(str, Enum):
    NON_IDIOMATIC_SINGLETON_NAME = "non-idiomatic-singleton-name"
    AMBIGUOUS_PLURAL_NAME = "ambiguous-plural-name"
    NON_DESCRIPTIVE_IDENTIFIER = "non-descriptive-identifier"


class ComplianceEntry(BaseModel):
    """Status of one scaffold artifact."""

    model_config = ConfigDict(frozen=True)

    artifact: str = Field(..., description="Artifact key, e.g. 'README.md#Usage'")
    kind: ArtifactKind
    status: EntryStatus
    detail: str = Field(default="")


class NamingFinding(BaseModel):
    """A naming-convention violation."""

    model_config = ConfigDict(frozen=True)

    code: FindingCode
    subject: str = Field(..., description="Resource address or 'variable.<name>'")
    message: str


class ComplianceReport(BaseModel):
    """Result of validating one tree against one profile."""

    model_config = ConfigDict(frozen=True)

    profile: Profile
    entries: tuple[ComplianceEntry, ...] = Field(default=())
    findings: tuple[NamingFinding, ...] = Field(default=())

    @computed_field  # type: ignore[misc]
    @property
    def passed(self) -> bool:
        """True when nothing is missing or malformed and no naming rule is broken."""
        return not self.findings and all(
            entry.status == EntryStatus.PRESENT for entry in self.entries
        )

    def with_status(self, status: EntryStatus) -> list[ComplianceEntry]:
        return [entry for entry in self.entries if entry.status == status]

    def findings_for(self, code: FindingCode) -> list[NamingFinding]:
        return [finding for finding in self.findings if finding.code == code]


# ---------------------------------------------------------------------------
# Shape checks for known files
# ---------------------------------------------------------------------------

def _undocumented(kind: str) -> Callable[[FileDescriptor], Optional[str]]:
    def check(descriptor: FileDescriptor) -> Optional[str]:
        names = [
            d.name
            for d in descriptor.declarations
            if d.kind == kind and not d.has_description
        ]
        if names:
            return f"{kind} blocks without description: {', '.join(names)}"
        return None

    return check


def _has_terraform_block(descriptor: FileDescriptor) -> Optional[str]:
    if "terraform" not in descriptor.blocks:
        return "no terraform block with required_version/required_providers"
    return None


SHAPE_CHECKS: dict[str, Callable[[FileDescriptor], Optional[str]]] = {
    "variables.tf": _undocumented("variable"),
    "outputs.tf": _undocumented("output"),
    "versions.tf": _has_terraform_block,
}


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

class ScaffoldValidator:
    """Validates module trees against scaffold profiles and naming rules."""

    def __init__(self, naming: Optional[NamingConfig] = None) -> None:
        self.naming = naming or NamingConfig()

    def validate(self, tree: FileTreeDescription, profile: Profile | str) -> ComplianceReport:
        profile = Profile(profile)
        entries = [
            entry
            for artifact in get_profile(profile)
            if (entry := self._check_artifact(tree, artifact)) is not None
        ]
        return ComplianceReport(
            profile=profile,
            entries=tuple(entries),
            findings=tuple(self._naming_findings(tree)),
        )

    # -- Artifacts ---------------------------------------------------------

    def _check_artifact(
        self, tree: FileTreeDescription, artifact: ScaffoldArtifact
    ) -> Optional[ComplianceEntry]:
        descriptor = tree.get(artifact.path)

        if artifact.kind == ArtifactKind.REQUIRED_SECTION:
            if descriptor is None:
                return _entry(artifact, EntryStatus.MISSING, f"{artifact.path} not found")
            if not descriptor.has_section(artifact.section or ""):
                return _entry(
                    artifact, EntryStatus.MISSING, f"no '{artifact.section}' section"
                )
            return _entry(artifact, EntryStatus.PRESENT)

        if descriptor is None:
            if artifact.kind == ArtifactKind.OPTIONAL_FILE:
                return None
            return _entry(artifact, EntryStatus.MISSING, "file not found")

        check = SHAPE_CHECKS.get(artifact.path)
        problem = check(descriptor) if check else None
        if problem:
            return _entry(artifact, EntryStatus.MALFORMED, problem)
        return _entry(artifact, EntryStatus.PRESENT)

    # -- Naming ------------------------------------------------------------

    def _naming_findings(self, tree: FileTreeDescription) -> list[NamingFinding]:
        cfg = self.naming
        singletons: list[NamingFinding] = []
        plurals: list[NamingFinding] = []
        identifiers: list[NamingFinding] = []

        by_type: dict[str, list[ResourceDescriptor]] = defaultdict(list)
        for resource in tree.root_resources():
            by_type[resource.type].append(resource)

        for rtype in sorted(by_type):
            instances = by_type[rtype]
            if len(instances) == 1:
                name = instances[0].name
                if (
                    cfg.check_singleton_names
                    and name != SINGLETON_NAME
                    and self._is_generic(rtype, name)
                ):
                    singletons.append(NamingFinding(
                        code=FindingCode.NON_IDIOMATIC_SINGLETON_NAME,
                        subject=instances[0].address,
                        message=(
                            f"Only one {rtype} exists; name it '{SINGLETON_NAME}' "
                            f"instead of '{name}'."
                        ),
                    ))
            elif cfg.check_plural_names and any(r.name == SINGLETON_NAME for r in instances):
                plurals.append(NamingFinding(
                    code=FindingCode.AMBIGUOUS_PLURAL_NAME,
                    subject=f"{rtype}.{SINGLETON_NAME}",
                    message=(
                        f"{len(instances)} {rtype} resources exist; '{SINGLETON_NAME}' "
                        f"does not say which one it is."
                    ),
                ))

        if cfg.check_identifier_names:
            denylist = set(cfg.generic_identifiers)
            seen: set[tuple[str, str]] = set()
            for ident in sorted(tree.root_identifiers(), key=lambda i: (i.kind, i.name)):
                key = (ident.kind, ident.name)
                if key in seen or ident.name not in denylist:
                    continue
                seen.add(key)
                identifiers.append(NamingFinding(
                    code=FindingCode.NON_DESCRIPTIVE_IDENTIFIER,
                    subject=f"{ident.kind}.{ident.name}",
                    message=(
                        f"{ident.kind.capitalize()} '{ident.name}' is too generic; "
                        f"prefix it with what it configures."
                    ),
                ))

        return singletons + plurals + identifiers

    def _is_generic(self, rtype: str, name: str) -> bool:
        if name in self.naming.generic_resource_names:
            return True
        # Repeating the type in the name, e.g. aws_vpc.vpc or aws_security_group.group.
        _, _, suffix = rtype.partition("_")
        return bool(suffix) and name in (suffix, suffix.rsplit("_", 1)[-1])


def _entry(artifact: ScaffoldArtifact, status: EntryStatus, detail: str = "") -> ComplianceEntry:
    return ComplianceEntry(artifact=artifact.key, kind=artifact.kind, status=status, detail=detail)


def validate(
    tree: FileTreeDescription,
    profile: Profile | str,
    naming: Optional[NamingConfig] = None,
) -> ComplianceReport:
    """Validate *tree* against *profile* with the given naming configuration."""
    return ScaffoldValidator(naming).validate(tree, profile)
