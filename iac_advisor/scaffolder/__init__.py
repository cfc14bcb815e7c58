"""Module scaffold profiles, validation and generation.

Quick usage::

    from iac_advisor.scaffolder import (
        FileTreeDescription,
        GenerationOptions,
        ScaffoldGenerator,
        ScaffoldValidator,
    )

    options = GenerationOptions(engine="opentofu", visibility="public", license_kind="mit")
    artifacts = ScaffoldGenerator().generate(options)
    tree = FileTreeDescription().apply(artifacts)
    report = ScaffoldValidator().validate(tree, options.profile)
    assert report.passed
"""

from iac_advisor.scaffolder.generator import (
    GenerationOptions,
    LicenseKind,
    ScaffoldGenerator,
    generate,
)
from iac_advisor.scaffolder.profiles import ArtifactKind, Profile, ScaffoldArtifact, get_profile
from iac_advisor.scaffolder.templates import TemplateRenderer
from iac_advisor.scaffolder.tree import (
    FileDescriptor,
    FileTreeDescription,
    RenderedArtifact,
    describe_content,
    describe_directory,
)
from iac_advisor.scaffolder.validator import (
    ComplianceReport,
    EntryStatus,
    FindingCode,
    ScaffoldValidator,
    validate,
)

__all__ = [
    "ArtifactKind",
    "ComplianceReport",
    "EntryStatus",
    "FileDescriptor",
    "FileTreeDescription",
    "FindingCode",
    "GenerationOptions",
    "LicenseKind",
    "Profile",
    "RenderedArtifact",
    "ScaffoldArtifact",
    "ScaffoldGenerator",
    "ScaffoldValidator",
    "TemplateRenderer",
    "describe_content",
    "describe_directory",
    "generate",
    "get_profile",
    "validate",
]
