"""Canonical module scaffold profiles.

A profile is an ordered tuple of :class:`ScaffoldArtifact`.  The order is the
order in which the validator reports entries and the generator renders
files, so it must stay stable across releases.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from iac_advisor.facts.models import Visibility
from iac_advisor.registry import TableRegistry


class ArtifactKind(str, Enum):
    REQUIRED_FILE = "required-file"
    REQUIRED_SECTION = "required-section"
    OPTIONAL_FILE = "optional-file"


class Profile(str, Enum):
    PUBLIC_MODULE = "public-module"
    PRIVATE_MODULE = "private-module"

    @classmethod
    def for_visibility(cls, visibility: Visibility) -> "Profile":
        if visibility == Visibility.PUBLIC:
            return cls.PUBLIC_MODULE
        return cls.PRIVATE_MODULE


class ScaffoldArtifact(BaseModel):
    """One required or optional piece of a module scaffold."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the module root")
    kind: ArtifactKind
    section: Optional[str] = Field(
        default=None, description="Markdown section header for required-section artifacts"
    )
    template: str = Field(..., description="Template used to render the artifact")

    @property
    def key(self) -> str:
        """Stable identifier, e.g. ``README.md`` or ``README.md#Usage``."""
        if self.section:
            return f"{self.path}#{self.section}"
        return self.path

    @property
    def required(self) -> bool:
        return self.kind != ArtifactKind.OPTIONAL_FILE


def _file(path: str, template: str, *, optional: bool = False) -> ScaffoldArtifact:
    kind = ArtifactKind.OPTIONAL_FILE if optional else ArtifactKind.REQUIRED_FILE
    return ScaffoldArtifact(path=path, kind=kind, template=template)


def _section(path: str, section: str, template: str) -> ScaffoldArtifact:
    return ScaffoldArtifact(
        path=path, kind=ArtifactKind.REQUIRED_SECTION, section=section, template=template
    )


README_SECTIONS: tuple[str, ...] = ("Usage", "Requirements", "Inputs", "Outputs")
ATTRIBUTION_SECTION = "Attribution"

LICENSE_PATH = "LICENSE"
PRE_COMMIT_PATH = ".pre-commit-config.yaml"
README_PATH = "README.md"


def build_profiles() -> dict[Profile, tuple[ScaffoldArtifact, ...]]:
    """Build the scaffold profile table."""
    core = (
        _file("main.tf", "main.tf.j2"),
        _file("variables.tf", "variables.tf.j2"),
        _file("outputs.tf", "outputs.tf.j2"),
        _file("versions.tf", "versions.tf.j2"),
        _file(README_PATH, "README.md.j2"),
        *(
            _section(README_PATH, name, f"readme/{name.lower()}.md.j2")
            for name in README_SECTIONS
        ),
    )
    tail = (
        _file("examples/complete/main.tf", "examples/complete/main.tf.j2"),
        _file("tests/defaults.tftest.hcl", "tests/defaults.tftest.hcl.j2", optional=True),
        _file(".gitignore", "gitignore.j2"),
    )
    private = core + tail + (
        _file(LICENSE_PATH, "LICENSE.j2", optional=True),
        _file(PRE_COMMIT_PATH, "pre-commit-config.yaml.j2", optional=True),
    )
    public = core + (
        _section(README_PATH, ATTRIBUTION_SECTION, "readme/attribution.md.j2"),
    ) + tail + (
        _file(LICENSE_PATH, "LICENSE.j2"),
        _file(PRE_COMMIT_PATH, "pre-commit-config.yaml.j2"),
    )
    return {Profile.PUBLIC_MODULE: public, Profile.PRIVATE_MODULE: private}


PROFILES: TableRegistry[dict[Profile, tuple[ScaffoldArtifact, ...]]] = TableRegistry(
    build_profiles
)


def get_profile(profile: Profile | str) -> tuple[ScaffoldArtifact, ...]:
    """Return the artifact list for *profile* from the active table."""
    return PROFILES.current[Profile(profile)]
