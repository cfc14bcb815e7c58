"""Scaffold generation.

Renders the artifacts of a scaffold profile that an existing tree snapshot
does not already have.  Output is in-memory :class:`RenderedArtifact`
objects; persisting them is the caller's job.

Generation is idempotent: running it again over the snapshot with the
rendered artifacts applied produces nothing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from jinja2 import TemplateError
from pydantic import BaseModel, ConfigDict, Field

from iac_advisor.errors import InvalidConfiguration
from iac_advisor.facts.models import Engine, Feature, Visibility, minimum_version

from .profiles import (
    LICENSE_PATH,
    PRE_COMMIT_PATH,
    ArtifactKind,
    Profile,
    ScaffoldArtifact,
    get_profile,
)
from .templates import TemplateRenderer, hcl_label, slugify
from .tree import FileTreeDescription, RenderedArtifact


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class LicenseKind(str, Enum):
    MIT = "mit"
    APACHE2 = "apache2"
    NONE = "none"

    @property
    def display_name(self) -> str:
        return {"mit": "MIT", "apache2": "Apache-2.0", "none": "no"}[self.value]


PRE_COMMIT_HOOKS: tuple[str, ...] = (
    "terraform_fmt",
    "terraform_validate",
    "terraform_docs",
    "terraform_tflint",
    "terraform_trivy",
)


class GenerationOptions(BaseModel):
    """User-selected options for scaffold generation."""

    model_config = ConfigDict(frozen=True)

    engine: Engine = Field(..., description="terraform or opentofu")
    visibility: Visibility = Field(default=Visibility.PRIVATE)
    license_kind: LicenseKind = Field(default=LicenseKind.NONE)
    include_pre_commit: bool = Field(default=True)
    module_name: str = Field(default="terraform-module", min_length=1)
    module_source: str = Field(
        default="", description="Source shown in the usage example; derived when empty"
    )
    copyright_holder: str = Field(default="The module authors")
    copyright_year: int = Field(default_factory=lambda: datetime.now(timezone.utc).year)

    @property
    def profile(self) -> Profile:
        return Profile.for_visibility(self.visibility)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class ScaffoldGenerator:
    """Renders missing scaffold artifacts from Jinja2 templates."""

    def __init__(
        self,
        renderer: Optional[TemplateRenderer] = None,
        template_dir: str | Path | None = None,
    ) -> None:
        self.renderer = renderer or TemplateRenderer(template_dir)

    # -- Public API --------------------------------------------------------

    def generate(
        self,
        options: GenerationOptions,
        existing: Optional[FileTreeDescription] = None,
    ) -> list[RenderedArtifact]:
        """Render every profile artifact missing from *existing*.

        Args:
            options: Generation options.
            existing: Snapshot of the tree being completed.  ``None`` means
                an empty directory.

        Returns:
            Rendered artifacts in profile order.  Whole files have mode
            ``create``; sections missing from an existing README have mode
            ``append``.

        Raises:
            InvalidConfiguration: If the options contradict each other.
        """
        _check_options(options)
        context = self._build_context(options)
        tree = existing if existing is not None else FileTreeDescription()
        rendered: list[RenderedArtifact] = []

        for artifact in get_profile(options.profile):
            if not _wanted(artifact, options):
                continue
            output = self._render_if_missing(artifact, tree, context)
            if output is None:
                continue
            rendered.append(output)
            # Later artifacts (README sections) must see files rendered earlier.
            tree = tree.apply([output])

        return rendered

    # -- Rendering ---------------------------------------------------------

    def _render_if_missing(
        self,
        artifact: ScaffoldArtifact,
        tree: FileTreeDescription,
        context: dict[str, Any],
    ) -> Optional[RenderedArtifact]:
        if artifact.kind == ArtifactKind.REQUIRED_SECTION:
            if tree.has_section(artifact.path, artifact.section or ""):
                return None
            content = self._render(artifact, context)
            return RenderedArtifact(
                path=artifact.path,
                section=artifact.section,
                content="\n" + content,
                mode="append",
            )

        if tree.has_file(artifact.path):
            return None
        return RenderedArtifact(
            path=artifact.path,
            content=self._render(artifact, context),
        )

    def _render(self, artifact: ScaffoldArtifact, context: dict[str, Any]) -> str:
        try:
            return self.renderer.render(artifact.template, context)
        except TemplateError as exc:
            raise InvalidConfiguration(
                f"Template '{artifact.template}' failed to render: {exc}",
                template=artifact.template,
                artifact=artifact.key,
            ) from exc

    def _build_context(self, options: GenerationOptions) -> dict[str, Any]:
        """Build the Jinja2 template context from the options."""
        slug = slugify(options.module_name) or "module"
        return {
            "module_name": options.module_name,
            "module_slug": slug,
            "module_label": hcl_label(slug),
            "module_source": options.module_source or f"./modules/{slug}",
            "engine": options.engine.value,
            "engine_name": options.engine.display_name,
            "cli": options.engine.cli,
            "tofu": options.engine == Engine.OPENTOFU,
            "required_version": minimum_version(Feature.NATIVE_TESTS),
            "public": options.visibility == Visibility.PUBLIC,
            "license_kind": options.license_kind.value,
            "license_name": options.license_kind.display_name,
            "copyright_holder": options.copyright_holder,
            "copyright_year": options.copyright_year,
            "hooks": PRE_COMMIT_HOOKS,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_options(options: GenerationOptions) -> None:
    if options.visibility == Visibility.PUBLIC:
        if options.license_kind == LicenseKind.NONE:
            raise InvalidConfiguration(
                "A public module must ship a LICENSE; choose 'mit' or 'apache2'.",
                visibility=options.visibility.value,
                license_kind=options.license_kind.value,
            )
        if not options.include_pre_commit:
            raise InvalidConfiguration(
                "A public module must ship a pre-commit configuration.",
                visibility=options.visibility.value,
                include_pre_commit=False,
            )


def _wanted(artifact: ScaffoldArtifact, options: GenerationOptions) -> bool:
    """Whether *artifact* should be rendered at all for *options*."""
    if artifact.path == LICENSE_PATH:
        return options.license_kind != LicenseKind.NONE
    if artifact.path == PRE_COMMIT_PATH:
        return options.include_pre_commit
    return True


def generate(
    options: GenerationOptions,
    existing: Optional[FileTreeDescription] = None,
) -> list[RenderedArtifact]:
    """Render the artifacts *existing* lacks with the default templates."""
    return ScaffoldGenerator().generate(options, existing)
