"""Jinja2 environment for scaffold templates.

Templates ship inside the package under ``scaffolder/templates/``.  An
override directory may shadow any of them by relative path; templates it
does not provide fall back to the packaged ones.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, StrictUndefined


PACKAGED_TEMPLATES = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".j2"


class TemplateRenderer:
    """Renders scaffold artifacts from Jinja2 templates.

    Rendering is strict: a variable missing from the context raises
    ``jinja2.UndefinedError`` instead of producing an empty string.

    Attributes:
        override_dir: Directory searched before the packaged templates, if any.
        env: The configured Jinja2 environment.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.override_dir: Optional[Path] = Path(template_dir) if template_dir else None
        search = [PACKAGED_TEMPLATES]
        if self.override_dir is not None:
            search.insert(0, self.override_dir)
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(path)) for path in search]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["hcl_label"] = hcl_label
        self.env.filters["hcl_string"] = hcl_string

    def render(self, name: str, context: dict[str, Any]) -> str:
        """Render the template *name* (e.g. ``"readme/usage.md.j2"``)."""
        return self.env.get_template(name).render(**context)

    def render_string(self, source: str, context: dict[str, Any]) -> str:
        return self.env.from_string(source).render(**context)

    def has_template(self, name: str) -> bool:
        return name in self.list_templates()

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted template names visible through the loader, optionally under *prefix*."""
        wanted = prefix.rstrip("/") + "/" if prefix else ""
        return sorted(
            name
            for name in self.env.list_templates(extensions=[TEMPLATE_SUFFIX.lstrip(".")])
            if name.startswith(wanted)
        )


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def slugify(value: str) -> str:
    """``"Network VPC"`` -> ``"network-vpc"``."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def hcl_label(value: str) -> str:
    """Turn *value* into a valid HCL block label such as a module name.

    ``"network-vpc"`` -> ``"network_vpc"``; a leading digit gets an ``m_``
    prefix and an empty result becomes ``"module"``.
    """
    label = re.sub(r"[^a-z0-9]+", "_", value.lower()).strip("_")
    if not label:
        return "module"
    if label[0].isdigit():
        return f"m_{label}"
    return label


def hcl_string(value: Any) -> str:
    """Quote *value* as an HCL string literal, escaping interpolation."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("${", "$${").replace("%{", "%%{")
    return f'"{text}"'
