"""Coarse description of a module's file tree.

The validator never reads files.  It works on a :class:`FileTreeDescription`:
a mapping from relative path to a :class:`FileDescriptor` (does the file
exist, which markdown sections it has, which top-level blocks it declares)
plus the resource and identifier descriptors found alongside.

``describe_content`` derives a descriptor from file text using line-level
structure only: markdown headers, top-level HCL block keywords and
``description =`` lines inside ``variable``/``output`` blocks.  It is not an
HCL parser.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class Declaration(BaseModel):
    """A ``variable`` or ``output`` block found in a file."""
    kind: Literal["variable", "output"]
    name: str
    has_description: bool = False


class FileDescriptor(BaseModel):
    """Coarse content descriptor of one file."""
    exists: bool = Field(default=True)
    sections: list[str] = Field(default_factory=list, description="Markdown section headers")
    blocks: list[str] = Field(
        default_factory=list, description="Top-level block keywords, e.g. 'variable'"
    )
    declarations: list[Declaration] = Field(default_factory=list)

    def has_section(self, section: str) -> bool:
        wanted = section.strip().lower()
        return any(s.strip().lower() == wanted for s in self.sections)


class ResourceDescriptor(BaseModel):
    """A ``resource "<type>" "<name>"`` block."""
    type: str
    name: str
    path: str = Field(default="", description="File the resource was found in")

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"


class IdentifierDescriptor(BaseModel):
    """A variable or output name subject to naming checks."""
    kind: Literal["variable", "output"]
    name: str
    path: str = Field(default="")


class RenderedArtifact(BaseModel):
    """In-memory content produced by the generator.

    ``mode`` is ``create`` for whole files and ``append`` for a section that
    must be appended to an existing file.
    """
    path: str
    content: str
    section: str | None = None
    mode: Literal["create", "append"] = "create"

    @property
    def key(self) -> str:
        if self.section:
            return f"{self.path}#{self.section}"
        return self.path


class FileTreeDescription(BaseModel):
    """Snapshot of a module tree as seen by the validator and generator."""

    files: dict[str, FileDescriptor] = Field(default_factory=dict)
    resources: list[ResourceDescriptor] = Field(default_factory=list)
    identifiers: list[IdentifierDescriptor] = Field(default_factory=list)

    @field_validator("files", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        # ``{"main.tf": true}`` is shorthand for an existing, undescribed file.
        if isinstance(value, dict):
            return {
                path: ({"exists": bool(desc)} if isinstance(desc, bool) else desc)
                for path, desc in value.items()
            }
        return value

    def get(self, path: str) -> FileDescriptor | None:
        """Return the descriptor for *path* if the file exists."""
        descriptor = self.files.get(path)
        if descriptor is None or not descriptor.exists:
            return None
        return descriptor

    def has_file(self, path: str) -> bool:
        return self.get(path) is not None

    def has_section(self, path: str, section: str) -> bool:
        descriptor = self.get(path)
        return descriptor is not None and descriptor.has_section(section)

    def root_resources(self) -> list[ResourceDescriptor]:
        """Resources declared in the root module.

        Files in subdirectories such as ``examples/complete/`` belong to
        nested modules and are not subject to root naming checks.
        """
        return [r for r in self.resources if _in_root_module(r.path)]

    def root_identifiers(self) -> list[IdentifierDescriptor]:
        """Variables and outputs declared in the root module."""
        return [i for i in self.identifiers if _in_root_module(i.path)]

    @classmethod
    def from_contents(cls, contents: dict[str, str]) -> "FileTreeDescription":
        """Describe a tree given as ``{relative_path: text}``."""
        return cls().apply(
            RenderedArtifact(path=path, content=text) for path, text in contents.items()
        )

    def apply(self, artifacts: Iterable[RenderedArtifact]) -> "FileTreeDescription":
        """Return a new description with *artifacts* written on top of this one."""
        tree = self.model_copy(deep=True)
        for artifact in artifacts:
            described = describe_content(artifact.path, artifact.content)
            existing = tree.files.get(artifact.path)
            if artifact.mode == "append" and existing is not None and existing.exists:
                existing.sections.extend(
                    s for s in described.sections if not existing.has_section(s)
                )
                existing.blocks.extend(b for b in described.blocks if b not in existing.blocks)
                existing.declarations.extend(described.declarations)
            else:
                tree.files[artifact.path] = described
                tree.resources = [r for r in tree.resources if r.path != artifact.path]
                tree.identifiers = [i for i in tree.identifiers if i.path != artifact.path]
            tree.resources.extend(_resources_in(artifact.path, artifact.content))
            tree.identifiers.extend(
                IdentifierDescriptor(kind=d.kind, name=d.name, path=artifact.path)
                for d in described.declarations
            )
        return tree


# ---------------------------------------------------------------------------
# Content description
# ---------------------------------------------------------------------------

_HCL_SUFFIXES = (".tf", ".hcl")
_MD_HEADER_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_BLOCK_RE = re.compile(r'^\s*([A-Za-z_][A-Za-z0-9_]*)((?:\s+"[^"]*")*)\s*\{')
_LABEL_RE = re.compile(r'"([^"]*)"')
_DESCRIPTION_RE = re.compile(r"^\s*description\s*=")
_HEREDOC_RE = re.compile(r"<<-?\s*([A-Za-z_][A-Za-z0-9_]*)\s*$")


def _in_root_module(path: str) -> bool:
    return "/" not in path


def describe_content(path: str, text: str) -> FileDescriptor:
    """Build a :class:`FileDescriptor` from the text of *path*."""
    if path.lower().endswith(".md"):
        return FileDescriptor(sections=_markdown_sections(text))
    if path.endswith(_HCL_SUFFIXES):
        blocks, declarations = _hcl_structure(text)
        return FileDescriptor(blocks=blocks, declarations=declarations)
    return FileDescriptor()


def _markdown_sections(text: str) -> list[str]:
    sections: list[str] = []
    in_fence = False
    for line in text.splitlines():
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = _MD_HEADER_RE.match(line)
        if match:
            sections.append(match.group(1))
    return sections


def _strip_comments(line: str, in_comment: bool) -> tuple[str, bool]:
    """Remove ``#``, ``//`` and ``/* */`` comments from *line*.

    Comment markers inside quoted strings are kept.  *in_comment* is the
    block-comment state carried over from the previous line; the returned
    flag is the state to carry into the next one.
    """
    kept: list[str] = []
    in_string = False
    i = 0
    while i < len(line):
        if in_comment:
            end = line.find("*/", i)
            if end < 0:
                break
            in_comment = False
            i = end + 2
            continue
        ch = line[i]
        if in_string:
            kept.append(ch)
            if ch == "\\" and i + 1 < len(line):
                kept.append(line[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            kept.append(ch)
        elif ch == "#" or line.startswith("//", i):
            break
        elif line.startswith("/*", i):
            in_comment = True
            i += 2
            continue
        else:
            kept.append(ch)
        i += 1
    return "".join(kept), in_comment


def _iter_top_level_blocks(text: str) -> Iterable[tuple[str, list[str], list[str]]]:
    """Yield ``(keyword, labels, body_lines)`` for each top-level HCL block.

    Body lines are only those directly inside the block (depth 1).
    """
    depth = 0
    heredoc: str | None = None
    in_comment = False
    current: tuple[str, list[str], list[str]] | None = None

    for raw in text.splitlines():
        if heredoc is not None:
            if raw.strip() == heredoc:
                heredoc = None
            continue

        line, in_comment = _strip_comments(raw, in_comment)
        if depth == 0:
            match = _BLOCK_RE.match(line)
            if match:
                keyword, label_text = match.group(1), match.group(2)
                current = (keyword, _LABEL_RE.findall(label_text), [])
        elif depth == 1 and current is not None:
            current[2].append(line)

        depth += line.count("{") - line.count("}")
        doc = _HEREDOC_RE.search(line)
        if doc:
            heredoc = doc.group(1)

        if depth <= 0:
            depth = 0
            if current is not None:
                yield current
                current = None

    if current is not None:
        yield current


def _hcl_structure(text: str) -> tuple[list[str], list[Declaration]]:
    blocks: list[str] = []
    declarations: list[Declaration] = []
    for keyword, labels, body in _iter_top_level_blocks(text):
        if keyword not in blocks:
            blocks.append(keyword)
        if keyword in ("variable", "output") and labels:
            declarations.append(
                Declaration(
                    kind=keyword,
                    name=labels[0],
                    has_description=any(_DESCRIPTION_RE.match(line) for line in body),
                )
            )
    return blocks, declarations


def _resources_in(path: str, text: str) -> list[ResourceDescriptor]:
    if not path.endswith(".tf"):
        return []
    return [
        ResourceDescriptor(type=labels[0], name=labels[1], path=path)
        for keyword, labels, _ in _iter_top_level_blocks(text)
        if keyword == "resource" and len(labels) >= 2
    ]


# ---------------------------------------------------------------------------
# Filesystem collaborator
# ---------------------------------------------------------------------------

_SKIP_DIRS = {".git", ".terraform", "node_modules"}
_DESCRIBED_SUFFIXES = (".md", ".tf", ".hcl")


def describe_directory(root: str | Path) -> FileTreeDescription:
    """Describe every file under *root*.

    Only markdown and HCL files are read; every other file is recorded as
    existing.
    """
    base = Path(root)
    contents: dict[str, str] = {}
    others: list[str] = []
    for path in sorted(base.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(base)
        if any(part in _SKIP_DIRS for part in rel.parts[:-1]):
            continue
        rel_str = rel.as_posix()
        if rel_str.lower().endswith(_DESCRIBED_SUFFIXES):
            contents[rel_str] = path.read_text(encoding="utf-8", errors="replace")
        else:
            others.append(rel_str)

    tree = FileTreeDescription.from_contents(contents)
    for rel_str in others:
        tree.files[rel_str] = FileDescriptor()
    return tree
