"""Filesystem and console helpers for the advisor CLI.

The advisory core is pure; everything here is the CLI's side of the
boundary: reading facts and config JSON, writing rendered artifacts into a
module directory, and printing reports with Rich.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from iac_advisor.scaffolder.tree import RenderedArtifact

console = Console()

# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON object from *path*.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the document is not a JSON object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Write *data* as indented JSON, creating parent directories."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data, indent=2, default=str) + "\n", encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# Artifact persistence
# ---------------------------------------------------------------------------


def write_artifacts(root: str | Path, artifacts: Iterable[RenderedArtifact]) -> list[Path]:
    """Persist rendered artifacts under *root*.

    ``create`` artifacts never overwrite an existing file; ``append``
    artifacts are appended to the end of their file.

    Returns:
        Paths that were written, in artifact order.
    """
    base = Path(root)
    written: list[Path] = []
    for artifact in artifacts:
        target = base / artifact.path
        target.parent.mkdir(parents=True, exist_ok=True)
        if artifact.mode == "append":
            with target.open("a", encoding="utf-8") as handle:
                handle.write(artifact.content)
        elif target.exists():
            continue
        else:
            target.write_text(artifact.content, encoding="utf-8")
        written.append(target)
    return written


# ---------------------------------------------------------------------------
# Rich output
# ---------------------------------------------------------------------------

STATUS_STYLES: dict[str, str] = {
    "present": "green",
    "missing": "red",
    "malformed": "yellow",
}


def print_section_header(title: str, color: str = "bright_cyan") -> None:
    console.print()
    console.print(Rule(f"[bold {color}]{title}[/bold {color}]", style=color))


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print *data* as a borderless two-column table of labels and values."""
    table = Table(title=title, title_justify="left", show_header=False, box=box.SIMPLE)
    table.add_column(style="bold", no_wrap=True)
    table.add_column(overflow="fold")
    for label, value in data.items():
        table.add_row(escape(label), escape(str(value)))
    console.print(table)


def print_rows(title: str, columns: list[str], rows: Iterable[list[str]]) -> None:
    """Print a table; values in a ``Status`` column are coloured."""
    table = Table(title=title, title_justify="left", header_style="bold cyan", box=box.SIMPLE)
    for column in columns:
        table.add_column(column)
    status_idx = columns.index("Status") if "Status" in columns else -1
    for row in rows:
        cells = [escape(str(cell)) for cell in row]
        if status_idx >= 0:
            style = STATUS_STYLES.get(cells[status_idx], "white")
            cells[status_idx] = f"[{style}]{cells[status_idx]}[/{style}]"
        table.add_row(*cells)
    console.print(table)


def _styled(message: str, style: str) -> None:
    console.print(f"[{style}]{escape(message)}[/{style}]")


def print_success(message: str) -> None:
    _styled(message, "bold green")


def print_error(message: str) -> None:
    _styled(message, "bold red")


def print_warning(message: str) -> None:
    _styled(message, "bold yellow")
