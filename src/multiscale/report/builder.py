"""
Hierarchical report building for multiscale.

A report is a tree of named ``Section`` objects holding text paragraphs,
tables and further sections.  Analysis objects take part by implementing
``report_building(section)``; ``Section.parse_element`` hands the section to
them, or falls back to ``str(obj)`` for anything else.

Example
-------
>>> builder = ReportBuilder("Survey 2024")
>>> with builder.section("Scales") as s:
...     s.text("Two scales were analysed.")
...     s.table(["scale", "alpha"], [["s1", 0.81], ["s2", 0.77]])
>>> print(builder.to_text())
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Union

import numpy as np


@dataclass
class Text:
    content: str


@dataclass
class Table:
    header: List[str]
    rows: List[List[object]]


Element = Union["Section", Text, Table]


def _format_cell(value) -> str:
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.3f}"
    return str(value)


def _render_table(table: Table) -> List[str]:
    cells = [list(table.header)] + [[_format_cell(v) for v in row] for row in table.rows]
    n_cols = max(len(r) for r in cells)
    cells = [r + [""] * (n_cols - len(r)) for r in cells]
    widths = [max(len(r[j]) for r in cells) for j in range(n_cols)]

    def line(row):
        return "| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |"

    out = [line(cells[0]), "|" + "|".join("-" * (w + 2) for w in widths) + "|"]
    out += [line(r) for r in cells[1:]]
    return out


@dataclass
class Section:
    """A named node of the report tree."""

    name: str
    elements: List[Element] = field(default_factory=list)

    # ── building ───────────────────────────────────────────────────────

    @contextmanager
    def section(self, name: str) -> Iterator["Section"]:
        """Open a nested section.

        The child is attached only when the ``with`` block finishes without
        raising, so a failed computation never leaves a half-built section
        behind.
        """
        child = Section(name=str(name))
        yield child
        self.elements.append(child)

    def text(self, content: str) -> None:
        self.elements.append(Text(str(content)))

    def table(self, header: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        self.elements.append(Table([str(h) for h in header], [list(r) for r in rows]))

    def parse_element(self, obj) -> None:
        """Insert *obj*, letting it render itself when it knows how."""
        if isinstance(obj, (Section, Text, Table)):
            self.elements.append(obj)
        elif hasattr(obj, "report_building"):
            obj.report_building(self)
        else:
            self.text(str(obj))

    # ── inspection ─────────────────────────────────────────────────────

    @property
    def sections(self) -> List["Section"]:
        """Direct child sections, in insertion order."""
        return [e for e in self.elements if isinstance(e, Section)]

    def find(self, name: str) -> Optional["Section"]:
        """Depth-first search for the first section called *name*."""
        for child in self.sections:
            if child.name == name:
                return child
            hit = child.find(name)
            if hit is not None:
                return hit
        return None

    # ── rendering ──────────────────────────────────────────────────────

    def to_lines(self, level: int = 1) -> List[str]:
        lines = ["#" * level + " " + self.name, ""]
        for element in self.elements:
            if isinstance(element, Section):
                lines += element.to_lines(level + 1)
            elif isinstance(element, Table):
                lines += _render_table(element) + [""]
            else:
                lines += [element.content, ""]
        return lines

    def to_text(self) -> str:
        return "\n".join(self.to_lines()).rstrip() + "\n"


class ReportBuilder:
    """Root of a report.

    Parameters
    ----------
    title : str, optional
        Title of the root section.  When omitted, the root is anonymous and
        ``to_text`` renders only its children.
    """

    def __init__(self, title: Optional[str] = None):
        self.root = Section(name=title or "")

    def section(self, name: str):
        return self.root.section(name)

    def text(self, content: str) -> None:
        self.root.text(content)

    def table(self, header, rows) -> None:
        self.root.table(header, rows)

    def parse_element(self, obj) -> None:
        self.root.parse_element(obj)

    @property
    def sections(self) -> List[Section]:
        return self.root.sections

    def to_text(self) -> str:
        if self.root.name:
            return self.root.to_text()
        lines: List[str] = []
        for element in self.root.elements:
            if isinstance(element, Section):
                lines += element.to_lines()
            elif isinstance(element, Table):
                lines += _render_table(element) + [""]
            else:
                lines += [element.content, ""]
        return "\n".join(lines).rstrip() + "\n"

    def __repr__(self) -> str:
        return f"ReportBuilder(title={self.root.name!r}, sections={len(self.root.sections)})"
