"""Render tables as compact Markdown grids for the generation collaborator.

Cells holding a tagged slot are rendered as ``{{Tag}}`` so the generator can
tell which cells it is asked to fill and what row/column they sit in:

    | Metric | Q1 | Q2 |
    | --- | --- | --- |
    | Revenue | 100 | {{AI_GEN_CONTENT_0}} |
"""

from __future__ import annotations

from typing import Iterable
from xml.etree import ElementTree as ET

from .ooxml import children, iter_slots, paragraph_text, parent_map, qn, slot_tag

CELL_DELIMITER = " | "


def placeholder_token(tag: str) -> str:
    return f"{{{{{tag}}}}}"


def _cell_text(cell: ET.Element) -> str:
    tokens = [placeholder_token(tag) for tag in map(slot_tag, iter_slots(cell)) if tag]
    if tokens:
        return " ".join(tokens)
    paragraphs = (paragraph_text(p) for p in children(cell, "w:p"))
    text = " ".join(p for p in paragraphs if p)
    return text.replace("|", "\\|")


def serialize_table(table: ET.Element) -> str:
    """Serialize *table* row by row. Does not modify the tree."""
    lines = []
    for r_idx, row in enumerate(children(table, "w:tr")):
        values = [_cell_text(cell) for cell in children(row, "w:tc")]
        lines.append("| " + CELL_DELIMITER.join(values) + " |")
        if r_idx == 0:
            lines.append("| " + CELL_DELIMITER.join("---" for _ in values) + " |")
    return "\n".join(lines) + "\n" if lines else ""


def group_slots_by_table(
    root: ET.Element,
    tags: Iterable[str],
) -> tuple[dict[ET.Element, list[str]], list[str]]:
    """Split slots tagged with one of *tags* into table-bound and inline sets.

    A slot is table-bound when it sits anywhere inside a w:tbl; the innermost
    table wins. Each tag is listed once, at its first occurrence.

    Returns:
        (table -> tags in document order, inline tags in document order)
    """
    wanted = set(tags)
    parents = parent_map(root)
    tables: dict[ET.Element, list[str]] = {}
    inline: list[str] = []
    seen: set[str] = set()

    for sdt in iter_slots(root):
        tag = slot_tag(sdt)
        if tag is None or tag not in wanted or tag in seen:
            continue
        seen.add(tag)

        table = None
        node = parents.get(sdt)
        while node is not None:
            if node.tag == qn("w:tbl"):
                table = node
                break
            node = parents.get(node)

        if table is None:
            inline.append(tag)
        else:
            tables.setdefault(table, []).append(tag)

    return tables, inline
