"""Repair upstream XML malformations and collapse fragmented runs.

Documents exported by some authoring tools (Google Docs in particular) carry
float-formatted integers, numeric booleans and tracking ids that strict
consumers reject, and split a single sentence into many identically styled
runs. Both get in the way of placeholder matching, so they are cleaned up
before any other stage looks at the tree.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from xml.etree import ElementTree as ET

from .ooxml import (
    NAMESPACES,
    TRANSPARENT_PARAGRAPH_CHILDREN,
    children,
    is_text_only_run,
    iter_paragraphs,
    local_name,
    paragraph_text,
    qn,
    run_text,
    set_run_text,
    slot_tag,
)

logger = logging.getLogger(__name__)

_RE_FLOAT_INT = re.compile(r"^-?\d+\.0$")
_RE_BRACKETED = re.compile(r"\[.*?\]")

# Elements whose w:val is ST_OnOff and must not be written as 0/1
BOOLEAN_ELEMENTS = frozenset({"tblHeader", "cantSplit", "bidi", "rtl", "noWrap"})

# Revision tracking ids that are not part of the transitional schema
DROPPED_ATTRIBUTES = frozenset({"paraId", "textId"})


class MergeMode(str, Enum):
    ALL = "all"
    SAME_FORMAT = "same-format"
    OFF = "off"


@dataclass
class NormalizeReport:
    attribute_fixes: int = 0
    merged_runs: int = 0

    @property
    def fix_count(self) -> int:
        return self.attribute_fixes + self.merged_runs


# ---------------------------------------------------------------------------
# Attribute repair
# ---------------------------------------------------------------------------

def repair_attributes(root: ET.Element) -> int:
    """Fix float-like integers, numeric booleans and tracking ids in place.

    Returns:
        Number of attributes rewritten or removed.
    """
    fix_count = 0
    val_attr = qn("w:val")

    for element in root.iter():
        if not element.attrib:
            continue
        element_name = local_name(element.tag)

        for name, value in list(element.attrib.items()):
            attr_name = local_name(name)

            if attr_name in DROPPED_ATTRIBUTES:
                del element.attrib[name]
                fix_count += 1
                continue

            if _RE_FLOAT_INT.match(value):
                element.set(name, value[:-2])
                fix_count += 1
                continue

            if name == val_attr and element_name in BOOLEAN_ELEMENTS and value in ("0", "1"):
                element.set(name, "true" if value == "1" else "false")
                fix_count += 1

    return fix_count


# ---------------------------------------------------------------------------
# Run merging
# ---------------------------------------------------------------------------

def _format_key(run: ET.Element) -> str:
    r_pr = run.find("w:rPr", NAMESPACES)
    if r_pr is None:
        return ""
    return ET.tostring(r_pr, encoding="unicode")


def _mergeable_spans(paragraph: ET.Element, mode: MergeMode) -> list[list[ET.Element]]:
    """Group the paragraph's direct runs into spans that may be merged.

    Runs carrying drawings, fields, tabs or breaks, and any text-bearing
    wrapper (hyperlink, content control, insertion), end the current span.
    """
    spans: list[list[ET.Element]] = []
    current: list[ET.Element] = []
    current_key = None

    for child in paragraph:
        name = local_name(child.tag)
        if name in TRANSPARENT_PARAGRAPH_CHILDREN:
            continue
        if name == "r" and is_text_only_run(child):
            key = _format_key(child) if mode is MergeMode.SAME_FORMAT else None
            if current and key != current_key:
                spans.append(current)
                current = []
            current.append(child)
            current_key = key
            continue
        if current:
            spans.append(current)
        current = []
        current_key = None

    if current:
        spans.append(current)
    return [span for span in spans if len(span) > 1]


def merge_runs(root: ET.Element, mode: MergeMode = MergeMode.ALL) -> int:
    """Collapse each span of sibling runs into its first run.

    Only the first run's formatting survives. This trades formatting
    fidelity for contiguous, matchable text; use ``MergeMode.SAME_FORMAT``
    to keep differently formatted runs apart, or ``MergeMode.OFF``.

    Returns:
        Number of runs removed.
    """
    mode = MergeMode(mode)
    if mode is MergeMode.OFF:
        return 0

    removed = 0
    for paragraph in list(iter_paragraphs(root)):
        for span in _mergeable_spans(paragraph, mode):
            first = span[0]
            set_run_text(first, "".join(run_text(run) for run in span))
            for run in span[1:]:
                paragraph.remove(run)
            removed += len(span) - 1
    return removed


def normalize(root: ET.Element, merge_mode: MergeMode = MergeMode.ALL) -> NormalizeReport:
    """Run attribute repair and run merging over *root*.

    Safe to run repeatedly: an already normalized tree reports zero fixes.
    """
    report = NormalizeReport(
        attribute_fixes=repair_attributes(root),
        merged_runs=merge_runs(root, merge_mode),
    )
    if report.attribute_fixes:
        logger.info("Sanitized %d attribute issue(s)", report.attribute_fixes)
    if report.merged_runs:
        logger.info("Merged %d fragmented run(s)", report.merged_runs)
    return report


# ---------------------------------------------------------------------------
# Structure outline
# ---------------------------------------------------------------------------

def _row_text(row: ET.Element) -> str:
    return " | ".join(t.text or "" for t in row.iter(qn("w:t")))


def describe_outline(body: ET.Element) -> list[str]:
    """Human-readable outline of paragraphs, tables and block content controls."""
    lines: list[str] = []

    def visit(element: ET.Element, depth: int) -> None:
        indent = "  " * depth
        name = local_name(element.tag)

        if name == "p":
            text = paragraph_text(element)
            if not text.strip():
                return
            kind = "[DYNAMIC PARAGRAPH]" if _RE_BRACKETED.search(text) else "[STATIC PARAGRAPH]"
            lines.append(f"{indent}{kind} Text: {text[:50]}...")
        elif name == "tbl":
            lines.append(f"{indent}[TABLE] found.")
            rows = children(element, "w:tr")
            if rows:
                lines.append(f"{indent}  - Rows: {len(rows)}")
                lines.append(f"{indent}  - Header candidates: {_row_text(rows[0])}")
        elif name == "sdt":
            lines.append(f"{indent}[CONTENT CONTROL] found. Tag: {slot_tag(element)}")

        for child in element:
            if local_name(child.tag) in ("p", "tbl", "sdt", "body", "sdtContent"):
                visit(child, depth + 1)

    visit(body, 0)
    return lines
