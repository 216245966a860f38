"""Anchor slots in a document body.

Two passes share the same wrapping primitive (an inline ``w:sdt`` around one
or more runs):

* literal anchoring, which finds mapped placeholder strings such as
  ``[CLIENT_NAME]`` in run text, splits the run around each occurrence and
  wraps the matched piece;
* highlight grouping, which turns every maximal group of contiguous,
  highlighted, non-blank runs in a paragraph into one free-text slot with a
  synthetic tag.

Only direct ``w:r`` children of a paragraph are considered, so a run that was
already moved inside a slot is never tagged twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping
from xml.etree import ElementTree as ET

from .ooxml import (
    TRANSPARENT_PARAGRAPH_CHILDREN,
    children,
    clear_highlight,
    is_highlighted,
    iter_paragraphs,
    local_name,
    make_slot,
    run_text,
    split_run,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_TAG_PREFIX = "AI_GEN_CONTENT_"


@dataclass
class TaggingAnomaly:
    paragraph_index: int
    iterations: int
    pattern: str

    def __str__(self) -> str:
        return (
            f"paragraph {self.paragraph_index}: stopped after {self.iterations} "
            f"iterations (last pattern {self.pattern!r})"
        )


@dataclass
class TaggingReport:
    slots_created: int = 0
    anomalies: list[TaggingAnomaly] = field(default_factory=list)


@dataclass
class HighlightReport:
    texts: dict[str, str] = field(default_factory=dict)  # tag -> original text
    next_index: int = 0


def wrap_runs(runs: list[ET.Element], paragraph: ET.Element, tag: str) -> ET.Element:
    """Insert a slot where the first run sits and move *runs* into it, in order."""
    sdt, content = make_slot(tag)
    position = list(paragraph).index(runs[0])
    paragraph.insert(position, sdt)
    for run in runs:
        paragraph.remove(run)
        content.append(run)
    return sdt


# ---------------------------------------------------------------------------
# Literal anchoring
# ---------------------------------------------------------------------------

def _first_match(text: str, mapping: Mapping[str, str]) -> str | None:
    """First pattern, in mapping order, that occurs in *text*."""
    for pattern in mapping:
        if pattern in text:
            return pattern
    return None


def _anchor(paragraph: ET.Element, run: ET.Element, pattern: str, tag: str) -> None:
    start = run_text(run).index(pattern)
    before, match_run, after = split_run(run, start, start + len(pattern))
    pieces = [piece for piece in (before, match_run, after) if piece is not None]

    position = list(paragraph).index(run)
    paragraph.remove(run)
    for offset, piece in enumerate(pieces):
        paragraph.insert(position + offset, piece)
    wrap_runs([match_run], paragraph, tag)


def tag_literals(
    root: ET.Element,
    mapping: Mapping[str, str],
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> TaggingReport:
    """Wrap every occurrence of each mapped pattern in a slot.

    Each paragraph is rescanned from its first run after every change until
    a scan finds nothing. When several patterns occur in one run the first
    pattern in *mapping* order wins. A paragraph that still has a match after
    *max_iterations* anchors is abandoned and reported as an anomaly.

    Args:
        root: Body (or any subtree) to tag.
        mapping: Literal pattern -> canonical tag.
        max_iterations: Per-paragraph scan ceiling.

    Returns:
        TaggingReport with the number of slots created and any anomalies.
    """
    report = TaggingReport()
    if not mapping:
        return report

    for p_idx, paragraph in enumerate(list(iter_paragraphs(root))):
        iterations = 0
        pattern = None
        while True:
            target = None
            for run in children(paragraph, "w:r"):
                pattern = _first_match(run_text(run), mapping)
                if pattern is not None:
                    target = run
                    break
            if target is None:
                break

            if iterations >= max_iterations:
                anomaly = TaggingAnomaly(p_idx, iterations, pattern)
                logger.warning("Tagging loop limit reached; aborting paragraph scan: %s", anomaly)
                report.anomalies.append(anomaly)
                break
            iterations += 1

            _anchor(paragraph, target, pattern, mapping[pattern])
            report.slots_created += 1
            logger.debug("Anchored %r as %s", pattern, mapping[pattern])

    logger.info("Anchored %d literal slot(s)", report.slots_created)
    return report


# ---------------------------------------------------------------------------
# Highlight grouping
# ---------------------------------------------------------------------------

def detect_highlights(
    root: ET.Element,
    start_index: int = 0,
    tag_prefix: str = DEFAULT_TAG_PREFIX,
) -> HighlightReport:
    """Group contiguous highlighted runs into free-text slots.

    Groups never cross a paragraph boundary. Each group gets the next tag
    ``{tag_prefix}{n}`` starting at *start_index*; the counter is returned in
    the report rather than kept anywhere, so concurrent documents never share
    it. Highlighting is removed from the moved runs, so a second pass finds
    nothing.

    Returns:
        HighlightReport mapping each new tag to the group's original text.
    """
    report = HighlightReport(next_index=start_index)

    def flush(group: list[ET.Element], paragraph: ET.Element) -> None:
        if not group:
            return
        tag = f"{tag_prefix}{report.next_index}"
        report.next_index += 1
        full_text = "".join(run_text(run) for run in group)
        report.texts[tag] = full_text
        wrap_runs(group, paragraph, tag)
        for run in group:
            clear_highlight(run)
        logger.debug("Detected highlight group %r mapped to %s", full_text, tag)

    for paragraph in list(iter_paragraphs(root)):
        group: list[ET.Element] = []
        for child in list(paragraph):
            name = local_name(child.tag)
            if name in TRANSPARENT_PARAGRAPH_CHILDREN:
                continue
            if name == "r" and is_highlighted(child) and run_text(child).strip():
                group.append(child)
            else:
                # A plain run, or a wrapper such as a hyperlink, ends the group
                flush(group, paragraph)
                group = []
        flush(group, paragraph)

    logger.info("Detected %d highlight group(s)", len(report.texts))
    return report
