"""WordprocessingML element helpers shared by the pipeline stages.

The document tree is a plain ``xml.etree.ElementTree`` tree. ElementTree
elements do not know their parent, so stages that need one either keep the
parent from their own traversal or build a lookup with :func:`parent_map`.
"""

from __future__ import annotations

import copy
from typing import Iterator
from xml.etree import ElementTree as ET

# ---------------------------------------------------------------------------
# OOXML namespaces
# ---------------------------------------------------------------------------
W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
W14_NS = "http://schemas.microsoft.com/office/word/2010/wordml"
XML_NS = "http://www.w3.org/XML/1998/namespace"

NAMESPACES = {
    "w": W_NS,
    "r": R_NS,
    "w14": W14_NS,
}

# Register prefixes so ET output uses w: / r: instead of ns0: / ns1:
for _pfx, _uri in NAMESPACES.items():
    ET.register_namespace(_pfx, _uri)

XML_SPACE = f"{{{XML_NS}}}space"

# Run children that only carry text or layout hints
_TEXT_RUN_CHILDREN = frozenset({"rPr", "t", "lastRenderedPageBreak"})

# Paragraph children that sit between runs without carrying text
TRANSPARENT_PARAGRAPH_CHILDREN = frozenset({
    "pPr",
    "proofErr",
    "bookmarkStart",
    "bookmarkEnd",
    "commentRangeStart",
    "commentRangeEnd",
    "permStart",
    "permEnd",
})


def qn(name: str) -> str:
    """Turn a prefixed name such as ``w:t`` into Clark notation."""
    prefix, _, local = name.partition(":")
    if not local:
        return name
    return f"{{{NAMESPACES[prefix]}}}{local}"


def local_name(tag) -> str:
    """Strip the namespace from an element or attribute name."""
    if not isinstance(tag, str):
        return ""
    return tag.split("}", 1)[1] if "}" in tag else tag


def parent_map(root: ET.Element) -> dict[ET.Element, ET.Element]:
    """Map every element below *root* to its parent."""
    return {child: parent for parent in root.iter() for child in parent}


def children(element: ET.Element, name: str) -> list[ET.Element]:
    """Direct children of *element* named ``w:...``."""
    return element.findall(name, NAMESPACES)


def iter_paragraphs(root: ET.Element) -> Iterator[ET.Element]:
    return root.iter(qn("w:p"))


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def paragraph_text(element: ET.Element) -> str:
    """Concatenated text of every w:t below *element*."""
    return "".join(t.text or "" for t in element.iter(qn("w:t")))


def run_text(run: ET.Element) -> str:
    return "".join(t.text or "" for t in children(run, "w:t"))


def make_text(text: str) -> ET.Element:
    """Build a w:t that keeps leading/trailing whitespace."""
    t = ET.Element(qn("w:t"))
    t.text = text
    t.set(XML_SPACE, "preserve")
    return t


def set_text(t: ET.Element, text: str) -> None:
    t.text = text
    t.set(XML_SPACE, "preserve")


def set_run_text(run: ET.Element, text: str) -> None:
    """Replace all w:t children of *run* with a single w:t holding *text*.

    The new w:t takes the position of the first old one, or goes last when
    the run had no text at all.
    """
    texts = children(run, "w:t")
    if not texts:
        run.append(make_text(text))
        return
    set_text(texts[0], text)
    for t in texts[1:]:
        run.remove(t)


def is_text_only_run(run: ET.Element) -> bool:
    """True when the run holds nothing but formatting and text."""
    return all(local_name(child.tag) in _TEXT_RUN_CHILDREN for child in run)


def _empty_clone(run: ET.Element) -> ET.Element:
    new_run = ET.Element(run.tag, dict(run.attrib))
    r_pr = run.find("w:rPr", NAMESPACES)
    if r_pr is not None:
        new_run.append(copy.deepcopy(r_pr))
    return new_run


def _has_content(run: ET.Element) -> bool:
    return any(local_name(child.tag) != "rPr" for child in run)


def split_run(
    run: ET.Element,
    start: int,
    end: int,
) -> tuple[ET.Element | None, ET.Element, ET.Element | None]:
    """Split *run* around the run-text range ``[start, end)``.

    Children keep their document order. Each w:t is cut at the range
    boundaries; every other child (tab, break, drawing, field character, ...)
    goes to the piece its text offset falls in, a child sitting exactly at
    ``start`` staying before the match. Every piece gets a copy of the run's
    attributes and w:rPr.

    Returns:
        (before, match, after); *before* and *after* are None when empty.
    """
    before, match, after = _empty_clone(run), _empty_clone(run), _empty_clone(run)
    t_tag = qn("w:t")
    offset = 0

    for child in list(run):
        if local_name(child.tag) == "rPr":
            continue
        if child.tag != t_tag:
            if offset <= start:
                before.append(child)
            elif offset < end:
                match.append(child)
            else:
                after.append(child)
            continue

        text = child.text or ""
        cut_start = max(0, min(len(text), start - offset))
        cut_end = max(0, min(len(text), end - offset))
        for piece, part in (
            (before, text[:cut_start]),
            (match, text[cut_start:cut_end]),
            (after, text[cut_end:]),
        ):
            if part:
                piece.append(make_text(part))
        offset += len(text)

    if not _has_content(match):
        match.append(make_text(""))
    return (
        before if _has_content(before) else None,
        match,
        after if _has_content(after) else None,
    )


# ---------------------------------------------------------------------------
# Highlight formatting
# ---------------------------------------------------------------------------

def highlight_element(run: ET.Element) -> ET.Element | None:
    r_pr = run.find("w:rPr", NAMESPACES)
    if r_pr is None:
        return None
    return r_pr.find("w:highlight", NAMESPACES)


def is_highlighted(run: ET.Element) -> bool:
    highlight = highlight_element(run)
    if highlight is None:
        return False
    return highlight.get(qn("w:val"), "") != "none"


def clear_highlight(run: ET.Element) -> None:
    r_pr = run.find("w:rPr", NAMESPACES)
    if r_pr is None:
        return
    for highlight in children(r_pr, "w:highlight"):
        r_pr.remove(highlight)


# ---------------------------------------------------------------------------
# Content controls (slots)
# ---------------------------------------------------------------------------

def make_slot(tag: str, alias: str | None = None) -> tuple[ET.Element, ET.Element]:
    """Create an inline content control.

    Returns the w:sdt element and its (empty) w:sdtContent.
    """
    sdt = ET.Element(qn("w:sdt"))
    sdt_pr = ET.SubElement(sdt, qn("w:sdtPr"))
    # CT_SdtPr orders w:alias before w:tag
    ET.SubElement(sdt_pr, qn("w:alias"), {qn("w:val"): alias or tag})
    ET.SubElement(sdt_pr, qn("w:tag"), {qn("w:val"): tag})
    content = ET.SubElement(sdt, qn("w:sdtContent"))
    return sdt, content


def slot_tag(sdt: ET.Element) -> str | None:
    tag = sdt.find("w:sdtPr/w:tag", NAMESPACES)
    if tag is None:
        return None
    return tag.get(qn("w:val"))


def slot_content(sdt: ET.Element) -> ET.Element | None:
    return sdt.find("w:sdtContent", NAMESPACES)


def iter_slots(root: ET.Element) -> Iterator[ET.Element]:
    """Every w:sdt below *root* in document order."""
    return root.iter(qn("w:sdt"))


def slot_text_leaves(sdt: ET.Element) -> list[ET.Element]:
    content = slot_content(sdt)
    if content is None:
        return []
    return list(content.iter(qn("w:t")))


def fill_slot(sdt: ET.Element, value: str) -> None:
    """Write *value* into the slot's first w:t and blank the others.

    Run boundaries inside the slot are kept; only their text is cleared.
    """
    leaves = slot_text_leaves(sdt)
    if not leaves:
        content = slot_content(sdt)
        if content is None:
            content = ET.SubElement(sdt, qn("w:sdtContent"))
        run = ET.SubElement(content, qn("w:r"))
        run.append(make_text(value))
        return
    set_text(leaves[0], value)
    for t in leaves[1:]:
        set_text(t, "")
