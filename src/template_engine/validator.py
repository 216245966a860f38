"""Structural conformance checks for the mutated document.

Validation only reports; it never repairs and never raises. Two entry points:

* :func:`validate` walks the in-memory tree and checks the WordprocessingML
  content-model rules the pipeline's edits can break (property elements
  first, non-empty tables/rows/cells, well-formed content controls, ...).
* :func:`validate_package` checks a serialized container: ZIP integrity,
  required entries, XML well-formedness, document structure and namespace
  prefix pollution.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from .ooxml import NAMESPACES, W_NS, local_name, qn
from .package import ZIP_READ_ERRORS

logger = logging.getLogger(__name__)

REQUIRED_ENTRIES = ("[Content_Types].xml", "word/document.xml")

_RE_FLOAT_INT = re.compile(r"^-?\d+\.0$")
_RE_AUTO_NS = re.compile(r"\bns\d+:")

# Element -> property child that must come first when present
_PROPERTY_FIRST = {
    "p": "pPr",
    "r": "rPr",
    "tbl": "tblPr",
    "tr": "trPr",
    "tc": "tcPr",
    "sdt": "sdtPr",
}

# Leading CT_SdtPr children in schema order
_SDT_PR_ORDER = ("rPr", "alias", "tag", "id", "lock", "placeholder", "temporary", "showingPlcHdr")

_ON_OFF_VALUES = frozenset({"true", "false", "on", "off"})
_ON_OFF_ELEMENTS = frozenset({"tblHeader", "cantSplit", "bidi", "rtl", "noWrap"})

# Containers that must never hold a run directly
_BLOCK_CONTAINERS = frozenset({"body", "tbl", "tr", "tc"})


@dataclass(frozen=True)
class Violation:
    location: str
    description: str
    level: str = "error"

    def __str__(self) -> str:
        return f"[{self.location}] {self.description}"


# -------------------------------------------------------------------
# Tree validation
# -------------------------------------------------------------------

def _rows_of(table: ET.Element) -> list[ET.Element]:
    return table.findall("w:tr", NAMESPACES) + table.findall("w:sdt/w:sdtContent/w:tr", NAMESPACES)


def _cells_of(row: ET.Element) -> list[ET.Element]:
    return row.findall("w:tc", NAMESPACES) + row.findall("w:sdt/w:sdtContent/w:tc", NAMESPACES)


def _paragraphs_of(cell: ET.Element) -> list[ET.Element]:
    return cell.findall("w:p", NAMESPACES) + cell.findall("w:sdt/w:sdtContent/w:p", NAMESPACES)


def _check_element(element: ET.Element, parent_name: str, path: str, issues: list[Violation]) -> None:
    name = local_name(element.tag)

    prop = _PROPERTY_FIRST.get(name)
    if prop is not None:
        props = element.findall(f"w:{prop}", NAMESPACES)
        if len(props) > 1:
            issues.append(Violation(path, f"w:{name} has {len(props)} w:{prop} elements"))
        if props and element[0] is not props[0]:
            issues.append(Violation(path, f"w:{prop} must be the first child of w:{name}"))

    if name == "tbl":
        if element.find("w:tblGrid", NAMESPACES) is None:
            issues.append(Violation(path, "w:tbl is missing w:tblGrid"))
        if not _rows_of(element):
            issues.append(Violation(path, "w:tbl has no w:tr"))
    elif name == "tr":
        if not _cells_of(element):
            issues.append(Violation(path, "w:tr has no w:tc"))
    elif name == "tc":
        if not _paragraphs_of(element):
            issues.append(Violation(path, "w:tc must contain at least one w:p"))
    elif name == "r":
        if parent_name in _BLOCK_CONTAINERS:
            issues.append(Violation(path, f"w:r is not allowed directly in w:{parent_name}"))
    elif name == "p":
        if parent_name == "p":
            issues.append(Violation(path, "w:p is nested directly in w:p"))
    elif name == "sdt":
        _check_slot(element, parent_name, path, issues)

    for attr, value in element.attrib.items():
        if _RE_FLOAT_INT.match(value):
            issues.append(Violation(path, f"decimal value {value!r} in integer attribute {local_name(attr)}"))
        elif (
            name in _ON_OFF_ELEMENTS
            and attr == qn("w:val")
            and value not in _ON_OFF_VALUES
        ):
            issues.append(Violation(path, f"w:{name} w:val {value!r} is not a valid on/off value"))


def _check_slot(sdt: ET.Element, parent_name: str, path: str, issues: list[Violation]) -> None:
    contents = sdt.findall("w:sdtContent", NAMESPACES)
    if len(contents) != 1:
        issues.append(Violation(path, f"w:sdt must have exactly one w:sdtContent (found {len(contents)})"))

    sdt_pr = sdt.find("w:sdtPr", NAMESPACES)
    if sdt_pr is not None:
        positions = [
            _SDT_PR_ORDER.index(local_name(child.tag))
            for child in sdt_pr
            if child.tag.startswith(f"{{{W_NS}}}") and local_name(child.tag) in _SDT_PR_ORDER
        ]
        if positions != sorted(positions):
            issues.append(Violation(path, "w:sdtPr children are out of schema order"))
        tag = sdt_pr.find("w:tag", NAMESPACES)
        if tag is not None and tag.get(qn("w:val")) is None:
            issues.append(Violation(path, "w:tag is missing w:val"))

    if parent_name == "p" and contents:
        for child in contents[0]:
            if local_name(child.tag) in ("p", "tbl"):
                issues.append(Violation(
                    path, f"inline w:sdt contains block-level w:{local_name(child.tag)}",
                ))


def _walk(element: ET.Element, parent_name: str, path: str, issues: list[Violation]) -> None:
    _check_element(element, parent_name, path, issues)
    name = local_name(element.tag)
    counters: dict[str, int] = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue
        child_name = local_name(child.tag)
        index = counters.get(child_name, 0)
        counters[child_name] = index + 1
        _walk(child, name, f"{path}/{child_name}[{index}]", issues)


def validate(root: ET.Element) -> list[Violation]:
    """Check *root* (a w:document or w:body) without modifying it.

    Returns:
        Violations in document order; empty when the tree is valid.
    """
    issues: list[Violation] = []

    if root.tag == qn("w:document"):
        body = root.find("w:body", NAMESPACES)
        if body is None:
            return [Violation("document", "w:body element not found")]
    elif root.tag == qn("w:body"):
        body = root
    else:
        return [Violation(local_name(root.tag), f"Root element is '{root.tag}', expected w:document")]

    _walk(body, "document", "body", issues)

    if issues:
        logger.warning("Found %d validation error(s)", len(issues))
        for issue in issues:
            logger.warning("  - %s", issue)
    else:
        logger.info("Document is valid")
    return issues


# -------------------------------------------------------------------
# Package validation
# -------------------------------------------------------------------

def _read_zip_entry(zf: zipfile.ZipFile, name: str) -> str:
    """Read a ZIP entry as UTF-8 string, falling back to latin-1."""
    raw = zf.read(name)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def validate_package(data: bytes) -> list[Violation]:
    """Check a serialized DOCX container. Never raises."""
    issues: list[Violation] = []
    try:
        zf = zipfile.ZipFile(io.BytesIO(data), "r")
    except zipfile.BadZipFile as e:
        return [Violation("zip", f"Invalid ZIP: {e}")]

    with zf:
        try:
            bad = zf.testzip()
        except ZIP_READ_ERRORS as e:
            issues.append(Violation("zip", f"Unreadable ZIP entry: {e}"))
        else:
            if bad is not None:
                issues.append(Violation("zip", f"Corrupt ZIP entry: {bad}"))

        names = set(zf.namelist())
        for required in REQUIRED_ENTRIES:
            if required not in names:
                issues.append(Violation("entries", f"Missing required entry: {required}"))

        for name in zf.namelist():
            if not name.endswith((".xml", ".rels")):
                continue
            try:
                content = _read_zip_entry(zf, name)
            except ZIP_READ_ERRORS:
                # Already reported by testzip
                continue
            try:
                root = ET.fromstring(content)
            except ET.ParseError as e:
                issues.append(Violation(name, str(e)))
                continue

            if name != "word/document.xml":
                continue
            if root.tag != qn("w:document"):
                issues.append(Violation(name, f"Root element is '{root.tag}', expected w:document"))
            elif root.find("w:body", NAMESPACES) is None:
                issues.append(Violation(name, "w:body element not found"))

            matches = _RE_AUTO_NS.findall(content)
            if matches:
                unique = sorted(set(matches))
                issues.append(Violation(
                    name,
                    f"Auto-generated namespace prefixes found: {', '.join(unique)} "
                    f"({len(matches)} occurrences)",
                    level="warning",
                ))

    return issues
