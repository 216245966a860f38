"""Simplified structural summary of a document body.

The summary is what the mapping collaborator reasons over: paragraphs (with
their flattened text), tables, rows and cells, each with a positional id
that stays the same for the same document. Ids nest the way the elements
do, e.g. ``tbl0:r1:c0:p0`` is the first paragraph of the first cell of the
second row of the first table.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any
from xml.etree import ElementTree as ET

from .ooxml import local_name, paragraph_text

# element local name -> (schema type, id prefix)
_EMITTED = {
    "p": ("Paragraph", "p"),
    "tbl": ("Table", "tbl"),
    "tr": ("TableRow", "r"),
    "tc": ("TableCell", "c"),
}


@dataclass
class SchemaNode:
    type: str
    id: str
    text: str = ""
    children: list["SchemaNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "text": self.text,
            "children": [child.to_dict() for child in self.children],
        }

    def iter(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.iter()


class _Walker:
    """Traversal state: per-parent sibling counters and the id -> element index."""

    def __init__(self):
        self.counters: dict[str, Counter] = {}
        self.elements: dict[str, ET.Element] = {}

    def next_id(self, parent: SchemaNode, prefix: str) -> str:
        counter = self.counters.setdefault(parent.id, Counter())
        index = counter[prefix]
        counter[prefix] += 1
        local_id = f"{prefix}{index}"
        return local_id if parent.id == "root" else f"{parent.id}:{local_id}"

    def visit(self, element: ET.Element, parent: SchemaNode) -> None:
        emitted = _EMITTED.get(local_name(element.tag))
        if emitted is None:
            # Wrappers (content controls, custom xml, ...) are transparent
            for child in element:
                self.visit(child, parent)
            return

        node_type, prefix = emitted
        node = SchemaNode(type=node_type, id=self.next_id(parent, prefix))
        if node_type == "Paragraph":
            node.text = paragraph_text(element)
        parent.children.append(node)
        self.elements[node.id] = element

        for child in element:
            self.visit(child, node)


def _walk(body: ET.Element) -> tuple[SchemaNode, dict[str, ET.Element]]:
    root = SchemaNode(type="Body", id="root")
    walker = _Walker()
    for child in body:
        walker.visit(child, root)
    return root, walker.elements


def extract_schema(body: ET.Element) -> SchemaNode:
    """Build the structural summary of *body*. Does not modify the tree."""
    root, _ = _walk(body)
    return root


def index_elements(body: ET.Element) -> dict[str, ET.Element]:
    """Map every schema id to the element it was assigned to."""
    _, elements = _walk(body)
    return elements


def schema_to_json(node: SchemaNode, indent: int | None = 2) -> str:
    return json.dumps(node.to_dict(), ensure_ascii=False, indent=indent)
