"""Write final values into tagged slots and expand template tables."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Mapping, Sequence
from xml.etree import ElementTree as ET

from .ooxml import children, fill_slot, iter_slots, qn, slot_tag
from .schema import index_elements

logger = logging.getLogger(__name__)


@dataclass
class TableInjectionResult:
    found: bool
    rows_written: int = 0
    reason: str = ""


def inject_values(root: ET.Element, values: Mapping[str, str]) -> int:
    """Fill every slot whose tag has a value; other slots are left untouched.

    Slots sharing a tag all receive the same text.

    Returns:
        Number of slots written.
    """
    written = 0
    for sdt in list(iter_slots(root)):
        tag = slot_tag(sdt)
        if tag is None or tag not in values:
            continue
        fill_slot(sdt, values[tag])
        written += 1
        logger.debug("Injected %r into %s", values[tag], tag)

    logger.info("Injected values into %d slot(s)", written)
    return written


def find_target_table(root: ET.Element, record: Mapping[str, str]) -> ET.Element | None:
    """First table, in document order, holding a slot tagged with a key of *record*."""
    for table in root.iter(qn("w:tbl")):
        if any(slot_tag(sdt) in record for sdt in iter_slots(table)):
            return table
    return None


def inject_table(
    root: ET.Element,
    records: Sequence[Mapping[str, str]],
    table_id: str | None = None,
) -> TableInjectionResult:
    """Rebuild a table's data rows from *records*.

    Row 0 is kept as the header and row 1 is the template: every row from
    index 1 on is removed, then one clone of the template is appended per
    record, with the slots whose tag is a record key filled in. Template
    slots without a matching key keep their template text.

    Args:
        root: Body to search.
        records: One field-tag -> value mapping per output row.
        table_id: Schema id (e.g. ``tbl1``) of the target table. When
            omitted, the first table holding a slot tagged with a key of the
            first record is used.

    Returns:
        TableInjectionResult; missing tables and templates are reported
        there, not raised.
    """
    if not records:
        logger.info("No table records supplied")
        return TableInjectionResult(found=False, reason="no records")

    if table_id is not None:
        table = index_elements(root).get(table_id)
        if table is not None and table.tag != qn("w:tbl"):
            table = None
    else:
        table = find_target_table(root, records[0])

    if table is None:
        logger.info("No matching table found")
        return TableInjectionResult(found=False, reason="table not found")

    rows = children(table, "w:tr")
    if len(rows) < 2:
        logger.warning("Target table has %d row(s); a template row is required", len(rows))
        return TableInjectionResult(found=True, reason="no template row")

    template_row = rows[1]
    for row in rows[1:]:
        table.remove(row)

    for record in records:
        new_row = copy.deepcopy(template_row)
        for sdt in iter_slots(new_row):
            tag = slot_tag(sdt)
            if tag is not None and tag in record:
                fill_slot(sdt, record[tag])
        table.append(new_row)

    logger.info("Added %d row(s) to table", len(records))
    return TableInjectionResult(found=True, rows_written=len(records))
