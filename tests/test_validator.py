"""Tests for structural validation of trees and containers."""

from xml.etree import ElementTree as ET

import pytest

from docx_factory import (
    build_docx,
    corrupt_entry,
    document_xml,
    highlighted,
    para,
    parse_body,
    parse_document,
    row,
    run,
    table,
    text_cell,
)
from template_engine.tagger import detect_highlights, tag_literals
from template_engine.validator import Violation, validate, validate_package

VALID_BODY = (
    para(run("Dear [NAME],"), ppr='<w:pPr><w:jc w:val="left"/></w:pPr>')
    + para(highlighted("Write an intro"))
    + table(
        row(text_cell("Item"), text_cell("Amount"), trpr='<w:trPr><w:tblHeader w:val="true"/></w:trPr>'),
        row(text_cell("[ITEM]"), text_cell("[AMOUNT]")),
    )
)


def _descriptions(violations):
    return [v.description for v in violations]


def test_tagged_document_is_valid():
    root = parse_document(VALID_BODY)
    body = root.find("{http://schemas.openxmlformats.org/wordprocessingml/2006/main}body")
    tag_literals(body, {"[NAME]": "ClientName", "[ITEM]": "Item", "[AMOUNT]": "Amount"})
    detect_highlights(body)

    assert validate(root) == []
    assert validate(body) == []


def test_validation_does_not_modify_tree():
    root = parse_document(VALID_BODY + "<w:r><w:t>stray</w:t></w:r>")
    before = ET.tostring(root)

    validate(root)

    assert ET.tostring(root) == before


def test_cell_without_paragraph():
    body = parse_body(table(row('<w:tc><w:tcPr/></w:tc>')))

    violations = validate(body)

    assert violations == [Violation("body/tbl[0]/tr[0]/tc[0]", "w:tc must contain at least one w:p")]


def test_table_without_grid_or_rows():
    body = parse_body("<w:tbl><w:tblPr/></w:tbl>")
    assert _descriptions(validate(body)) == ["w:tbl is missing w:tblGrid", "w:tbl has no w:tr"]


def test_row_without_cells():
    body = parse_body(table("<w:tr><w:trPr/></w:tr>"))
    assert "w:tr has no w:tc" in _descriptions(validate(body))


def test_property_element_must_come_first():
    body = parse_body(f"<w:p>{run('x')}<w:pPr/></w:p>")
    assert _descriptions(validate(body)) == ["w:pPr must be the first child of w:p"]


def test_duplicate_property_element():
    body = parse_body("<w:p><w:pPr/><w:pPr/></w:p>")
    assert "w:p has 2 w:pPr elements" in _descriptions(validate(body))


def test_run_directly_in_body():
    body = parse_body(run("stray"))
    violations = validate(body)
    assert violations[0].location == "body/r[0]"
    assert violations[0].description == "w:r is not allowed directly in w:body"


def test_nested_paragraph():
    body = parse_body(f"<w:p>{para(run('inner'))}</w:p>")
    assert "w:p is nested directly in w:p" in _descriptions(validate(body))


@pytest.mark.parametrize("value, ok", [("240.0", False), ("240", True)])
def test_decimal_integer_attribute(value, ok):
    body = parse_body(para(run("x"), ppr=f'<w:pPr><w:spacing w:before="{value}"/></w:pPr>'))
    assert (validate(body) == []) is ok


@pytest.mark.parametrize("value, ok", [("1", False), ("0", False), ("true", True), ("off", True)])
def test_on_off_values(value, ok):
    trpr = f'<w:trPr><w:cantSplit w:val="{value}"/></w:trPr>'
    body = parse_body(table(row(text_cell("x"), trpr=trpr)))
    assert (validate(body) == []) is ok


def test_malformed_content_controls():
    no_content = '<w:sdt><w:sdtPr><w:tag w:val="A"/></w:sdtPr></w:sdt>'
    out_of_order = (
        '<w:sdt><w:sdtPr><w:tag w:val="B"/><w:alias w:val="B"/></w:sdtPr>'
        f"<w:sdtContent>{run('x')}</w:sdtContent></w:sdt>"
    )
    missing_val = f"<w:sdt><w:sdtPr><w:tag/></w:sdtPr><w:sdtContent>{run('x')}</w:sdtContent></w:sdt>"
    block_inside_inline = (
        '<w:sdt><w:sdtPr><w:tag w:val="C"/></w:sdtPr>'
        f"<w:sdtContent>{para(run('x'))}</w:sdtContent></w:sdt>"
    )
    body = parse_body(para(no_content, out_of_order, missing_val, block_inside_inline))

    descriptions = _descriptions(validate(body))

    assert "w:sdt must have exactly one w:sdtContent (found 0)" in descriptions
    assert "w:sdtPr children are out of schema order" in descriptions
    assert "w:tag is missing w:val" in descriptions
    assert "inline w:sdt contains block-level w:p" in descriptions


def test_unexpected_root():
    root = ET.fromstring("<other/>")
    assert len(validate(root)) == 1


def test_violation_str():
    assert str(Violation("body/p[0]", "broken")) == "[body/p[0]] broken"


# ---------------------------------------------------------------------------
# validate_package
# ---------------------------------------------------------------------------

def test_valid_package():
    assert validate_package(build_docx(para(run("hello")))) == []


def test_not_a_zip():
    violations = validate_package(b"definitely not a zip")
    assert [v.location for v in violations] == ["zip"]


def test_damaged_entry_is_reported_not_raised():
    body = "".join(para(run(f"Paragraph {i} of a damaged document")) for i in range(40))
    data = corrupt_entry(build_docx(body), "word/document.xml")

    violations = validate_package(data)

    assert "zip" in [v.location for v in violations]


def test_missing_main_part():
    data = build_docx(extra={"word/document.xml": None})
    assert "Missing required entry: word/document.xml" in _descriptions(validate_package(data))


def test_malformed_part():
    data = build_docx(para(run("x")), extra={"word/styles.xml": "<w:styles"})
    assert [v.location for v in validate_package(data)] == ["word/styles.xml"]


def test_auto_generated_prefixes_are_a_warning():
    body = para(run("x")) + '<ns0:marker xmlns:ns0="urn:example"/>'
    violations = validate_package(build_docx(document=document_xml(body)))

    assert len(violations) == 1
    assert violations[0].level == "warning"
    assert "ns0:" in violations[0].description
