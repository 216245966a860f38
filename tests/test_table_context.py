"""Tests for table serialization and slot grouping."""

from xml.etree import ElementTree as ET

from docx_factory import cell, highlighted, para, parse_body, row, run, table, text_cell
from template_engine.ooxml import NAMESPACES
from template_engine.table_context import group_slots_by_table, placeholder_token, serialize_table
from template_engine.tagger import detect_highlights

BODY = (
    para(highlighted("Write an intro"))
    + table(
        row(text_cell("Metric"), text_cell("Q1"), text_cell("Q2")),
        row(text_cell("Revenue"), text_cell("100"), cell(para(highlighted("estimate")))),
    )
)


def test_placeholder_token():
    assert placeholder_token("Total") == "{{Total}}"


def test_serialize_table_marks_slots():
    body = parse_body(BODY)
    detect_highlights(body)

    markdown = serialize_table(body.find("w:tbl", NAMESPACES))

    assert markdown == (
        "| Metric | Q1 | Q2 |\n"
        "| --- | --- | --- |\n"
        "| Revenue | 100 | {{AI_GEN_CONTENT_1}} |\n"
    )


def test_serialize_table_escapes_pipes_and_is_read_only():
    body = parse_body(table(row(text_cell("a|b"), text_cell("c"))))
    tbl = body.find("w:tbl", NAMESPACES)
    before = ET.tostring(tbl)

    markdown = serialize_table(tbl)

    assert "a\\|b" in markdown
    assert ET.tostring(tbl) == before


def test_serialize_empty_table():
    body = parse_body('<w:tbl><w:tblPr/><w:tblGrid/></w:tbl>')
    assert serialize_table(body.find("w:tbl", NAMESPACES)) == ""


def test_group_slots_by_table():
    body = parse_body(BODY + para(run("trailing")))
    report = detect_highlights(body)

    tables, inline = group_slots_by_table(body, report.texts)

    tbl = body.find("w:tbl", NAMESPACES)
    assert tables == {tbl: ["AI_GEN_CONTENT_1"]}
    assert inline == ["AI_GEN_CONTENT_0"]


def test_group_slots_ignores_unrequested_tags():
    body = parse_body(BODY)
    detect_highlights(body)

    tables, inline = group_slots_by_table(body, ["AI_GEN_CONTENT_0"])

    assert tables == {}
    assert inline == ["AI_GEN_CONTENT_0"]
