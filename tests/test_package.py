"""Tests for opening and re-packing DOCX containers."""

import io
import zipfile

import pytest

from docx_factory import STYLES, build_docx, corrupt_entry, para, read_body, read_entry, run, texts_of
from template_engine.errors import DocumentDecodeError
from template_engine.package import MAIN_PART, DocxPackage
from template_engine.tagger import tag_literals

DRAWING = '<w:r><w:drawing><wp:inline distT="0" distB="0"/></w:drawing></w:r>'


def _infos(data):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [(info.filename, info.compress_type) for info in zf.infolist()]


def test_round_trip_keeps_every_other_entry():
    data = build_docx(para(run("Hello")))

    output = DocxPackage.from_bytes(data).to_bytes()

    assert _infos(output) == _infos(data)
    assert read_entry(output, "word/styles.xml") == STYLES.encode("utf-8")
    assert read_entry(output, "_rels/.rels") == read_entry(data, "_rels/.rels")
    assert texts_of(read_body(output)) == ["Hello"]


def test_root_declarations_and_prefixes_survive():
    data = build_docx(para(run("Dear [NAME]")) + para(DRAWING))
    package = DocxPackage.from_bytes(data)
    tag_literals(package.body, {"[NAME]": "ClientName"})

    xml = read_entry(package.to_bytes(), MAIN_PART).decode("utf-8")

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8" standalone="yes"?>')
    assert 'mc:Ignorable="w14"' in xml
    assert "<w:sdt>" in xml
    assert "<wp:inline" in xml
    assert "ns0:" not in xml


def test_document_text():
    data = build_docx(para(run("First ")) + para() + para(run("Second")))
    assert DocxPackage.from_bytes(data).document_text() == "First \nSecond"


@pytest.mark.parametrize(
    "data",
    [
        b"not a zip at all",
        build_docx(extra={MAIN_PART: None}),
        build_docx(document="<w:document"),
        build_docx(document=(
            '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"/>'
        )),
    ],
    ids=["bad-zip", "missing-part", "malformed-xml", "no-body"],
)
def test_decode_errors(data):
    with pytest.raises(DocumentDecodeError):
        DocxPackage.from_bytes(data)


def test_damaged_main_part_is_a_decode_error():
    body = "".join(para(run(f"Paragraph {i} of a damaged document")) for i in range(40))
    data = corrupt_entry(build_docx(body), MAIN_PART)

    with pytest.raises(DocumentDecodeError, match="Invalid ZIP/DOCX format"):
        DocxPackage.from_bytes(data)


def test_reopening_output_is_stable():
    data = build_docx(para(run("Hello [NAME]")))
    package = DocxPackage.from_bytes(data)
    tag_literals(package.body, {"[NAME]": "ClientName"})
    first = package.to_bytes()

    second = DocxPackage.from_bytes(first).to_bytes()

    assert read_entry(second, MAIN_PART) == read_entry(first, MAIN_PART)
