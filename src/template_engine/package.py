"""Decode a DOCX container into an editable tree and encode it back.

Only ``word/document.xml`` is parsed. Every other entry (styles, media,
relationships, ...) is carried through byte-identical with its original
``ZipInfo`` so entry order and compression survive the round trip.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib
from xml.etree import ElementTree as ET

from .errors import DocumentDecodeError
from .ooxml import NAMESPACES, iter_paragraphs, paragraph_text

logger = logging.getLogger(__name__)

MAIN_PART = "word/document.xml"

_RE_BODY = re.compile(r"<w:body\b[^>]*?(?:/>|>[\s\S]*?</w:body>)")
_RE_AUTO_PREFIX = re.compile(r"^ns\d+$")

# Errors zipfile raises for damaged, encrypted or unsupported entries
ZIP_READ_ERRORS = (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError)


def _read_part(raw: bytes) -> str:
    """Decode a part as UTF-8 string, falling back to latin-1."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


_registered = {(prefix, uri) for prefix, uri in NAMESPACES.items()}


def _register_document_namespaces(raw: bytes) -> None:
    """Register every prefix the part declares so output keeps its prefixes.

    ET's prefix registry is process-wide; a pair already registered is not
    touched again, so serializations running on other threads never see it
    briefly removed.
    """
    for _event, (prefix, uri) in ET.iterparse(io.BytesIO(raw), events=("start-ns",)):
        if not prefix or _RE_AUTO_PREFIX.match(prefix) or (prefix, uri) in _registered:
            continue
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            logger.debug("Skipping namespace prefix %s", prefix)
            continue
        _registered.add((prefix, uri))


class DocxPackage:
    """An opened DOCX container with a live ``w:body`` tree."""

    def __init__(
        self,
        entries: list[tuple[zipfile.ZipInfo, bytes]],
        document_xml: str,
        root: ET.Element,
    ):
        self._entries = entries
        self._document_xml = document_xml
        self.root = root

    @classmethod
    def from_bytes(cls, data: bytes) -> "DocxPackage":
        """Open a DOCX from raw bytes.

        Raises:
            DocumentDecodeError: If the bytes are not a ZIP, an entry cannot be
                read (damaged, encrypted, unsupported compression), the main
                part is missing, or the main part is not well-formed
                WordprocessingML.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
                entries = [(info, zf.read(info.filename)) for info in zf.infolist()]
        except ZIP_READ_ERRORS as e:
            raise DocumentDecodeError(f"Invalid ZIP/DOCX format: {e}") from e

        raw = next((content for info, content in entries if info.filename == MAIN_PART), None)
        if raw is None:
            raise DocumentDecodeError(f"Missing required entry: {MAIN_PART}")

        try:
            _register_document_namespaces(raw)
            root = ET.fromstring(raw)
        except ET.ParseError as e:
            raise DocumentDecodeError(f"{MAIN_PART}: {e}") from e

        if root.find("w:body", NAMESPACES) is None:
            raise DocumentDecodeError("w:body element not found")

        logger.debug("Opened DOCX with %d entries", len(entries))
        return cls(entries, _read_part(raw), root)

    @property
    def body(self) -> ET.Element:
        return self.root.find("w:body", NAMESPACES)

    def document_text(self) -> str:
        """Plain text of the body, one line per non-empty paragraph."""
        lines = (paragraph_text(p) for p in iter_paragraphs(self.body))
        return "\n".join(line for line in lines if line.strip())

    def serialize_document(self) -> str:
        """Render document.xml, keeping the original root element text.

        The body is serialized with ElementTree and spliced into the original
        XML so the root's namespace declarations and mc:Ignorable list stay
        exactly as the authoring tool wrote them.
        """
        body = self.body
        tail, body.tail = body.tail, None
        try:
            body_xml = ET.tostring(body, encoding="unicode")
        finally:
            body.tail = tail

        match = _RE_BODY.search(self._document_xml)
        if match:
            return (
                self._document_xml[:match.start()]
                + body_xml
                + self._document_xml[match.end():]
            )

        logger.warning("w:body not found in original XML text; re-serializing whole part")
        return ET.tostring(self.root, encoding="unicode", xml_declaration=True)

    def to_bytes(self) -> bytes:
        """Write the container back, replacing only the main part."""
        document = self.serialize_document().encode("utf-8")
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as output_zip:
            for info, content in self._entries:
                if info.filename == MAIN_PART:
                    output_zip.writestr(info, document)
                else:
                    output_zip.writestr(info, content)
        return buffer.getvalue()
