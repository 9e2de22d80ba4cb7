from __future__ import annotations

import io
import sys
from pathlib import Path

import pypdf
import pytest
from docx import Document

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import FakeOCR
from orchard_desk.core.chunking import split_paragraphs
from orchard_desk.core.storage import sanitise_filename, unique_storage_name
from orchard_desk.extractors.detect import (
    DOCX_MIME,
    PLACEHOLDER_TEXT,
    ExtractionError,
    UnsupportedDocumentError,
    detect,
    extract_text,
)
from orchard_desk.infrastructure import configure_ocr_client
from orchard_desk.infrastructure.ocr import NoOpOCRClient


@pytest.fixture(autouse=True)
def reset_ocr():
    yield
    configure_ocr_client(NoOpOCRClient())


def _docx_bytes() -> bytes:
    document = Document()
    document.add_paragraph("Fertiliser schedule")
    document.add_paragraph("")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "March"
    table.rows[0].cells[1].text = "15-15-15"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_detect_prefers_docx_extension_over_wrong_mime():
    assert detect("application/octet-stream", "plan.docx").kind == "docx"
    assert detect(DOCX_MIME, "plan").kind == "docx"
    assert detect("application/pdf", "x").kind == "pdf"
    assert detect("image/jpeg", "x").requires_ocr is True
    assert detect(None, "notes.md").kind == "text"


def test_docx_paragraphs_and_tables():
    text = extract_text(_docx_bytes(), "application/octet-stream", "plan.docx")

    assert text == "Fertiliser schedule\n\nMarch | 15-15-15"


def test_pdf_without_text_gets_placeholder():
    writer = pypdf.PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)

    assert extract_text(buffer.getvalue(), "application/pdf", "scan.pdf") == PLACEHOLDER_TEXT


def test_corrupt_pdf_raises_extraction_error():
    with pytest.raises(ExtractionError) as excinfo:
        extract_text(b"not a pdf", "application/pdf", "broken.pdf")

    assert not isinstance(excinfo.value, UnsupportedDocumentError)
    assert "broken.pdf" in str(excinfo.value)


def test_image_uses_configured_ocr():
    configure_ocr_client(FakeOCR("line one\x00"))

    assert extract_text(b"img", "image/png", "a.png") == "line one"


def test_image_without_ocr_provider_gets_placeholder():
    assert extract_text(b"img", "image/png", "a.png") == PLACEHOLDER_TEXT


def test_undecodable_text_is_unsupported():
    with pytest.raises(UnsupportedDocumentError):
        extract_text(b"\xff\xfe", None, "data.bin")


def test_split_paragraphs():
    assert split_paragraphs("a\n\n b \n \n\nc") == ["a", " b ", "c"]
    assert split_paragraphs("single line") == ["single line"]
    assert split_paragraphs("  \n\n ") == []


def test_filename_sanitising():
    assert sanitise_filename('re:port<1>?.pdf') == "re_port_1__.pdf"
    assert sanitise_filename("../../etc/passwd") == "passwd"
    assert sanitise_filename("") == "unnamed_file"
    assert unique_storage_name("a b.txt").endswith("-a b.txt")
