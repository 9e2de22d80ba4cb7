"""Document type detection and text extraction dispatch.

Uploads are classified from their mime type first and their file extension
second:

* ``application/pdf`` → ``pdf``
* ``image/*`` → ``image`` (routed to the OCR client)
* Word documents → ``docx``
* anything else → ``text``; the bytes are decoded as UTF-8 and the upload is
  rejected when that fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from orchard_desk.extractors import image as image_extractor
from orchard_desk.extractors import pdf as pdf_extractor
from orchard_desk.extractors import word as word_extractor


DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".gif", ".webp"}
PLACEHOLDER_TEXT = "(No text content extracted from this file)"


class ExtractionError(RuntimeError):
    """Raised when a backend fails to read a supported document."""


class UnsupportedDocumentError(ExtractionError):
    """Raised when the document type has no extraction backend."""


@dataclass
class DetectedDocument:
    kind: str
    requires_ocr: bool = False


def detect(mime_type: str | None, filename: str) -> DetectedDocument:
    mime = (mime_type or "").lower()
    suffix = Path(filename).suffix.lower()
    if mime == "application/pdf" or suffix == ".pdf":
        return DetectedDocument(kind="pdf")
    if mime.startswith("image/") or suffix in IMAGE_SUFFIXES:
        return DetectedDocument(kind="image", requires_ocr=True)
    # a wrong mime type is common for Word uploads, trust the extension
    if mime == DOCX_MIME or suffix == ".docx":
        return DetectedDocument(kind="docx")
    return DetectedDocument(kind="text")


def _decode_text(data: bytes, filename: str, mime_type: str | None) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UnsupportedDocumentError(
            f"Unsupported file type for {filename} ({mime_type or 'unknown'}). "
            "Supported: PDF, Images, DOCX, TXT"
        ) from exc


def clean_text(text: str) -> str:
    text = text.replace("\0", "")
    if not text.strip():
        return PLACEHOLDER_TEXT
    return text


def extract_text(data: bytes, mime_type: str | None, filename: str) -> str:
    """Normalise ``data`` to plain text according to its detected type."""

    detected = detect(mime_type, filename)
    if detected.kind == "text":
        return clean_text(_decode_text(data, filename, mime_type))

    try:
        if detected.kind == "pdf":
            text = pdf_extractor.extract(data)
        elif detected.kind == "docx":
            text = word_extractor.extract(data)
        else:
            text = image_extractor.extract(data, filename)
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionError(f"{detected.kind} extraction failed for {filename}: {exc}") from exc
    return clean_text(text)
