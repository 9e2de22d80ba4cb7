"""OCR integration hooks.

Image uploads are turned into text through an :class:`OCRClient`.  The
default client is a no-op so that the service starts without a local
tesseract installation; :func:`orchard_desk.app.create_app` installs a
:class:`TesseractOCRClient` when ``pytesseract`` can reach the binary.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Protocol

import pytesseract
from PIL import Image


class OCRClient(Protocol):
    """Contract for OCR integrations."""

    def extract_text(self, data: bytes, filename: str) -> "OCRExtractionResult":
        """Extract text content from the provided image bytes."""


@dataclass(slots=True)
class OCRExtractionResult:
    """Container returned by :class:`OCRClient` implementations."""

    text: str
    confidence: float | None = None
    metadata: dict[str, object] | None = None


class NoOpOCRClient:
    """Fallback OCR client used when no provider is configured."""

    def extract_text(self, data: bytes, filename: str) -> OCRExtractionResult:  # pragma: no cover - trivial
        return OCRExtractionResult(
            text="",
            confidence=None,
            metadata={
                "provider": "noop",
                "reason": "OCR integration not configured",
                "filename": filename,
            },
        )


class TesseractOCRClient:
    """Local OCR through the tesseract command line tool."""

    def __init__(self, languages: str = "eng+tha") -> None:
        self._languages = languages

    @staticmethod
    def available() -> bool:
        try:
            pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError):
            return False
        return True

    def extract_text(self, data: bytes, filename: str) -> OCRExtractionResult:
        with Image.open(io.BytesIO(data)) as image:
            text = pytesseract.image_to_string(image, lang=self._languages)
        return OCRExtractionResult(
            text=text,
            metadata={"provider": "tesseract", "languages": self._languages, "filename": filename},
        )


_client: OCRClient = NoOpOCRClient()


def configure_ocr_client(client: OCRClient) -> None:
    """Install the OCR client used by the ingestion pipeline."""

    global _client
    _client = client


def get_ocr_client() -> OCRClient:
    """Return the currently configured OCR client."""

    return _client
