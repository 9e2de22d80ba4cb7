from __future__ import annotations

from orchard_desk.infrastructure.ocr import get_ocr_client


def extract(data: bytes, filename: str) -> str:
    return get_ocr_client().extract_text(data, filename).text
