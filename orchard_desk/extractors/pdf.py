from __future__ import annotations

import io

import pypdf


def extract(data: bytes) -> str:
    """Concatenate the text of every page; pages without text are skipped."""

    reader = pypdf.PdfReader(io.BytesIO(data))
    parts: list[str] = []
    for page in reader.pages:
        page_text = (page.extract_text() or "").strip()
        if page_text:
            parts.append(page_text)
    return "\n\n".join(parts)
