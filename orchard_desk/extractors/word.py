from __future__ import annotations

import io

from docx import Document


def extract(data: bytes) -> str:
    """Return the raw paragraph text of a DOCX file, tables as pipe rows."""

    document = Document(io.BytesIO(data))
    parts = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                parts.append(" | ".join(cells))
    return "\n\n".join(parts)
