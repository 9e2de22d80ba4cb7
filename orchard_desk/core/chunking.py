from __future__ import annotations

import re

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def split_paragraphs(text: str) -> list[str]:
    """Split ``text`` on blank lines, dropping empty chunks.

    Text without any paragraph break comes back as a single chunk.
    """

    chunks = [chunk for chunk in _PARAGRAPH_BREAK.split(text) if chunk.strip()]
    if not chunks and text.strip():
        chunks = [text]
    return chunks
