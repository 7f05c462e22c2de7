"""
Utility functions shared by the PDF text extractors.

This module provides:
- The ExtractionResult container and the TextExtractionError raised for
  documents that cannot be read at all
- Text normalization that keeps the line structure the bill patterns rely on
- Line grouping of positioned words
- A cheap PDF header check

Why this exists:
The bill patterns are written against the text as a browser PDF viewer
emits it: items in content-stream order, joined by spaces, with a newline
whenever the baseline moves. Both backends are funnelled into that shape
here.
"""

import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from loguru import logger


PAGE_BREAK = "\n\n--- PAGE BREAK ---\n\n"


class TextExtractionError(Exception):
    """A document produced no text (unreadable, corrupt, not a PDF)."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path.name}: {reason}")


@dataclass
class ExtractionResult:
    """
    Text extracted from one document.
    """
    text: str                                       # Full text, pages joined by PAGE_BREAK
    backend: str                                    # pdfplumber, pymupdf or text
    page_count: int = 0
    metadata: dict = field(default_factory=dict)
    warnings: list = field(default_factory=list)    # Non-fatal issues encountered


def normalize_text(text: str) -> str:
    """
    Normalize extracted text for pattern matching.

    - Unicode NFC
    - Ligatures split into letters
    - Unusual spaces turned into plain spaces
    - Control characters removed (newlines and tabs kept)

    Line breaks are preserved.
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFC', text)

    replacements = {
        'ﬁ': 'fi',
        'ﬂ': 'fl',
        'ﬀ': 'ff',
        'ﬃ': 'ffi',
        'ﬄ': 'ffl',
        '–': '-', '—': '-',  # En-dash and em-dash
        '\u00a0': ' ',      # Non-breaking space
        '\u2002': ' ',      # En space
        '\u2003': ' ',      # Em space
        '\u2009': ' ',      # Thin space
    }
    for char, replacement in replacements.items():
        text = text.replace(char, replacement)

    text = ''.join(
        char for char in text
        if char in '\n\t' or not unicodedata.category(char).startswith('C')
    )
    return text


def group_lines(words: Iterable[tuple[str, float]], tolerance: float = 5.0) -> str:
    """
    Join positioned words into text, starting a new line whenever the
    vertical position moves by more than tolerance.

    Args:
        words: (text, y) pairs in content-stream order
        tolerance: Vertical distance in points treated as the same line

    Returns:
        Words joined by spaces, with a trailing space per word
    """
    parts = []
    last_y: Optional[float] = None

    for text, y in words:
        if last_y is not None and abs(y - last_y) > tolerance:
            parts.append('\n')
        parts.append(text + ' ')
        last_y = y

    return ''.join(parts)


def get_pdf_info(pdf_path: Path) -> dict[str, Any]:
    """
    Basic checks on a PDF file before parsing it.
    """
    info = {
        'path': str(pdf_path),
        'filename': pdf_path.name,
        'size_bytes': 0,
        'exists': False,
        'readable': False,
    }

    try:
        if pdf_path.exists():
            info['exists'] = True
            info['size_bytes'] = pdf_path.stat().st_size

            with open(pdf_path, 'rb') as f:
                header = f.read(8)
                info['readable'] = header.startswith(b'%PDF')
                if not info['readable']:
                    info['error'] = 'File does not appear to be a valid PDF'
        else:
            info['error'] = 'File not found'
    except OSError as e:
        logger.debug(f"Could not inspect {pdf_path}: {e}")
        info['error'] = str(e)

    return info
