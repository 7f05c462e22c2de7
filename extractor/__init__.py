"""
Extractor Package

Reads the text layer of bill PDFs in the layout the bill patterns expect.

Usage:
    from extractor import PDFTextExtractor, TextExtractionError

    extractor = PDFTextExtractor()
    try:
        text = extractor.extract_text(Path("statement.pdf")).text
    except TextExtractionError as e:
        print(e.reason)
"""

from .pdf_text import PDFTextExtractor
from .utils import (
    ExtractionResult,
    PAGE_BREAK,
    TextExtractionError,
    get_pdf_info,
    group_lines,
    normalize_text,
)

__all__ = [
    # Main extractor
    'PDFTextExtractor',

    # Data structures
    'ExtractionResult',
    'TextExtractionError',
    'PAGE_BREAK',

    # Utility functions
    'get_pdf_info',
    'group_lines',
    'normalize_text',
]
