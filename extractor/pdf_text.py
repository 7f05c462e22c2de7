"""
PDF Text Layer Extraction Module

This module pulls the text layer out of a bill PDF. It uses a two-library
approach:
1. pdfplumber (primary)
2. PyMuPDF/fitz (fallback)

Both backends are read word by word in content-stream order (not sorted
by position) and lines are rebuilt from vertical jumps. Reading order is
what produces the "07894 @ 0." rendering of rates that the bill patterns
expect, so sorting words by position would break rate extraction.

A document that yields no text at all raises TextExtractionError. The
batch pipeline records it as a per-document error and moves on.
"""

from pathlib import Path

from loguru import logger

from .utils import (
    ExtractionResult,
    PAGE_BREAK,
    TextExtractionError,
    get_pdf_info,
    group_lines,
    normalize_text,
)


class PDFTextExtractor:
    """
    Extracts text from PDF text layers using multiple backends.

    Usage:
        extractor = PDFTextExtractor()
        result = extractor.extract_text(Path("statement.pdf"))
        print(result.text)
    """

    BACKENDS = ("pdfplumber", "pymupdf")

    def __init__(
        self,
        primary_backend: str = "pdfplumber",
        line_tolerance: float = 5.0,
        page_break: str = PAGE_BREAK,
    ):
        """
        Initialize the text extractor.

        Args:
            primary_backend: Which library to try first ("pdfplumber" or "pymupdf")
            line_tolerance: Vertical movement (points) that starts a new line
            page_break: Separator appended after every page
        """
        if primary_backend not in self.BACKENDS:
            raise ValueError(f"Unknown backend: {primary_backend}")

        self.primary_backend = primary_backend
        self.line_tolerance = line_tolerance
        self.page_break = page_break
        self._check_dependencies()

    def _check_dependencies(self):
        """Verify required libraries are available."""
        self.has_pdfplumber = False
        self.has_pymupdf = False

        try:
            import pdfplumber  # noqa: F401
            self.has_pdfplumber = True
        except ImportError:
            logger.warning("pdfplumber not installed - using PyMuPDF only")

        try:
            import fitz  # noqa: F401  (PyMuPDF)
            self.has_pymupdf = True
        except ImportError:
            logger.warning("PyMuPDF not installed - using pdfplumber only")

        if not self.has_pdfplumber and not self.has_pymupdf:
            raise RuntimeError(
                "No PDF text extraction library available. "
                "Install pdfplumber or PyMuPDF: pip install pdfplumber PyMuPDF"
            )

    def _backend_order(self) -> list[str]:
        available = {
            "pdfplumber": self.has_pdfplumber,
            "pymupdf": self.has_pymupdf,
        }
        order = [self.primary_backend] + [b for b in self.BACKENDS if b != self.primary_backend]
        return [b for b in order if available[b]]

    def extract_text(self, pdf_path: Path) -> ExtractionResult:
        """
        Extract the text layer of a PDF.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            ExtractionResult with normalized text

        Raises:
            TextExtractionError: The file is not a readable PDF or no
                backend produced any text
        """
        pdf_path = Path(pdf_path)
        info = get_pdf_info(pdf_path)
        if not info['readable']:
            raise TextExtractionError(pdf_path, info.get('error', 'Cannot read PDF file'))

        logger.info(f"Extracting text from: {pdf_path.name}")

        failures = []
        for backend in self._backend_order():
            try:
                if backend == "pdfplumber":
                    result = self._extract_with_pdfplumber(pdf_path)
                else:
                    result = self._extract_with_pymupdf(pdf_path)
            except Exception as e:
                # Both libraries raise their own exception types for corrupt files
                logger.warning(f"{backend} failed on {pdf_path.name}: {e}")
                failures.append(f"{backend}: {e}")
                continue

            if result.text.strip():
                result.text = normalize_text(result.text)
                result.warnings.extend(failures)
                return result

            logger.debug(f"{backend} returned no text for {pdf_path.name}")
            failures.append(f"{backend}: no text")

        raise TextExtractionError(pdf_path, "; ".join(failures) or "no text layer")

    def _extract_with_pdfplumber(self, pdf_path: Path) -> ExtractionResult:
        """Extract text using pdfplumber."""
        import pdfplumber

        pages = []
        warnings = []

        with pdfplumber.open(pdf_path) as pdf:
            for i, page in enumerate(pdf.pages, start=1):
                words = page.extract_words(use_text_flow=True, keep_blank_chars=False)
                if not words:
                    warnings.append(f"Page {i} returned no text")
                text = group_lines(
                    ((w['text'], w['top']) for w in words),
                    tolerance=self.line_tolerance,
                )
                pages.append(text + self.page_break)

        return ExtractionResult(
            text=''.join(pages),
            backend='pdfplumber',
            page_count=len(pages),
            metadata={'pages_extracted': len(pages) - len(warnings)},
            warnings=warnings,
        )

    def _extract_with_pymupdf(self, pdf_path: Path) -> ExtractionResult:
        """Extract text using PyMuPDF (fitz)."""
        import fitz

        pages = []
        warnings = []

        with fitz.open(pdf_path) as doc:
            for i, page in enumerate(doc, start=1):
                # (x0, y0, x1, y1, word, block_no, line_no, word_no)
                words = page.get_text("words", sort=False)
                if not words:
                    warnings.append(f"Page {i} returned no text")
                text = group_lines(
                    ((w[4], w[1]) for w in words),
                    tolerance=self.line_tolerance,
                )
                pages.append(text + self.page_break)

        return ExtractionResult(
            text=''.join(pages),
            backend='pymupdf',
            page_count=len(pages),
            metadata={'pages_extracted': len(pages) - len(warnings)},
            warnings=warnings,
        )

