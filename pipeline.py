"""
Bill Batch Pipeline

Runs a batch of statements through text extraction and the bill parser.

Per batch:
1. Get the text of every document (PDF text layer, or a saved .txt dump)
2. Documents whose text cannot be read become DocumentErrors; the rest go on
3. Assemble a BillRecord per document
4. Take account identity from the first document that has an account number
5. Keep one bill per statement date (a later document replaces an earlier one)
6. Sort bills by statement date

Text extraction can run on a thread pool. Results are merged in input
order, so the batch outcome does not depend on which file finishes first.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

import yaml
from loguru import logger

from bill_parser import AccountInfo, BillRecord, BillRecordAssembler, AccountInfoExtractor
from extractor import PAGE_BREAK, PDFTextExtractor, TextExtractionError
from output import by_statement_date


TEXT_SUFFIXES = {'.txt'}


@dataclass
class PipelineConfig:
    """Configuration for the bill pipeline."""

    # Text extraction
    backend: str = 'pdfplumber'         # pdfplumber or pymupdf
    line_tolerance: float = 5.0         # Points of vertical movement that start a new line
    page_break_marker: str = PAGE_BREAK

    # Batch
    workers: int = 1
    include_account_info: bool = True

    def __post_init__(self):
        if self.backend not in PDFTextExtractor.BACKENDS:
            raise ValueError(
                f"Unknown backend '{self.backend}' "
                f"(expected one of: {', '.join(PDFTextExtractor.BACKENDS)})"
            )

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, config_path: Path) -> 'PipelineConfig':
        """
        Load settings from a YAML file.

        The file may hold the settings at top level or under a 'pipeline' key.
        """
        logger.info(f"Loading configuration from: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{config_path}: expected a mapping of settings")

        return cls.from_dict(data.get('pipeline', data))

    def to_dict(self) -> dict:
        return {
            'backend': self.backend,
            'line_tolerance': self.line_tolerance,
            'page_break_marker': self.page_break_marker,
            'workers': self.workers,
            'include_account_info': self.include_account_info,
        }


@dataclass
class DocumentError:
    """A document that could not be processed."""
    file_name: str
    error: str

    def to_dict(self) -> dict:
        return {'file_name': self.file_name, 'error': self.error}


@dataclass
class BatchResult:
    """Bills, account identity and failures of one batch."""
    bills: list[BillRecord] = field(default_factory=list)
    account_info: AccountInfo = field(default_factory=AccountInfo)
    errors: list[DocumentError] = field(default_factory=list)

    def add_bill(self, record: BillRecord) -> None:
        """Add a bill, replacing an earlier one with the same statement date."""
        if record.statement_date is not None:
            for i, existing in enumerate(self.bills):
                if existing.statement_date == record.statement_date:
                    logger.info(
                        f"{record.file_name} replaces {existing.file_name} "
                        f"(statement date {record.statement_date})"
                    )
                    self.bills[i] = record
                    return
        self.bills.append(record)

    def sort(self) -> None:
        self.bills = by_statement_date(self.bills)

    def to_dict(self) -> dict[str, Any]:
        return {
            'account_info': self.account_info.to_dict(),
            'bills': [b.to_dict() for b in self.bills],
            'errors': [e.to_dict() for e in self.errors],
        }


class BillPipeline:
    """
    Extracts bills from a batch of documents.

    Usage:
        pipeline = BillPipeline(PipelineConfig(workers=4))
        batch = pipeline.process_files(paths)
        for bill in batch.bills:
            print(bill.statement_date, bill.amount_due)
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.assembler = BillRecordAssembler()
        self.account_extractor = AccountInfoExtractor()
        self._text_extractor: Optional[PDFTextExtractor] = None

    @property
    def text_extractor(self) -> PDFTextExtractor:
        # Created on first PDF so text-only batches don't need a PDF backend
        if self._text_extractor is None:
            self._text_extractor = PDFTextExtractor(
                primary_backend=self.config.backend,
                line_tolerance=self.config.line_tolerance,
                page_break=self.config.page_break_marker,
            )
        return self._text_extractor

    def load_text(self, path: Path) -> str:
        """
        Text of one document.

        Raises:
            TextExtractionError: The document has no readable text
        """
        path = Path(path)
        if path.suffix.lower() in TEXT_SUFFIXES:
            try:
                return path.read_text(encoding='utf-8', errors='replace')
            except OSError as e:
                raise TextExtractionError(path, str(e)) from e

        return self.text_extractor.extract_text(path).text

    def _load(self, path: Path) -> tuple[Path, Union[str, TextExtractionError]]:
        try:
            return path, self.load_text(path)
        except TextExtractionError as e:
            return path, e

    def process_text(self, text: str, file_name: str, batch: BatchResult) -> BillRecord:
        """
        Parse one document's text into the batch.

        Account identity is only extracted while the batch has no account
        number yet.
        """
        record = self.assembler.assemble(text, file_name)

        if self.config.include_account_info and not batch.account_info.account_number:
            info = self.account_extractor.extract(text)
            if info.account_number:
                logger.info(f"Account {info.account_number} found in {file_name}")
                batch.account_info = info

        batch.add_bill(record)
        return record

    def process_texts(self, documents: Iterable[tuple[str, str]]) -> BatchResult:
        """
        Process already extracted text.

        Args:
            documents: (file_name, text) pairs
        """
        batch = BatchResult()
        for file_name, text in documents:
            self.process_text(text, file_name, batch)
        batch.sort()
        return batch

    def process_files(
        self,
        paths: Iterable[Path],
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> BatchResult:
        """
        Process documents from disk.

        Args:
            paths: PDF or .txt files
            progress_callback: Called as (done, total, file_name) after
                each document

        Returns:
            BatchResult with bills sorted by statement date
        """
        paths = [Path(p) for p in paths]
        total = len(paths)
        batch = BatchResult()

        workers = max(1, int(self.config.workers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for done, (path, loaded) in enumerate(executor.map(self._load, paths), start=1):
                if isinstance(loaded, TextExtractionError):
                    logger.warning(f"Skipping {path.name}: {loaded.reason}")
                    batch.errors.append(DocumentError(path.name, loaded.reason))
                else:
                    self.process_text(loaded, path.name, batch)

                if progress_callback:
                    progress_callback(done, total, path.name)

        batch.sort()
        logger.info(
            f"Processed {total} documents: {len(batch.bills)} bills, "
            f"{len(batch.errors)} errors"
        )
        return batch


def find_documents(input_path: Path, recursive: bool = False) -> list[Path]:
    """PDF and .txt files at a path, sorted by name."""
    input_path = Path(input_path)

    if input_path.is_file():
        return [input_path]

    if input_path.is_dir():
        pattern = '**/*' if recursive else '*'
        return sorted(
            p for p in input_path.glob(pattern)
            if p.is_file() and p.suffix.lower() in TEXT_SUFFIXES | {'.pdf'}
        )

    raise ValueError(f"Path not found: {input_path}")


def process_batch(paths: Iterable[Path], config: Optional[PipelineConfig] = None) -> BatchResult:
    """Quick function to process a batch of documents."""
    return BillPipeline(config).process_files(paths)
