"""
Output Package

CSV export of extracted bills.

Usage:
    from output import CSVWriter

    writer = CSVWriter()
    writer.write(Path("bills.csv"), records, account_info)
"""

from .csv_writer import (
    CSVWriter,
    CSVConfig,
    ValueFormatter,
    COLUMNS,
    HEADERS,
    by_statement_date,
)

__all__ = [
    'CSVWriter',
    'CSVConfig',
    'ValueFormatter',
    'COLUMNS',
    'HEADERS',
    'by_statement_date',
]
