"""
Normalizers Module

This module turns the raw numeric and date tokens found in bill text into
typed values.

What normalization does:
- Numbers → float ("1,234.56" → 1234.56), 0.0 when unparsable
- Split-digit rates → float ("07894" next to "@ 0." → 0.07894)
- Dates → datetime.date ("01/09/25", "February 11, 2025")

Why this matters:
The PDF text layer of a NYSEG statement does not come out in reading order.
A rate printed as "@ 0.07894" is emitted as "07894 @ 0." because the digits
after the decimal point are a separate text item positioned before the
"0." literal. Rates must be reassembled before they can be parsed.

None of these functions raise. A value that cannot be read is returned as
the type's default (0 / None) and the field is treated as not found.
"""

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser
from loguru import logger


# Leading decimal literal, the same prefix a lenient float parser accepts
_NUMBER_PREFIX = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')

_SHORT_DATE = re.compile(r'(\d{2})/(\d{2})/(\d{2})(?!\d)')
_LONG_DATE = re.compile(r'(\w+)\s+(\d{1,2}),?\s+(\d{4})')

# Two-digit years above this are 19xx, the rest 20xx
YEAR_PIVOT = 50

_month_names = date_parser.parserinfo()


class NumberNormalizer:
    """Parses numeric tokens from bill text."""

    @staticmethod
    def parse_number(value: Optional[str]) -> float:
        """
        Parse a number, ignoring thousands separators.

        Only the leading numeric part is read, so trailing punctuation
        picked up by a greedy pattern ("314.97.") does not spoil the value.

        Returns:
            Parsed float, or 0.0 for None/empty/unparsable input
        """
        if not value:
            return 0.0

        cleaned = str(value).replace(',', '').strip()
        match = _NUMBER_PREFIX.match(cleaned)
        if not match:
            return 0.0

        try:
            return float(match.group(0))
        except ValueError:
            return 0.0

    @staticmethod
    def parse_int(value: Optional[str]) -> int:
        """Parse an integer count (kWh, days). Returns 0 on failure."""
        if not value:
            return 0

        cleaned = str(value).replace(',', '').strip()
        match = re.match(r'[+-]?\d+', cleaned)
        if not match:
            return 0

        try:
            number = int(match.group(0))
            # Counts take part in float arithmetic when charges are reconciled
            float(number)
        except (ValueError, OverflowError):
            logger.debug(f"Integer token too long to parse: {cleaned[:20]}...")
            return 0
        return number

    @classmethod
    def reconstruct_rate(cls, digits: Optional[str]) -> float:
        """
        Reassemble a split-digit rate.

        The text layer renders "@ 0.07894" as "07894 @ 0.", so the pattern
        captures "07894" and the leading "0." is put back here.

        Args:
            digits: The digits that belong after the decimal point

        Returns:
            The rate as a float, or 0.0 for empty input
        """
        if not digits:
            return 0.0

        return cls.parse_number('0.' + digits)


class DateNormalizer:
    """Parses the two date notations used on NYSEG statements."""

    def __init__(self, year_pivot: int = YEAR_PIVOT):
        self.year_pivot = year_pivot

    def parse(self, value: Optional[str]) -> Optional[date]:
        """
        Parse a date string.

        Forms tried in order:
        1. MM/DD/YY (service period): "01/09/25" → 2025-01-09
        2. Month DD, YYYY (statement date): "February 11, 2025"

        Returns:
            datetime.date, or None when neither form matches
        """
        if not value:
            return None

        value = str(value)

        short_match = _SHORT_DATE.search(value)
        if short_match:
            month, day, year = (int(g) for g in short_match.groups())
            full_year = 1900 + year if year > self.year_pivot else 2000 + year
            try:
                return date(full_year, month, day)
            except ValueError:
                logger.debug(f"Not a calendar date: {short_match.group(0)}")
                return None

        long_match = _LONG_DATE.search(value)
        if long_match:
            if _month_names.month(long_match.group(1)) is None:
                return None
            try:
                return date_parser.parse(long_match.group(0)).date()
            except (ValueError, OverflowError) as e:
                logger.debug(f"Could not parse date '{long_match.group(0)}': {e}")
                return None

        return None


# Convenience functions

_date_normalizer = DateNormalizer()


def parse_number(value: Optional[str]) -> float:
    """Parse a number, 0.0 when unparsable."""
    return NumberNormalizer.parse_number(value)


def parse_int(value: Optional[str]) -> int:
    """Parse an integer count, 0 when unparsable."""
    return NumberNormalizer.parse_int(value)


def reconstruct_rate(digits: Optional[str]) -> float:
    """Reassemble a split-digit rate ("07894" → 0.07894)."""
    return NumberNormalizer.reconstruct_rate(digits)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an MM/DD/YY or "Month DD, YYYY" date."""
    return _date_normalizer.parse(value)
