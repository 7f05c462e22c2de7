"""
CSV Writer Module

Writes bill records to the fixed-column CSV layout used by existing
exports.

Layout:
    Account Information                 (only when account info is known)
    Account Number,1234-5678-901
    Customer Name,JOHN SMITH
    Service Address,"12 MAIN ST, ITHACA NY 14850"
    <blank line>
    Statement Date,Service Start,...   (header)
    2025-02-11,2025-01-09,...          (one row per bill, by statement date)

Number formatting is part of the contract. Each column has a fixed number
of decimals, and values are rounded half-up on their exact binary value
(0.125 → "0.13" with 2 decimals), so files compare equal to the ones
produced before.
"""

import csv
import io
import math
from dataclasses import dataclass
from datetime import date
from decimal import Context, Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from loguru import logger

from bill_parser.models import AccountInfo, BillRecord


# Enough digits to quantize any finite float
_WIDE = Context(prec=400)


@dataclass
class CSVConfig:
    """Configuration for CSV output."""
    include_account_info: bool = True
    encoding: str = 'utf-8'
    line_terminator: str = '\n'


class ValueFormatter:
    """Formats cell values."""

    @staticmethod
    def fixed(value: float, places: int) -> str:
        """
        Format a number with a fixed number of decimals, rounding half-up.
        """
        if value is None:
            return ""
        value = float(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value == 0:
            value = 0.0  # no "-0.00"

        quantum = Decimal(1).scaleb(-places)
        rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE)
        return format(rounded, 'f')

    @staticmethod
    def iso_date(value: Optional[date]) -> str:
        """ISO date, blank when unknown."""
        return value.isoformat() if value else ""

    @staticmethod
    def plain(value: Any) -> str:
        return "" if value is None else str(value)


def _fixed(places: int) -> Callable[[Any], str]:
    return lambda value: ValueFormatter.fixed(value, places)


_money = _fixed(2)

# (header, accessor, formatter)
COLUMNS: list[tuple[str, Callable[[BillRecord], Any], Callable[[Any], str]]] = [
    ('Statement Date', lambda b: b.statement_date, ValueFormatter.iso_date),
    ('Service Start', lambda b: b.service_period.start, ValueFormatter.iso_date),
    ('Service End', lambda b: b.service_period.end, ValueFormatter.iso_date),
    ('Days', lambda b: b.service_period.days, ValueFormatter.plain),
    ('Avg Daily Temp (°F)', lambda b: b.average_daily_temp, ValueFormatter.plain),
    # Electricity
    ('Electric kWh', lambda b: b.electricity.usage, ValueFormatter.plain),
    ('Electric Basic Service ($)', lambda b: b.electricity.basic_service_charge, _money),
    ('Electric Delivery Rate ($/kWh)', lambda b: b.electricity.delivery_rate, _fixed(6)),
    ('Electric Delivery ($)', lambda b: b.electricity.delivery_charge, _money),
    ('Electric Transition Rate ($/kWh)', lambda b: b.electricity.transition_rate, _fixed(7)),
    ('Electric Transition ($)', lambda b: b.electricity.transition_charge, _money),
    ('Electric SBC Rate ($/kWh)', lambda b: b.electricity.sbc_rate, _fixed(6)),
    ('Electric SBC ($)', lambda b: b.electricity.sbc_charge, _money),
    ('Electric Supply Rate ($/kWh)', lambda b: b.electricity.supply_rate, _fixed(8)),
    ('Electric Supply ($)', lambda b: b.electricity.supply_charge, _money),
    ('Electric Delivery Total ($)', lambda b: b.electricity.total_delivery, _money),
    ('Electric Supply Total ($)', lambda b: b.electricity.total_supply, _money),
    ('Electric Taxes ($)', lambda b: b.electricity.total_taxes, _money),
    ('Electric Total ($)', lambda b: b.electricity.total_cost, _money),
    # Gas
    ('Gas CCF', lambda b: b.gas.usage_ccf, _fixed(1)),
    ('Gas Therms', lambda b: b.gas.usage_therms, _fixed(2)),
    ('Gas Basic Service ($)', lambda b: b.gas.basic_service_charge, _money),
    ('Gas Delivery Rate ($/therm)', lambda b: b.gas.delivery_rate, _fixed(5)),
    ('Gas Delivery ($)', lambda b: b.gas.delivery_charge, _money),
    ('Gas Supply Rate ($/therm)', lambda b: b.gas.supply_rate, _fixed(6)),
    ('Gas Supply ($)', lambda b: b.gas.supply_charge, _money),
    ('Gas Delivery Total ($)', lambda b: b.gas.total_delivery, _money),
    ('Gas Supply Total ($)', lambda b: b.gas.total_supply, _money),
    ('Gas Taxes ($)', lambda b: b.gas.total_taxes, _money),
    ('Gas Total ($)', lambda b: b.gas.total_cost, _money),
    # Totals
    ('Miscellaneous Charges ($)', lambda b: b.miscellaneous_charges, _money),
    ('Total Charges ($)', lambda b: b.total_energy_charges, _money),
    ('Amount Due ($)', lambda b: b.amount_due, _money),
]

HEADERS = [header for header, _, _ in COLUMNS]


def by_statement_date(records: Iterable[BillRecord]) -> list[BillRecord]:
    """Sort bills by statement date; bills without one go last, in input order."""
    return sorted(
        records,
        key=lambda b: (b.statement_date is None, b.statement_date or date.min),
    )


class CSVWriter:
    """
    Writes bill records as CSV.

    Usage:
        writer = CSVWriter()
        content = writer.to_string(records, account_info)
        writer.write(Path("bills.csv"), records, account_info)
    """

    def __init__(self, config: Optional[CSVConfig] = None):
        self.config = config or CSVConfig()

    def format_row(self, record: BillRecord) -> list[str]:
        return [fmt(get(record)) for _, get, fmt in COLUMNS]

    def to_string(
        self,
        records: Iterable[BillRecord],
        account_info: Optional[AccountInfo] = None,
    ) -> str:
        """
        Render records (and the account preamble) as CSV text.

        Args:
            records: Bills in any order
            account_info: Account identity for the preamble

        Returns:
            CSV content without a trailing newline
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator=self.config.line_terminator)

        if self.config.include_account_info and account_info and not account_info.is_empty:
            writer.writerow(['Account Information'])
            if account_info.account_number:
                writer.writerow(['Account Number', account_info.account_number])
            if account_info.customer_name:
                writer.writerow(['Customer Name', account_info.customer_name])
            if account_info.service_address:
                writer.writerow(['Service Address', account_info.service_address])
            buffer.write(self.config.line_terminator)

        writer.writerow(HEADERS)
        for record in by_statement_date(records):
            writer.writerow(self.format_row(record))

        content = buffer.getvalue()
        if content.endswith(self.config.line_terminator):
            content = content[:-len(self.config.line_terminator)]
        return content

    def write(
        self,
        output_path: Path,
        records: Iterable[BillRecord],
        account_info: Optional[AccountInfo] = None,
    ) -> Path:
        """Write CSV to a file, creating parent directories."""
        records = list(records)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        content = self.to_string(records, account_info)
        with open(output_path, 'w', encoding=self.config.encoding, newline='') as f:
            f.write(content)

        logger.info(f"Wrote {len(records)} bills to {output_path}")
        return output_path
