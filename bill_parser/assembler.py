"""
Bill Record Assembler

Turns the text of one statement into a BillRecord.

Order of work:
1. Statement date, service period, billing days and kWh
2. Electricity charges
3. Natural gas charges
4. Statement totals
5. Billing days from the service period dates, when the text had none

assemble() never raises for a str input. Anything not found keeps its
default and is listed in BillRecord.missing_fields.
"""

from loguru import logger

from .extractors import (
    AccountInfoExtractor,
    ElectricityExtractor,
    GasExtractor,
    StatementExtractor,
    TotalsExtractor,
)
from .field_mapper import FieldMapper
from .models import AccountInfo, BillRecord, ServicePeriod


class BillRecordAssembler:
    """
    Runs every field extractor over a statement and merges the results.

    Usage:
        assembler = BillRecordAssembler()
        record = assembler.assemble(text, "bill-2025-02.pdf")
        print(record.electricity.delivery_rate)
    """

    def __init__(self):
        self.statement = StatementExtractor()
        self.electricity = ElectricityExtractor()
        self.gas = GasExtractor()
        self.totals = TotalsExtractor()

    def assemble(self, text: str, file_name: str = "") -> BillRecord:
        """
        Extract a BillRecord from statement text.

        Args:
            text: Text layer of the statement
            file_name: Source file, kept for provenance only

        Returns:
            A new BillRecord
        """
        mapper = FieldMapper(text)

        statement_date, period, usage = self.statement.extract(mapper)
        electricity = self.electricity.extract(mapper, usage=usage)
        gas = self.gas.extract(mapper)
        totals = self.totals.extract(mapper)
        average_daily_temp = self.statement.average_daily_temp(mapper)

        period = derive_days(period)

        record = BillRecord(
            file_name=file_name,
            statement_date=statement_date,
            service_period=period,
            average_daily_temp=average_daily_temp,
            electricity=electricity,
            gas=gas,
            total_energy_charges=totals.total_energy_charges,
            miscellaneous_charges=totals.miscellaneous_charges,
            amount_due=totals.amount_due,
            missing_fields=mapper.missing,
        )

        logger.debug(
            f"{file_name or '<text>'}: {len(mapper.results) - len(record.missing_fields)}"
            f"/{len(mapper.results)} fields resolved"
        )
        return record


def derive_days(period: ServicePeriod) -> ServicePeriod:
    """Fill in billing days from start/end when the text did not state them."""
    if period.days or not (period.start and period.end):
        return period

    return ServicePeriod(
        start=period.start,
        end=period.end,
        days=abs((period.end - period.start).days),
    )


# Convenience functions

_assembler = BillRecordAssembler()
_account_extractor = AccountInfoExtractor()


def extract_bill_data(text: str, file_name: str = "") -> BillRecord:
    """Extract a BillRecord from statement text."""
    return _assembler.assemble(text, file_name)


def extract_account_info(text: str) -> AccountInfo:
    """Extract account number, customer name and service address."""
    return _account_extractor.extract(text)
