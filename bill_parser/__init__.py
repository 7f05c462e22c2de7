"""
Bill Parser Package

This package turns the text layer of a NYSEG statement into structured data.
It includes:
- Normalization of numbers, split-digit rates and dates
- Fallback chains that resolve one field from several text renderings
- Reconciliation of per-month charge lines
- Extractors for electricity, gas, totals and account identity
- The assembler that builds a BillRecord

Usage:
    from bill_parser import extract_bill_data, extract_account_info

    record = extract_bill_data(text, "statement.pdf")
    print(record.electricity.delivery_rate, record.amount_due)

    account = extract_account_info(text)
    print(account.account_number)
"""

from .models import (
    AccountInfo,
    BillRecord,
    DocumentTotals,
    ElectricityCharges,
    GasCharges,
    ServicePeriod,
)

from .normalizers import (
    DateNormalizer,
    NumberNormalizer,
    parse_date,
    parse_int,
    parse_number,
    reconstruct_rate,
)

from .reconciler import (
    ChargeLine,
    ReconciledCharge,
    reconcile,
)

from .field_mapper import (
    ExtractedField,
    FallbackChain,
    FieldMapper,
    PatternMatcher,
    ChargeLineMatcher,
    RepeatedChargeMatcher,
)

from .extractors import (
    AccountInfoExtractor,
    ElectricityExtractor,
    GasExtractor,
    StatementExtractor,
    TotalsExtractor,
)

from .assembler import (
    BillRecordAssembler,
    extract_account_info,
    extract_bill_data,
)

__all__ = [
    # Models
    'AccountInfo',
    'BillRecord',
    'DocumentTotals',
    'ElectricityCharges',
    'GasCharges',
    'ServicePeriod',

    # Normalizers
    'DateNormalizer',
    'NumberNormalizer',
    'parse_date',
    'parse_int',
    'parse_number',
    'reconstruct_rate',

    # Reconciler
    'ChargeLine',
    'ReconciledCharge',
    'reconcile',

    # Field Mapper
    'ExtractedField',
    'FallbackChain',
    'FieldMapper',
    'PatternMatcher',
    'ChargeLineMatcher',
    'RepeatedChargeMatcher',

    # Extractors
    'AccountInfoExtractor',
    'ElectricityExtractor',
    'GasExtractor',
    'StatementExtractor',
    'TotalsExtractor',

    # Assembler
    'BillRecordAssembler',
    'extract_account_info',
    'extract_bill_data',
]
