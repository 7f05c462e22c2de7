"""
Field Extractors

One extractor per part of the bill. Each runs its fallback chains over the
full statement text through a shared FieldMapper and returns an immutable
sub-record. Extractors write disjoint parts of the BillRecord, so the order
they run in does not change the result.

AccountInfoExtractor is separate: it works on the same text but is only
run once per batch of bills, by the caller.
"""

import re
from datetime import date
from typing import Optional

from loguru import logger

from . import patterns
from .field_mapper import (
    FallbackChain,
    FieldMapper,
    PatternMatcher,
    charge_chain,
    label,
    literal_rate,
    split_rate,
)
from .models import AccountInfo, DocumentTotals, ElectricityCharges, GasCharges, ServicePeriod
from .normalizers import parse_date, parse_int


def _days_and_kwh(found: re.Match) -> tuple[int, int]:
    return parse_int(found.group(1)), parse_int(found.group(2))


def _kwh_and_days(found: re.Match) -> tuple[int, int]:
    return parse_int(found.group(2)), parse_int(found.group(1))


def _service_period(found: re.Match) -> Optional[tuple[Optional[date], Optional[date]]]:
    start, end = parse_date(found.group(1)), parse_date(found.group(2))
    if start is None and end is None:
        return None
    return start, end


def _rate_and_charge(mapper: FieldMapper, chain: FallbackChain) -> tuple[float, float]:
    charge = mapper.value(chain)
    if charge is None:
        return 0.0, 0.0
    return charge.rate, charge.charge


class StatementExtractor:
    """Statement date, service period, billing days and kWh used."""

    STATEMENT_DATE = label(
        'statement_date', patterns.STATEMENT_DATE,
        convert=lambda m: parse_date(m.group(1)),
    )
    # Neither date readable counts as not found
    SERVICE_PERIOD = label('service_period', patterns.SERVICE_PERIOD, convert=_service_period)
    # Either order: "30 days 3990 kwh" or "3990 kwh 30 days"
    DAYS_AND_USAGE = FallbackChain('service_period.days', [
        PatternMatcher(patterns.DAYS_THEN_KWH, convert=_days_and_kwh),
        PatternMatcher(patterns.KWH_THEN_DAYS, convert=_kwh_and_days),
    ])
    AVERAGE_DAILY_TEMP = label(
        'average_daily_temp', patterns.AVERAGE_DAILY_TEMP,
        convert=lambda m: parse_int(m.group(1)),
    )

    def extract(self, mapper: FieldMapper) -> tuple[Optional[date], ServicePeriod, int]:
        """
        Returns:
            (statement_date, service_period, electricity kWh)
        """
        statement_date = mapper.value(self.STATEMENT_DATE)
        start, end = mapper.value(self.SERVICE_PERIOD, default=(None, None))
        days, usage = mapper.value(self.DAYS_AND_USAGE, default=(0, 0))

        return statement_date, ServicePeriod(start=start, end=end, days=days), usage

    def average_daily_temp(self, mapper: FieldMapper) -> Optional[int]:
        return mapper.value(self.AVERAGE_DAILY_TEMP)


class ElectricityExtractor:
    """Electricity charges: basic service, delivery, transition, SBC, supply, subtotals."""

    BASIC_SERVICE = label('electricity.basic_service_charge', patterns.ELECTRIC_BASIC_SERVICE)

    DELIVERY = charge_chain(
        'electricity.delivery', patterns.ELECTRIC_DELIVERY,
        monthly=[(patterns.ELECTRIC_DELIVERY_MONTHLY, split_rate)],
        quantity=parse_int,
    )
    TRANSITION = charge_chain(
        'electricity.transition', patterns.ELECTRIC_TRANSITION,
        monthly=[(patterns.ELECTRIC_TRANSITION_MONTHLY, split_rate)],
        quantity=parse_int,
    )
    SBC = charge_chain(
        'electricity.sbc', patterns.ELECTRIC_SBC,
        monthly=[(patterns.ELECTRIC_SBC_MONTHLY, split_rate)],
        quantity=parse_int,
    )
    SUPPLY = charge_chain(
        'electricity.supply', patterns.ELECTRIC_SUPPLY,
        monthly=[(patterns.ELECTRIC_SUPPLY_MONTHLY, split_rate)],
        quantity=parse_int,
    )

    TOTAL_DELIVERY = label('electricity.total_delivery', patterns.ELECTRIC_TOTAL_DELIVERY)
    TOTAL_SUPPLY = label('electricity.total_supply', patterns.ELECTRIC_TOTAL_SUPPLY)
    TOTAL_TAXES = label('electricity.total_taxes', patterns.ELECTRIC_TOTAL_TAXES)
    TOTAL_COST = label('electricity.total_cost', patterns.ELECTRIC_TOTAL_COST)

    def extract(self, mapper: FieldMapper, usage: int = 0) -> ElectricityCharges:
        """
        Args:
            mapper: FieldMapper over the statement text
            usage: kWh found by StatementExtractor
        """
        delivery_rate, delivery_charge = _rate_and_charge(mapper, self.DELIVERY)
        transition_rate, transition_charge = _rate_and_charge(mapper, self.TRANSITION)
        sbc_rate, sbc_charge = _rate_and_charge(mapper, self.SBC)
        supply_rate, supply_charge = _rate_and_charge(mapper, self.SUPPLY)

        return ElectricityCharges(
            usage=usage,
            basic_service_charge=mapper.value(self.BASIC_SERVICE, default=0.0),
            delivery_rate=delivery_rate,
            delivery_charge=delivery_charge,
            transition_rate=transition_rate,
            transition_charge=transition_charge,
            sbc_rate=sbc_rate,
            sbc_charge=sbc_charge,
            supply_rate=supply_rate,
            supply_charge=supply_charge,
            total_delivery=mapper.value(self.TOTAL_DELIVERY, default=0.0),
            total_supply=mapper.value(self.TOTAL_SUPPLY, default=0.0),
            total_taxes=mapper.value(self.TOTAL_TAXES, default=0.0),
            total_cost=mapper.value(self.TOTAL_COST, default=0.0),
        )


class GasExtractor:
    """Natural gas usage and charges."""

    USAGE_CCF = label('gas.usage_ccf', patterns.GAS_USAGE_CCF)
    USAGE_THERMS = label('gas.usage_therms', patterns.GAS_USAGE_THERMS)
    BASIC_SERVICE = label('gas.basic_service_charge', patterns.GAS_BASIC_SERVICE)

    DELIVERY = charge_chain(
        'gas.delivery', patterns.GAS_DELIVERY,
        monthly=[(patterns.GAS_DELIVERY_MONTHLY, split_rate)],
    )
    # Two renderings of the monthly supply line: split digits, then a plain decimal
    SUPPLY = charge_chain(
        'gas.supply', patterns.GAS_SUPPLY,
        monthly=[
            (patterns.GAS_SUPPLY_MONTHLY, split_rate),
            (patterns.GAS_SUPPLY_MONTHLY_LITERAL, literal_rate),
        ],
    )

    TOTAL_DELIVERY = label('gas.total_delivery', patterns.GAS_TOTAL_DELIVERY)
    TOTAL_SUPPLY = label('gas.total_supply', patterns.GAS_TOTAL_SUPPLY)
    TOTAL_TAXES = label('gas.total_taxes', patterns.GAS_TOTAL_TAXES)
    TOTAL_COST = label('gas.total_cost', patterns.GAS_TOTAL_COST)

    def extract(self, mapper: FieldMapper) -> GasCharges:
        delivery_rate, delivery_charge = _rate_and_charge(mapper, self.DELIVERY)
        supply_rate, supply_charge = _rate_and_charge(mapper, self.SUPPLY)

        return GasCharges(
            usage_ccf=mapper.value(self.USAGE_CCF, default=0.0),
            usage_therms=mapper.value(self.USAGE_THERMS, default=0.0),
            basic_service_charge=mapper.value(self.BASIC_SERVICE, default=0.0),
            delivery_rate=delivery_rate,
            delivery_charge=delivery_charge,
            supply_rate=supply_rate,
            supply_charge=supply_charge,
            total_delivery=mapper.value(self.TOTAL_DELIVERY, default=0.0),
            total_supply=mapper.value(self.TOTAL_SUPPLY, default=0.0),
            total_taxes=mapper.value(self.TOTAL_TAXES, default=0.0),
            total_cost=mapper.value(self.TOTAL_COST, default=0.0),
        )


class TotalsExtractor:
    """Statement-level totals."""

    TOTAL_ENERGY_CHARGES = label('total_energy_charges', patterns.TOTAL_ENERGY_CHARGES)
    MISCELLANEOUS_CHARGES = label('miscellaneous_charges', patterns.MISCELLANEOUS_CHARGES)
    AMOUNT_DUE = label('amount_due', patterns.AMOUNT_DUE)

    def extract(self, mapper: FieldMapper) -> DocumentTotals:
        return DocumentTotals(
            total_energy_charges=mapper.value(self.TOTAL_ENERGY_CHARGES, default=0.0),
            miscellaneous_charges=mapper.value(self.MISCELLANEOUS_CHARGES, default=0.0),
            amount_due=mapper.value(self.AMOUNT_DUE, default=0.0),
        )


class AccountInfoExtractor:
    """
    Account number, customer name and service address.

    The customer name is the first pair of capitalised words, in document
    order, where neither word is in NAME_EXCLUSIONS. Pairs are taken the
    way a global regex search finds them, without overlap.
    """

    def __init__(self, exclusions: frozenset = patterns.NAME_EXCLUSIONS):
        self.exclusions = exclusions
        self.account_regex = re.compile(patterns.ACCOUNT_NUMBER)
        self.name_regex = re.compile(patterns.CUSTOMER_NAME)
        self.address_regex = re.compile(patterns.SERVICE_ADDRESS, re.IGNORECASE)

    def extract(self, text: str) -> AccountInfo:
        text = text or ""

        info = AccountInfo(
            account_number=self._account_number(text),
            customer_name=self._customer_name(text),
            service_address=self._service_address(text),
        )

        if not info.account_number:
            logger.debug("No account number found")
        return info

    def _account_number(self, text: str) -> str:
        found = self.account_regex.search(text)
        return found.group(1).strip() if found else ""

    def _customer_name(self, text: str) -> str:
        for candidate in self.name_regex.findall(text):
            words = candidate.split()
            if len(words) != 2:
                continue
            if any(word in self.exclusions or len(word) < 2 for word in words):
                continue
            return candidate
        return ""

    def _service_address(self, text: str) -> str:
        found = self.address_regex.search(text)
        if not found:
            return ""
        return f"{found.group(1)}, {found.group(2)}".strip()
