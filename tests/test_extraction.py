"""
Tests for NYSEG Bill Extraction

This module contains unit tests for the bill parser components.
Run with: pytest tests/ -v
"""

import pytest
import random
from pathlib import Path
from datetime import date
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bill_parser.normalizers import (
    DateNormalizer,
    NumberNormalizer,
    parse_date,
    parse_int,
    parse_number,
    reconstruct_rate,
)
from bill_parser.reconciler import ChargeLine, reconcile
from bill_parser.field_mapper import (
    FallbackChain,
    FieldMapper,
    PatternMatcher,
    charge_chain,
    split_rate,
)
from bill_parser.extractors import AccountInfoExtractor, ElectricityExtractor, GasExtractor
from bill_parser.assembler import BillRecordAssembler, derive_days, extract_bill_data
from bill_parser.models import BillRecord, ServicePeriod
from bill_parser import patterns

from sample_bills import MULTI_MONTH_BILL, SAMPLE_BILL


class TestNumberNormalizer:
    """Tests for number parsing."""

    def test_plain_decimal(self):
        assert parse_number("314.97") == 314.97

    def test_thousands_separator(self):
        assert parse_number("1,234.56") == 1234.56

    def test_trailing_punctuation(self):
        assert parse_number("314.97.") == 314.97

    def test_garbage(self):
        assert parse_number("abc") == 0.0
        assert parse_number("") == 0.0
        assert parse_number(None) == 0.0

    def test_parse_int(self):
        assert parse_int("3,990") == 3990
        assert parse_int("30") == 30
        assert parse_int("kwh") == 0
        assert NumberNormalizer.parse_int(None) == 0

    def test_parse_int_beyond_float_range(self):
        assert parse_int("9" * 400) == 0
        assert parse_int("9" * 5000) == 0


class TestRateReconstruction:
    """Tests for split-digit rates ('07894 @ 0.' means 0.07894)."""

    def test_reconstruct(self):
        assert reconstruct_rate("07894") == 0.07894

    def test_long_rate(self):
        assert reconstruct_rate("08395531") == 0.08395531

    def test_empty_digits(self):
        assert reconstruct_rate("") == 0
        assert reconstruct_rate(None) == 0

    def test_zero_digits(self):
        assert reconstruct_rate("0") == 0


class TestDateNormalizer:
    """Tests for date parsing."""

    def setup_method(self):
        self.normalizer = DateNormalizer()

    def test_short_format(self):
        assert self.normalizer.parse("01/09/25") == date(2025, 1, 9)

    def test_year_pivot(self):
        assert parse_date("01/09/51") == date(1951, 1, 9)
        assert parse_date("01/09/49") == date(2049, 1, 9)
        assert parse_date("01/09/50") == date(2050, 1, 9)

    def test_long_format(self):
        assert self.normalizer.parse("February 11, 2025") == date(2025, 2, 11)

    def test_long_format_without_comma(self):
        assert self.normalizer.parse("March 3 2024") == date(2024, 3, 3)

    def test_impossible_date(self):
        assert self.normalizer.parse("13/45/25") is None

    def test_not_a_month(self):
        assert self.normalizer.parse("Invoice 11, 2025") is None

    def test_empty_input(self):
        assert self.normalizer.parse("") is None
        assert self.normalizer.parse(None) is None

    def test_custom_pivot(self):
        normalizer = DateNormalizer(year_pivot=30)
        assert normalizer.parse("06/01/35") == date(1935, 6, 1)


class TestReconciler:
    """Tests for multi-month charge reconciliation."""

    def test_weighted_rate(self):
        result = reconcile([
            ChargeLine(quantity=100, rate=0.05, charge=5.00),
            ChargeLine(quantity=200, rate=0.08, charge=16.00),
        ])
        assert result.rate == pytest.approx(0.07)
        assert result.charge == 21.00
        assert result.periods == 2

    def test_charge_is_summed_not_recomputed(self):
        result = reconcile([
            ChargeLine(quantity=1297, rate=0.07894, charge=102.39),
            ChargeLine(quantity=2693, rate=0.08012, charge=215.76),
        ])
        assert result.charge == pytest.approx(318.15)

    def test_zero_quantity(self):
        result = reconcile([ChargeLine(quantity=0, rate=0.05, charge=1.00)])
        assert result.rate == 0
        assert result.charge == 1.00

    def test_no_lines(self):
        result = reconcile([])
        assert result.rate == 0
        assert result.charge == 0
        assert result.periods == 0


class TestFallbackChain:
    """Tests for resolving a field from several text renderings."""

    def setup_method(self):
        self.chain = charge_chain(
            'electricity.delivery', patterns.ELECTRIC_DELIVERY,
            monthly=[(patterns.ELECTRIC_DELIVERY_MONTHLY, split_rate)],
            quantity=parse_int,
        )

    def test_single_period_wins(self):
        text = (
            "3990 kwh 07894 @ 0. Delivery charge 314.97\n"
            "1297 kwh 07000 @ 0. Delivery charge - Jan 90.79\n"
        )
        result = self.chain.resolve(text)
        assert result.method == "single_period"
        assert result.value.rate == 0.07894
        assert result.value.charge == 314.97

    def test_zero_rate_falls_through(self):
        text = (
            "3990 kwh 0 @ 0. Delivery charge 0.00\n"
            "1297 kwh 07894 @ 0. Delivery charge - Jan 102.39\n"
            "2693 kwh 08012 @ 0. Delivery charge - Feb 215.76\n"
        )
        result = self.chain.resolve(text)
        assert result.method == "multi_month"
        assert result.value.periods == 2
        assert result.value.charge == pytest.approx(318.15)

    def test_only_sentinel_keeps_last_match(self):
        result = self.chain.resolve("3990 kwh 0 @ 0. Delivery charge 5.00")
        assert result.is_valid
        assert result.value.rate == 0
        assert result.value.charge == 5.00
        assert result.warnings

    def test_not_found(self):
        result = self.chain.resolve("nothing here")
        assert not result.is_valid
        assert result.method == "not_found"

    def test_label_pattern(self):
        chain = FallbackChain('amount_due', [PatternMatcher(patterns.AMOUNT_DUE)])
        assert chain.resolve("Amount Due: $1,234.56").value == 1234.56

    def test_field_mapper_tracks_missing(self):
        mapper = FieldMapper("Amount Due: $10.00")
        found = FallbackChain('amount_due', [PatternMatcher(patterns.AMOUNT_DUE)])
        assert mapper.value(found) == 10.00
        assert mapper.value(self.chain, default=None) is None
        assert mapper.missing == ('electricity.delivery',)


ELECTRIC = ElectricityExtractor
GAS = GasExtractor

# (chain, text, method, rate, charge)
CHARGE_TIERS = [
    (ELECTRIC.DELIVERY, "3990 kwh 07894 @ 0. Delivery charge 314.97",
     "single_period", 0.07894, 314.97),
    (ELECTRIC.DELIVERY, "1297 kwh 07894 @ 0. Delivery charge - Jan 102.39",
     "multi_month", 0.07894, 102.39),
    (ELECTRIC.TRANSITION, "3990 kwh 0012500 @ 0. Transition charge 4.99",
     "single_period", 0.00125, 4.99),
    (ELECTRIC.TRANSITION, "1297 kwh 0012500 @ 0. Transition charge - Jan 1.62",
     "multi_month", 0.00125, 1.62),
    (ELECTRIC.SBC, "3990 kwh 006516 @ 0. SBC charge 26.00",
     "single_period", 0.006516, 26.00),
    (ELECTRIC.SBC, "1297 kwh 006516 @ 0. SBC charge - Jan 8.45",
     "multi_month", 0.006516, 8.45),
    (ELECTRIC.SUPPLY, "Supply charge 3990 kwh 08395531 @ 0. 334.98",
     "single_period", 0.08395531, 334.98),
    (ELECTRIC.SUPPLY, "Supply charge - Jan 1000 kwh 08000 @ 0. 80.00",
     "multi_month", 0.08, 80.00),
    (GAS.DELIVERY, "Delivery charge 98.2 therm 41234 @ 0. 40.49",
     "single_period", 0.41234, 40.49),
    (GAS.DELIVERY, "Delivery charge - Apr 16.5 therm 73822 @ 0. 12.18",
     "multi_month", 0.73822, 12.18),
    (GAS.SUPPLY, "Supply charge 98.2 therm 612520 @ 0. 60.15",
     "single_period", 0.61252, 60.15),
    (GAS.SUPPLY, "Supply charge - Apr 16.5 therm 61252 @ 0. 10.11",
     "multi_month", 0.61252, 10.11),
    (GAS.SUPPLY, "Supply charge - April 18.5 therm @ 0.61252 11.33",
     "multi_month", 0.61252, 11.33),
]


class TestChargeChains:
    """Every rendering of every compound charge."""

    @pytest.mark.parametrize("chain,text,method,rate,charge", CHARGE_TIERS)
    def test_tier(self, chain, text, method, rate, charge):
        result = chain.resolve(text)
        assert result.name == chain.name
        assert result.method == method
        assert result.value.rate == pytest.approx(rate)
        assert result.value.charge == pytest.approx(charge)

    def test_gas_supply_tiers_in_order(self):
        split = "Supply charge - Apr 16.5 therm 61252 @ 0. 10.11"
        literal = "Supply charge - May 18.5 therm @ 0.70000 12.95"
        result = GAS.SUPPLY.resolve(split + "\n" + literal)
        assert result.pattern_used == patterns.GAS_SUPPLY_MONTHLY
        assert result.value.charge == pytest.approx(10.11)

    def test_kwh_before_days(self):
        record = BillRecordAssembler().assemble("3990 kwh 30 days")
        assert record.service_period.days == 30
        assert record.electricity.usage == 3990


class TestGasExtractor:
    """Tests for natural gas charges."""

    def test_literal_monthly_supply_rate(self):
        text = "Supply charge - April 18.5 therm @ 0.61252 11.33"
        gas = GasExtractor().extract(FieldMapper(text))
        assert gas.supply_rate == pytest.approx(0.61252)
        assert gas.supply_charge == 11.33

    def test_basic_service_after_heading(self):
        text = (
            "Basic service charge 19.00\n"
            "Natural Gas Delivery Charges\n"
            "Basic service charge 21.50\n"
        )
        gas = GasExtractor().extract(FieldMapper(text))
        assert gas.basic_service_charge == 21.50


class TestBillRecordAssembler:
    """Tests for whole-statement extraction."""

    def setup_method(self):
        self.assembler = BillRecordAssembler()

    def test_end_to_end_scenario(self):
        text = (
            "Statement Date: February 11, 2025\n"
            "01/09/25 - 02/07/25\n"
            "30 days 3990 kwh\n"
            "Basic service charge 19.00\n"
            "3990 kwh 07894 @ 0. Delivery charge 314.97\n"
        )
        record = self.assembler.assemble(text)
        assert record.statement_date == date(2025, 2, 11)
        assert record.service_period.days == 30
        assert record.electricity.usage == 3990
        assert record.electricity.basic_service_charge == 19.00
        assert record.electricity.delivery_rate == 0.07894
        assert record.electricity.delivery_charge == 314.97

    def test_full_statement(self):
        record = self.assembler.assemble(SAMPLE_BILL, "feb.pdf")
        assert record.file_name == "feb.pdf"
        assert record.service_period.start == date(2025, 1, 9)
        assert record.service_period.end == date(2025, 2, 7)
        assert record.average_daily_temp == 24
        assert record.electricity.transition_rate == 0.00125
        assert record.electricity.sbc_rate == 0.006516
        assert record.electricity.supply_rate == 0.08395531
        assert record.electricity.supply_charge == 334.98
        assert record.electricity.total_cost == 712.28
        assert record.gas.usage_ccf == 95.3
        assert record.gas.usage_therms == 98.2
        assert record.gas.basic_service_charge == 21.50
        assert record.gas.delivery_rate == 0.41234
        assert record.gas.supply_rate == 0.61252
        assert record.gas.total_cost == 125.24
        assert record.total_energy_charges == 837.52
        assert record.miscellaneous_charges == 2.50
        assert record.amount_due == 840.02
        assert record.missing_fields == ()

    def test_multi_month_statement(self):
        record = self.assembler.assemble(MULTI_MONTH_BILL)
        expected_delivery = (1297 * 0.07894 + 2693 * 0.08012) / 3990
        expected_supply = (1297 * 0.08395 + 2693 * 0.08100) / 3990
        assert record.electricity.delivery_rate == pytest.approx(expected_delivery)
        assert record.electricity.delivery_charge == pytest.approx(318.15)
        assert record.electricity.supply_rate == pytest.approx(expected_supply)
        assert record.electricity.supply_charge == pytest.approx(327.01)
        assert record.gas.supply_rate == pytest.approx(0.61252)
        assert record.gas.supply_charge == 11.33

    def test_derived_days(self):
        record = self.assembler.assemble("Service 01/09/25 - 02/07/25")
        assert record.service_period.days == 29

    def test_derive_days_keeps_explicit_days(self):
        period = ServicePeriod(start=date(2025, 1, 9), end=date(2025, 2, 7), days=30)
        assert derive_days(period).days == 30

    def test_empty_text(self):
        record = self.assembler.assemble("")
        assert record.statement_date is None
        assert record.electricity.usage == 0
        assert record.amount_due == 0
        assert 'statement_date' in record.missing_fields

    def test_junk_text(self):
        record = self.assembler.assemble("@@ 0. kwh %%% 99/99/99 \x00 Delivery charge")
        assert record.statement_date is None
        assert record.service_period.start is None

    def test_unreadable_service_period_is_missing(self):
        record = self.assembler.assemble("99/99/99 - 99/99/99")
        assert record.service_period.start is None
        assert record.service_period.end is None
        assert 'service_period' in record.missing_fields

    def test_huge_monthly_usage(self):
        record = self.assembler.assemble(
            "9" * 400 + " kwh 07894 @ 0. Delivery charge - Jan 102.39\n"
        )
        assert record.electricity.delivery_charge == 102.39

    @pytest.mark.parametrize("text", [
        "9" * 400 + " days " + "9" * 400 + " kwh",
        "9" * 5000 + " kwh 07894 @ 0. Delivery charge - Jan 102.39",
        "Supply charge - Jan " + "9" * 400 + " kwh 08000 @ 0. " + "9" * 400,
        "Supply charge - Apr " + "9" * 400 + " therm @ 0.5 1.00",
        "Delivery charge - Apr 16.5 therm " + "0" * 400 + " @ 0. 12.18",
        "Statement Date: February 30, 2025\nAverage daily temp " + "9" * 400,
    ])
    def test_huge_numbers(self, text):
        assert isinstance(self.assembler.assemble(text), BillRecord)

    @pytest.mark.parametrize("seed", range(25))
    def test_random_tokens(self, seed):
        rng = random.Random(seed)
        tokens = [
            "kwh", "days", "therm", "@", "0.", "@ 0.", "-", "Jan", "$", ",", ".",
            "\n", " ", "99", "07894", "01/09/25", "Delivery charge", "Supply charge",
            "Transition charge", "SBC charge", "Statement Date:", "Amount Due:",
            "9" * 350,
        ]
        text = " ".join(rng.choice(tokens) for _ in range(300))
        assert isinstance(self.assembler.assemble(text), BillRecord)

    @pytest.mark.parametrize("seed", range(10))
    def test_random_bytes(self, seed):
        rng = random.Random(seed)
        text = bytes(rng.randrange(256) for _ in range(2000)).decode('latin-1')
        assert isinstance(self.assembler.assemble(text), BillRecord)

    def test_idempotent(self):
        assert extract_bill_data(SAMPLE_BILL, "a.pdf") == extract_bill_data(SAMPLE_BILL, "a.pdf")

    def test_to_dict(self):
        data = extract_bill_data(SAMPLE_BILL).to_dict()
        assert data['statement_date'] == "2025-02-11"
        assert data['service_period']['start'] == "2025-01-09"
        assert data['electricity']['usage'] == 3990


class TestAccountInfoExtractor:
    """Tests for account identity."""

    def setup_method(self):
        self.extractor = AccountInfoExtractor()

    def test_full_statement(self):
        info = self.extractor.extract(SAMPLE_BILL)
        assert info.account_number == "1234-5678-901"
        assert info.customer_name == "JOHN SMITH"
        assert info.service_address == "123 MAIN ST, ITHACA NY 14850"

    def test_skips_excluded_words(self):
        text = "NYSEG SERVICE\nJANE DOE\n"
        assert self.extractor.extract(text).customer_name == "JANE DOE"

    def test_nothing_found(self):
        info = self.extractor.extract("no identity here")
        assert info.is_empty
        assert info.to_dict() == {
            'account_number': "",
            'customer_name': "",
            'service_address': "",
        }
