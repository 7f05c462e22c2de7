"""
Bill data structures.

Every record is a frozen dataclass built once per document by the
assembler. Numeric fields default to 0 and dates to None, so a record that
went through extraction is always complete, even when the text matched
nothing.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Optional


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ServicePeriod:
    """Billing period covered by a statement."""
    start: Optional[date] = None
    end: Optional[date] = None
    days: int = 0                       # From the text, or derived from start/end

    def to_dict(self) -> dict[str, Any]:
        return {
            'start': _iso(self.start),
            'end': _iso(self.end),
            'days': self.days,
        }


@dataclass(frozen=True)
class ElectricityCharges:
    """Electricity usage, rates and charges of one statement."""
    usage: int = 0                      # kWh
    basic_service_charge: float = 0.0
    delivery_rate: float = 0.0          # $/kWh
    delivery_charge: float = 0.0
    transition_rate: float = 0.0
    transition_charge: float = 0.0
    sbc_rate: float = 0.0               # System benefits charge
    sbc_charge: float = 0.0
    supply_rate: float = 0.0
    supply_charge: float = 0.0
    total_delivery: float = 0.0
    total_supply: float = 0.0
    total_taxes: float = 0.0
    total_cost: float = 0.0


@dataclass(frozen=True)
class GasCharges:
    """Natural gas usage, rates and charges of one statement."""
    usage_ccf: float = 0.0
    usage_therms: float = 0.0
    basic_service_charge: float = 0.0
    delivery_rate: float = 0.0          # $/therm
    delivery_charge: float = 0.0
    supply_rate: float = 0.0
    supply_charge: float = 0.0
    total_delivery: float = 0.0
    total_supply: float = 0.0
    total_taxes: float = 0.0
    total_cost: float = 0.0


@dataclass(frozen=True)
class DocumentTotals:
    """Statement-level amounts that belong to neither service."""
    total_energy_charges: float = 0.0
    miscellaneous_charges: float = 0.0
    amount_due: float = 0.0


@dataclass(frozen=True)
class BillRecord:
    """
    Everything extracted from one bill.

    missing_fields lists the dotted names of fields no pattern matched
    (e.g. 'gas.supply'), in extraction order.
    """
    file_name: str
    statement_date: Optional[date] = None
    service_period: ServicePeriod = field(default_factory=ServicePeriod)
    average_daily_temp: Optional[int] = None
    electricity: ElectricityCharges = field(default_factory=ElectricityCharges)
    gas: GasCharges = field(default_factory=GasCharges)
    total_energy_charges: float = 0.0
    miscellaneous_charges: float = 0.0
    amount_due: float = 0.0
    missing_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            'file_name': self.file_name,
            'statement_date': _iso(self.statement_date),
            'service_period': self.service_period.to_dict(),
            'average_daily_temp': self.average_daily_temp,
            'electricity': asdict(self.electricity),
            'gas': asdict(self.gas),
            'total_energy_charges': self.total_energy_charges,
            'miscellaneous_charges': self.miscellaneous_charges,
            'amount_due': self.amount_due,
            'missing_fields': list(self.missing_fields),
        }


@dataclass(frozen=True)
class AccountInfo:
    """Customer identity, shared by every bill of one account."""
    account_number: str = ""
    customer_name: str = ""
    service_address: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.account_number or self.customer_name or self.service_address)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
