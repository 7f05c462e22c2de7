"""
Multi-Month Reconciler

A bill whose service period crosses a month boundary lists some charges
once per calendar month:

    1297 kwh 07894 @ 0. Delivery charge - Jan 102.39
    2693 kwh 08012 @ 0. Delivery charge - Feb 215.76

Downstream consumers want one rate and one charge per bill, so the lines
are folded into a usage-weighted rate and a summed charge. The charge is
the sum of the printed amounts, never rate × usage, so the export matches
the statement to the cent.
"""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ChargeLine:
    """One '{quantity} @ {rate} = {charge}' line of a statement."""
    quantity: float
    rate: float
    charge: float


@dataclass(frozen=True)
class ReconciledCharge:
    """Rate/charge pair for a whole bill."""
    rate: float
    charge: float
    periods: int = 1                    # Number of lines folded together


def reconcile(lines: Iterable[ChargeLine]) -> ReconciledCharge:
    """
    Fold per-month charge lines into a single rate and charge.

    rate = Σ(quantity × rate) / Σ quantity  (0 when Σ quantity is 0)
    charge = Σ charge

    Args:
        lines: Charge lines in document order

    Returns:
        ReconciledCharge with periods set to the number of lines
    """
    total_quantity = 0.0
    weighted = 0.0
    total_charge = 0.0
    periods = 0

    for line in lines:
        total_quantity += line.quantity
        weighted += line.quantity * line.rate
        total_charge += line.charge
        periods += 1

    rate = weighted / total_quantity if total_quantity else 0.0

    return ReconciledCharge(rate=rate, charge=total_charge, periods=periods)
