"""
Statement text used across the test modules.

Text is laid out the way the PDF extractor emits it: one visual line per
line, rates rendered as '{digits} @ 0.'.
"""

SAMPLE_BILL = """NYSEG
Account Number: 1234-5678-901
JOHN SMITH
123 MAIN ST, ITHACA NY 14850
Statement Date: February 11, 2025
Billing period 01/09/25 - 02/07/25
30 days 3990 kwh
Average daily temperature 24
Electricity Delivery Charges
Basic service charge 19.00
3990 kwh 07894 @ 0. Delivery charge 314.97
3990 kwh 0012500 @ 0. Transition charge 4.99
3990 kwh 006516 @ 0. SBC charge 26.00
Subtotal Electricity Delivery $364.96
Supply charge 3990 kwh 08395531 @ 0. 334.98
Subtotal Electricity Supply $334.98
Subtotal Electricity Taxes and Surcharges $12.34
Total Electricity Cost $712.28
Natural gas used (ccf) 95.3
Natural gas used (therm) 98.2
Natural Gas Delivery Charges
Basic service charge 21.50
Delivery charge 98.2 therm 41234 @ 0. 40.49
Subtotal Natural Gas Delivery $61.99
Supply charge 98.2 therm 612520 @ 0. 60.15
Subtotal Natural Gas Supply $60.15
Subtotal Natural Gas Taxes and Surcharges $3.10
Total Natural Gas Cost $125.24
Total Energy Charges $837.52
Miscellaneous Charges $2.50
Amount Due: $840.02
"""

# Service period crosses a month boundary; charges are listed per month
MULTI_MONTH_BILL = """Statement Date: March 12, 2025
02/07/25 - 03/10/25
31 days 3990 kwh
Basic service charge 19.00
1297 kwh 07894 @ 0. Delivery charge - Feb 102.39
2693 kwh 08012 @ 0. Delivery charge - Mar 215.76
Supply charge - Feb 1297 kwh 08395 @ 0. 108.88
Supply charge - Mar 2693 kwh 08100 @ 0. 218.13
Supply charge - April 18.5 therm @ 0.61252 11.33
Amount Due: $676.49
"""


def minimal_bill(statement_date: str, amount_due: str) -> str:
    """Smallest text that still yields a dated bill."""
    return (
        f"Statement Date: {statement_date}\n"
        f"30 days 100 kwh\n"
        f"Amount Due: ${amount_due}\n"
    )
