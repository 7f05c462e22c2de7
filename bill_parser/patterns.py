"""
Text patterns for NYSEG statements.

Patterns are written against the text layer as the PDF extractor emits it:
items joined by spaces, a newline whenever the baseline moves, and rates
rendered as '{digits} @ 0.' (see normalizers.reconstruct_rate).

Charge line patterns capture (quantity, rate, charge) as groups 1-3.
"""

# Both ends of a split-digit rate: "07894 @ 0."
SPLIT_RATE = r'(\d+)\s*@\s*0\.'

# Amount after a label, optional dollar sign
AMOUNT = r'\$?([\d,.]+)'


# --- Statement ---

STATEMENT_DATE = r'Statement\s+Date:?\s*(\w+\s+\d{1,2},?\s+\d{4})'
SERVICE_PERIOD = r'(\d{2}/\d{2}/\d{2})\s*-\s*(\d{2}/\d{2}/\d{2})'
DAYS_THEN_KWH = r'(\d+)\s*days\s+(\d+)\s*kwh'
KWH_THEN_DAYS = r'(\d+)\s*kwh\s+(\d+)\s*days'
AVERAGE_DAILY_TEMP = r'(?:Average|Avg\.?)\s+daily\s+temp(?:erature)?\s*:?\s*(-?\d+)'


# --- Electricity ---

def kwh_charge_line(charge_label: str, monthly: bool = False) -> str:
    """'{kwh} kwh {digits} @ 0. <label> charge[ - {Month}] {charge}'"""
    month = r'\s*-\s*\w+' if monthly else ''
    return (
        r'(\d+)\s+kwh\s+' + SPLIT_RATE + r'\s*'
        + charge_label + r'\s+charge' + month + r'\s+([\d,.]+)'
    )


ELECTRIC_BASIC_SERVICE = r'Basic\s+service\s+charge\s+([\d,.]+)'

ELECTRIC_DELIVERY = kwh_charge_line(r'Delivery')
ELECTRIC_DELIVERY_MONTHLY = kwh_charge_line(r'Delivery', monthly=True)
ELECTRIC_TRANSITION = kwh_charge_line(r'Transition')
ELECTRIC_TRANSITION_MONTHLY = kwh_charge_line(r'Transition', monthly=True)
ELECTRIC_SBC = kwh_charge_line(r'SBC')
ELECTRIC_SBC_MONTHLY = kwh_charge_line(r'SBC', monthly=True)

# Supply puts the label first: "Supply charge 3990 kwh 08395531 @ 0. 334.98"
ELECTRIC_SUPPLY = r'Supply\s+charge\s+(\d+)\s+kwh\s+' + SPLIT_RATE + r'\s+([\d,.]+)'
ELECTRIC_SUPPLY_MONTHLY = (
    r'Supply\s+charge\s*-\s*\w+\s+(\d+)\s+kwh\s+' + SPLIT_RATE + r'\s+([\d,.]+)'
)

ELECTRIC_TOTAL_DELIVERY = r'Subtotal\s+Electricity\s+Delivery\s+' + AMOUNT
ELECTRIC_TOTAL_SUPPLY = r'Subtotal\s+Electricity\s+Supply\s+' + AMOUNT
ELECTRIC_TOTAL_TAXES = r'Subtotal\s+Electricity\s+Taxes\s+and\s+Surcharges\s+' + AMOUNT
ELECTRIC_TOTAL_COST = r'Total\s+Electricity\s+Cost\s+' + AMOUNT


# --- Natural gas ---

GAS_USAGE_CCF = r'Natural\s+gas\s+used\s*\(ccf\)\s*([\d.]+)'
GAS_USAGE_THERMS = r'Natural\s+gas\s+used\s*\(therm\)\s*([\d.]+)'

# The gas section repeats the electric label, so search after its heading
GAS_BASIC_SERVICE = (
    r'Natural\s+Gas\s+Delivery\s+Charges[\s\S]*?Basic\s+service\s+charge\s+([\d,.]+)'
)


def therm_charge_line(charge_label: str, monthly: bool = False, split: bool = True) -> str:
    """'<label> charge[ - {Month}] {therms} therm {digits} @ 0. {charge}'"""
    month = r'\s*-\s*\w+' if monthly else ''
    rate = r'\s+' + SPLIT_RATE if split else r'\s*@\s*([\d.]+)'
    return (
        charge_label + r'\s+charge' + month + r'\s+([\d.]+)\s+therm'
        + rate + r'\s+([\d,.]+)'
    )


GAS_DELIVERY = therm_charge_line(r'Delivery')
GAS_DELIVERY_MONTHLY = therm_charge_line(r'Delivery', monthly=True)
GAS_SUPPLY = therm_charge_line(r'Supply')
GAS_SUPPLY_MONTHLY = therm_charge_line(r'Supply', monthly=True)
# "Supply charge - April 18.5 therm @ 0.61252 11.33"
GAS_SUPPLY_MONTHLY_LITERAL = therm_charge_line(r'Supply', monthly=True, split=False)

GAS_TOTAL_DELIVERY = r'Subtotal\s+Natural\s+Gas\s+Delivery\s+' + AMOUNT
GAS_TOTAL_SUPPLY = r'Subtotal\s+Natural\s+Gas\s+Supply\s+' + AMOUNT
GAS_TOTAL_TAXES = r'Subtotal\s+Natural\s+Gas\s+Taxes\s+and\s+Surcharges\s+' + AMOUNT
GAS_TOTAL_COST = r'Total\s+Natural\s+Gas\s+Cost\s+' + AMOUNT


# --- Document totals ---

TOTAL_ENERGY_CHARGES = r'Total\s+Energy\s+Charges\s+' + AMOUNT
MISCELLANEOUS_CHARGES = r'(?:Total\s+)?Miscellaneous\s+Charges:?\s+' + AMOUNT
AMOUNT_DUE = r'Amount\s+Due:?\s+' + AMOUNT


# --- Account identity ---

ACCOUNT_NUMBER = r'(\d{4}-\d{4}-\d{3})'

# Case sensitive: names are printed in capitals
CUSTOMER_NAME = r'\b([A-Z][A-Z]+\s+[A-Z][A-Z]+)\b'

STREET_SUFFIX = r'(?:ST|RD|AVE|DR|LN|CT|WAY|BLVD|PL|CIR)'
SERVICE_ADDRESS = (
    r'(\d+\s+[A-Z][A-Z\s]+' + STREET_SUFFIX + r'\.?),?\s*([A-Z][A-Z]+,?\s*NY\s*\d{5})'
)

# Capitalised pairs that are not a person's name
NAME_EXCLUSIONS = frozenset({
    # Street suffixes
    'ST', 'RD', 'AVE', 'DR', 'LN', 'CT', 'WAY', 'BLVD', 'PL', 'CIR',
    'DRIVE', 'STREET', 'ROAD', 'AVENUE', 'LANE', 'COURT',
    # Places
    'BOSTON', 'LANSING', 'NY', 'MA',
    # Utility and billing terms
    'NYSEG', 'SERVICE', 'ACCOUNT', 'STATEMENT', 'BUDGET', 'BILLING', 'PAYMENT',
    'AUTOPAY', 'RESIDENTIAL', 'SUMMARY', 'BALANCE', 'PROJECT', 'SHARE',
    'HEATING', 'FUND', 'PAGE', 'BANK', 'ENERGY', 'ELECTRIC', 'NATURAL', 'GAS',
    'DELIVERY', 'SUPPLY', 'TOTAL', 'AMOUNT',
})
