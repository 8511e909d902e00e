"""
Statutory balance-sheet chart (Russian form 0710001, lines 1100-1700).

Maps each 4-digit line code to the canonical record field it feeds, and holds
the line patterns the extraction strategies match against. Changes to the
national chart are made here, not in the extraction code.
"""

import re
from typing import Dict, Optional

STATUTORY_TABLE_VERSION = "0710001-2011"

STATUTORY_CODES: Dict[str, str] = {
    # I. Non-current assets
    "1100": "non_current_assets",
    "1110": "intangible_assets",
    "1120": "research_results",
    "1150": "fixed_assets",
    "1170": "long_term_investments",
    "1180": "deferred_tax_assets",
    "1190": "other_non_current_assets",
    # II. Current assets
    "1200": "current_assets",
    "1210": "inventory",
    "1220": "vat_on_purchases",
    "1230": "accounts_receivable",
    "1240": "short_term_investments",
    "1250": "cash_and_equivalents",
    "1260": "other_current_assets",
    # III. Capital and reserves
    "1300": "equity",
    "1310": "authorized_capital",
    "1320": "treasury_shares",
    "1340": "revaluation_reserve",
    "1350": "additional_capital",
    "1360": "reserve_capital",
    "1370": "retained_earnings",
    # IV. Long-term liabilities
    "1400": "long_term_debt",
    "1410": "long_term_borrowings",
    "1420": "deferred_tax_liabilities",
    "1430": "long_term_provisions",
    "1450": "other_long_term_liabilities",
    # V. Current liabilities
    "1500": "current_liabilities",
    "1510": "short_term_debt",
    "1520": "accounts_payable",
    "1530": "deferred_income",
    "1540": "short_term_provisions",
    "1550": "other_current_liabilities",
    # Balance totals (asset side and liability side are equal by construction)
    "1600": "total_assets",
    "1700": "total_assets",
}


def field_for_code(code: str) -> Optional[str]:
    """Canonical field name for a statutory line code, if known."""
    return STATUTORY_CODES.get(code.strip())


# =============================================================================
# Line patterns
# =============================================================================

# A line holding nothing but a statutory line code
CODE_PATTERN = re.compile(r"\d{4}", re.ASCII)

# Single-line layouts are matched token by token, left to right, shortest
# label first:
#   "<label> <code> <current period> [<earlier periods>...]"
#   "<label> <value>"
TOKEN_PATTERN = re.compile(r"\S+")
NUMERIC_TOKEN_PATTERN = re.compile(r"[\d,.()\-+]+")

# Shortest value text accepted for the "<label> <value>" layout
MIN_UNCODED_VALUE_LENGTH = 3


def is_code_line(line: str) -> bool:
    """Whether a line is a bare 4-digit code."""
    return CODE_PATTERN.fullmatch(line.strip()) is not None
